from __future__ import annotations

from .tabular import CONFIG_SHEET_HEADERS, RawTable

"""Sample workbook shown to first-time users.

Color, Size and Material specifications with three values each, and five
products covering different combinations.
"""

__all__ = [
    "SAMPLE_PRODUCT_SHEET",
    "sample_config_rows",
    "sample_product_rows",
    "sample_raw_table",
]

SAMPLE_PRODUCT_SHEET = "Sample Products"

_SAMPLE_SPECS: list[tuple[str, str, str]] = [
    ("Color", "Red", "R"),
    ("Color", "Blue", "B"),
    ("Color", "Green", "G"),
    ("Size", "Small", "S"),
    ("Size", "Medium", "M"),
    ("Size", "Large", "L"),
    ("Material", "Cotton", "COT"),
    ("Material", "Polyester", "POL"),
    ("Material", "Wool", "WOL"),
]


def sample_config_rows() -> list[list[str]]:
    return [list(CONFIG_SHEET_HEADERS), *[list(row) for row in _SAMPLE_SPECS]]


def sample_product_rows() -> list[list[str]]:
    return [
        ["SKU", "Color", "Size", "Material"],
        ["R-S-COT", "Red", "Small", "Cotton"],
        ["B-M-POL", "Blue", "Medium", "Polyester"],
        ["G-L-WOL", "Green", "Large", "Wool"],
        ["R-L-COT", "Red", "Large", "Cotton"],
        ["B-S-POL", "Blue", "Small", "Polyester"],
    ]


def sample_raw_table() -> RawTable:
    return {
        "Config": sample_config_rows(),
        SAMPLE_PRODUCT_SHEET: sample_product_rows(),
    }
