from __future__ import annotations

from dataclasses import dataclass, field

from .settings import AppSettings

"""Config dataclasses for the skusync command line tool.

These hold the already-validated contents of config/skusync.yml; loading and
schema validation live in skusync/config/loader.py.
"""

__all__ = [
    "AppConfig",
    "ImportOptions",
]


@dataclass(frozen=True)
class ImportOptions:
    """How raw workbook tables are turned into sheets."""
    config_sheet_name: str = "Config"  # 大文字小文字は無視して比較
    sku_header: str = "SKU"
    keep_na_strings: tuple[str, ...] = ("NA",)  # pandas の NaN 変換から除外する文字列


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    settings: AppSettings = field(default_factory=AppSettings)
    import_options: ImportOptions = field(default_factory=ImportOptions)
    logs_directory: str = "./logs"
