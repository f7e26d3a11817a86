from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd

"""Workbook writer: raw tables -> .xlsx (one sheet per entry) or .csv (single sheet)."""

__all__ = [
    "write_workbook",
]

# Excel のシート名は 31 文字まで
_MAX_SHEET_NAME = 31


def write_workbook(raw_table: Mapping[str, list[list[Any]]], path: Path) -> Path:
    """Write `raw_table` to `path`; the suffix picks the format.

    For .csv only the last entry is written (data sheets follow config sheets
    in exported tables).
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        if not raw_table:
            path.write_text("", encoding="utf-8")
            return path
        name = list(raw_table)[-1]
        pd.DataFrame(raw_table[name]).to_csv(path, header=False, index=False)
        return path

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        if not raw_table:
            pd.DataFrame().to_excel(writer, sheet_name="Sheet1", header=False, index=False)
        for name, rows in raw_table.items():
            pd.DataFrame(rows).to_excel(
                writer, sheet_name=str(name)[:_MAX_SHEET_NAME], header=False, index=False
            )
    return path
