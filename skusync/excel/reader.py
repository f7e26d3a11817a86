from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..services.tabular import RawTable

"""Workbook reader: .xlsx / .csv files -> raw tables.

Sheets are read without a header (row 0 stays a data row of the raw table);
the core decides what the header is. NaN cells become None.
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "WorkbookReadError",
    "read_workbook",
]

SUPPORTED_SUFFIXES = (".xlsx", ".csv")


class WorkbookReadError(Exception):
    """Raised when a workbook file cannot be read."""


def _na_options(keep_na_strings: Iterable[str] | None) -> tuple[list[str] | None, bool]:
    # pandas 既定の NA 文字列集合から keep_na_strings を除外 (例: サイズ "NA" を残す)
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        custom_na = parsers.STR_NA_VALUES - set(keep_na_strings)
        return list(custom_na), False
    return None, True


def _frame_to_rows(df: pd.DataFrame) -> list[list[Any]]:
    rows: list[list[Any]] = []
    for raw in df.itertuples(index=False, name=None):
        rows.append([None if pd.isna(v) else v for v in raw])
    # 末尾の完全空行は落とす
    while rows and all(v is None for v in rows[-1]):
        rows.pop()
    return rows


def read_workbook(
    path: Path,
    keep_na_strings: Iterable[str] | None = None,
) -> RawTable:
    """Read a workbook into an ordered raw table keyed by sheet name.

    Parameters
    ----------
    path: .xlsx or .csv file (a CSV becomes one sheet named after the file stem)
    keep_na_strings: strings excluded from pandas' default NaN conversion
    """
    if not path.exists():
        raise WorkbookReadError(f"workbook not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise WorkbookReadError(f"unsupported workbook type '{path.suffix}': {path}")

    na_values, keep_default_na = _na_options(keep_na_strings)
    try:
        if suffix == ".csv":
            df = pd.read_csv(
                path, header=None, dtype=object, keep_default_na=keep_default_na, na_values=na_values
            )
            return {path.stem: _frame_to_rows(df)}
        tables: RawTable = {}
        xls = pd.ExcelFile(path)
        for name in xls.sheet_names:
            df = xls.parse(name, header=None, keep_default_na=keep_default_na, na_values=na_values)
            tables[str(name)] = _frame_to_rows(df)
        return tables
    except pd.errors.EmptyDataError:
        return {path.stem: []}
    except (OSError, ValueError) as e:
        raise WorkbookReadError(f"failed to read {path}: {e}") from e
