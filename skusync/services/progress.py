from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.finding import ValidationReport

"""Validation progress bar (tqdm, TTY only).

The bar advances once per validated data sheet and shows the running totals of
missing-value and duplicate-SKU findings as its postfix. Outside a TTY the
tracker only counts, so CI logs stay free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts validated sheets and their findings; draws a bar when attached to a TTY."""

    def __init__(self, total_sheets: int, *, description: str = "Validating sheets") -> None:
        self.total_sheets = total_sheets
        self.description = description
        self.sheets_done = 0
        self.missing_values = 0
        self.duplicate_skus = 0
        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self.pbar = tqdm(
                total=total_sheets,
                desc=description,
                unit="sheet",
                leave=True,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def start_sheet(self, sheet_name: str) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({sheet_name})")

    def finish_sheet(self, report: ValidationReport) -> None:
        self.sheets_done += 1
        self.missing_values += len(report.missing_value)
        self.duplicate_skus += len(report.duplicate_sku)
        if self.pbar is None:
            return
        self.pbar.update(1)
        self.pbar.set_description(self.description)
        if self.missing_values or self.duplicate_skus:
            self.pbar.set_postfix(missing=self.missing_values, duplicates=self.duplicate_skus)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
