from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .finding import ValidationReport

"""Run result models: aggregated outcome of one CLI sync/validate run."""

__all__ = [
    "RunResult",
    "SheetStat",
]


@dataclass(frozen=True)
class SheetStat:
    """Per-sheet validation statistics."""
    sheet_name: str
    data_rows: int
    missing_values: int
    duplicate_skus: int


@dataclass(frozen=True)
class RunResult:
    """Aggregated results for the SUMMARY line and the exit code."""
    sheets: int  # 検証したデータシート数
    data_rows: int
    missing_values: int
    duplicate_skus: int
    regenerated_cells: int  # インポート時に書き換えた SKU セル数
    start_time: datetime
    end_time: datetime
    reports: list[ValidationReport] = field(default_factory=list)
    sheet_stats: list[SheetStat] = field(default_factory=list)

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def total_findings(self) -> int:
        return self.missing_values + self.duplicate_skus
