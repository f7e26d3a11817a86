from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Validation findings.

Findings describe detected data-integrity problems. They are values, never
exceptions: a sheet stays editable while it is "invalid".
"""

__all__ = [
    "DuplicateSkuFinding",
    "FindingType",
    "MissingValueFinding",
    "ValidationReport",
]


class FindingType(Enum):
    MISSING_VALUE = "missing-value"
    DUPLICATE_SKU = "duplicate-sku"


@dataclass(frozen=True)
class MissingValueFinding:
    """A spec-bound cell whose text is not a current display value of its specification."""
    row: int
    column: int
    spec_name: str
    offending_value: str

    @property
    def type(self) -> FindingType:
        return FindingType.MISSING_VALUE

    @property
    def message(self) -> str:
        return f'Value "{self.offending_value}" does not exist in specification "{self.spec_name}"'


@dataclass(frozen=True)
class DuplicateSkuFinding:
    """One member row of a cluster of rows sharing the same SKU.

    `rows` is the full sorted cluster so any single finding explains it.
    """
    row: int
    column: int
    sku: str
    rows: tuple[int, ...]

    @property
    def type(self) -> FindingType:
        return FindingType.DUPLICATE_SKU

    @property
    def message(self) -> str:
        others = ", ".join(str(r) for r in self.rows if r != self.row)
        return f'Duplicate SKU "{self.sku}" (also in rows {others})'


@dataclass(frozen=True)
class ValidationReport:
    sheet_id: str
    missing_value: tuple[MissingValueFinding, ...] = ()
    duplicate_sku: tuple[DuplicateSkuFinding, ...] = ()

    @property
    def total(self) -> int:
        return len(self.missing_value) + len(self.duplicate_sku)

    @property
    def is_clean(self) -> bool:
        return self.total == 0

    def all_findings(self) -> list[MissingValueFinding | DuplicateSkuFinding]:
        return [*self.missing_value, *self.duplicate_sku]
