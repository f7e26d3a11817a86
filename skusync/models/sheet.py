from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .specification import Specification

"""Sheet domain models: cells, column definitions and sheet configuration.

SheetConfig is the one shared mutable structure of the system. Cells are
mutated in place by user edits and by the reactivity engine; the
specification tuple is replaced wholesale by the specification store.
"""

__all__ = [
    "CellData",
    "ColumnDef",
    "ColumnType",
    "SheetConfig",
    "SheetType",
    "cell_text",
]


class SheetType(Enum):
    """Kind of sheet.

    - DATA: product rows with a generated SKU column
    - CONFIG: legacy `Specification | Value | SKU Code` table, never synchronized
    """
    DATA = "data"
    CONFIG = "config"


class ColumnType(Enum):
    """Tag for ColumnDef.

    - SKU: the generated, read-only SKU column (one per data sheet)
    - SPEC: bound to a Specification through `spec_id`
    - FREE: free text, excluded from SKU generation and validation
    """
    SKU = "sku"
    SPEC = "spec"
    FREE = "free"


@dataclass(frozen=True)
class ColumnDef:
    """Definition of one sheet column.

    `spec_id` is a weak reference into the same sheet's specifications and is
    present if and only if the column type is SPEC.
    """
    id: str
    type: ColumnType
    header: str
    spec_id: str | None = None

    def __post_init__(self) -> None:
        if (self.type is ColumnType.SPEC) != (self.spec_id is not None):
            raise ValueError(
                f"column '{self.header}': spec_id must be set exactly when type is 'spec' "
                f"(type={self.type.value}, spec_id={self.spec_id!r})"
            )


def cell_text(cell: CellData | None) -> str:
    """Normalized, trimmed text of a cell.

    `v` wins over `m`; None and NaN read as empty. Integral floats lose their
    `.0` so numeric codes read back from a workbook compare equal to labels.
    """
    if cell is None:
        return ""
    raw = cell.v if cell.v is not None else cell.m
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "TRUE" if raw else "FALSE"
    if isinstance(raw, float):
        if math.isnan(raw):
            return ""
        if raw.is_integer():
            return str(int(raw))
    return str(raw).strip()


@dataclass
class CellData:
    """Spreadsheet cell: value `v`, display text `m`, plus opaque style attributes."""
    v: Any = None
    m: str | None = None
    style: dict[str, Any] = field(default_factory=dict)  # bg/fc 等。このコアでは未使用

    @classmethod
    def of(cls, value: Any) -> CellData:
        """Cell whose value and display text both carry `value`."""
        if value is None:
            return cls()
        if isinstance(value, float) and math.isnan(value):
            return cls()
        return cls(v=value, m=cell_text(cls(v=value)))

    @property
    def text(self) -> str:
        return cell_text(self)


@dataclass
class SheetConfig:
    """One spreadsheet tab.

    Row 0 of `data` is the header row; rows 1.. are data rows. `columns` may be
    empty for header-driven sheets, in which case bindings are derived from
    the header row.
    """
    id: str
    name: str
    type: SheetType
    data: list[list[CellData]] = field(default_factory=list)
    columns: list[ColumnDef] = field(default_factory=list)
    specifications: tuple[Specification, ...] = ()

    @property
    def data_row_indices(self) -> range:
        return range(1, len(self.data))

    @property
    def header_row(self) -> list[CellData]:
        return self.data[0] if self.data else []

    def cell(self, row: int, col: int) -> CellData | None:
        if row < 0 or row >= len(self.data):
            return None
        cells = self.data[row]
        if col < 0 or col >= len(cells):
            return None
        return cells[col]

    def set_cell(self, row: int, col: int, cell: CellData) -> None:
        """Write a cell, padding missing rows/columns with empty cells."""
        while len(self.data) <= row:
            self.data.append([])
        cells = self.data[row]
        while len(cells) <= col:
            cells.append(CellData())
        cells[col] = cell

    def find_specification(self, spec_id: str) -> Specification | None:
        for spec in self.specifications:
            if spec.id == spec_id:
                return spec
        return None
