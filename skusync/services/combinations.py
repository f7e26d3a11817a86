from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from itertools import product

from ..models.sheet import CellData, SheetConfig
from ..models.specification import Specification
from .binding import BindingKind, resolve_bindings

"""Auto-populate: every combination of the values of a sheet's spec columns.

The first specification in the chosen order changes least often, the last one
changes on every row. Generated rows carry labels only; their SKUs are filled
in by the usual regeneration pass.
"""

__all__ = [
    "PopulateMode",
    "SpecColumn",
    "generate_combinations",
    "spec_columns",
]

SpecColumn = tuple[Specification, int]  # (仕様, 列位置)


class PopulateMode(Enum):
    REPLACE = "replace"
    APPEND = "append"


def spec_columns(sheet: SheetConfig) -> list[SpecColumn]:
    """Spec-bound columns in column order, one per Specification (leftmost wins)."""
    seen: set[str] = set()
    result: list[SpecColumn] = []
    for binding in resolve_bindings(sheet):
        if binding.kind is not BindingKind.SPEC or binding.specification is None:
            continue
        if binding.specification.id in seen:
            continue
        seen.add(binding.specification.id)
        result.append((binding.specification, binding.index))
    return result


def generate_combinations(specs_in_order: Sequence[SpecColumn], width: int) -> list[list[CellData]]:
    """Cartesian product of the value labels, one row of `width` cells per combination.

    Returns no rows when there is no specification or any of them has no values.
    """
    if not specs_in_order or any(not spec.values for spec, _ in specs_in_order):
        return []
    width = max([width, *(col + 1 for _, col in specs_in_order)])
    rows: list[list[CellData]] = []
    for combo in product(*(spec.values for spec, _ in specs_in_order)):
        row = [CellData() for _ in range(width)]
        for (_, col), value in zip(specs_in_order, combo):
            row[col] = CellData.of(value.display_value)
        rows.append(row)
    return rows
