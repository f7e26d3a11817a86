from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ..models.sheet import ColumnDef, ColumnType, SheetConfig, cell_text
from ..models.specification import Specification, new_id

"""Column binding resolver.

Maps a sheet's columns to its specifications and produces, per data row, the
ordered (Specification, selected label) pairs the SKU generator consumes.

Binding strategies:
- Explicit: ColumnDef.spec_id names a Specification of the same sheet. This is
  the canonical strategy.
- Header-driven (compatibility): a sheet with no ColumnDefs binds column 0 as
  the SKU column and every other column whose header text equals a
  Specification name to that Specification.

A spec_id that no longer resolves degrades to a free column. Cleaning up such
orphans is the job of specification deletion, not of this module.
"""

__all__ = [
    "BindingKind",
    "ColumnBinding",
    "MissingSkuColumnError",
    "columns_bound_to",
    "effective_columns",
    "find_sku_column",
    "resolve_bindings",
    "row_pairs",
    "sku_column_index",
]

logger = logging.getLogger(__name__)


class MissingSkuColumnError(Exception):
    """Raised when regeneration is requested on a data sheet without a sku column."""


class BindingKind(Enum):
    SKU = "sku"
    SPEC = "spec"
    FREE = "free"


@dataclass(frozen=True)
class ColumnBinding:
    """Resolved role of one column position."""
    index: int
    kind: BindingKind
    specification: Specification | None = None


def _header_texts(sheet: SheetConfig) -> list[str]:
    return [cell_text(c) for c in sheet.header_row]


def effective_columns(sheet: SheetConfig) -> list[ColumnDef]:
    """Explicit ColumnDefs, or ColumnDefs derived from the header row.

    Derivation mirrors the header-driven strategy, so materializing the result
    onto a sheet keeps every binding intact.
    """
    if sheet.columns:
        return list(sheet.columns)
    by_name = _specs_by_name(sheet.specifications)
    derived: list[ColumnDef] = []
    for index, header in enumerate(_header_texts(sheet)):
        if index == 0:
            derived.append(ColumnDef(id=new_id(), type=ColumnType.SKU, header=header or "SKU"))
            continue
        spec = by_name.get(header)
        if spec is not None:
            derived.append(ColumnDef(id=new_id(), type=ColumnType.SPEC, header=header, spec_id=spec.id))
        else:
            derived.append(ColumnDef(id=new_id(), type=ColumnType.FREE, header=header))
    return derived


def _specs_by_name(specifications: Sequence[Specification]) -> dict[str, Specification]:
    # 同名仕様が複数ある場合は order の小さい方を優先
    by_name: dict[str, Specification] = {}
    for spec in sorted(specifications, key=lambda s: s.order):
        by_name.setdefault(spec.name, spec)
    return by_name


def _resolve_explicit(sheet: SheetConfig) -> list[ColumnBinding]:
    by_id = {spec.id: spec for spec in sheet.specifications}
    bindings: list[ColumnBinding] = []
    for index, column in enumerate(sheet.columns):
        if column.type is ColumnType.SKU:
            bindings.append(ColumnBinding(index, BindingKind.SKU))
        elif column.type is ColumnType.SPEC:
            spec = by_id.get(column.spec_id or "")
            if spec is None:
                logger.debug(
                    f"sheet={sheet.name} column={index} spec_id={column.spec_id} unresolved -> free"
                )
                bindings.append(ColumnBinding(index, BindingKind.FREE))
            else:
                bindings.append(ColumnBinding(index, BindingKind.SPEC, spec))
        elif column.type is ColumnType.FREE:
            bindings.append(ColumnBinding(index, BindingKind.FREE))
        else:  # pragma: no cover - exhaustive over ColumnType
            raise AssertionError(f"unhandled column type: {column.type!r}")
    return bindings


def _resolve_by_header(sheet: SheetConfig) -> list[ColumnBinding]:
    by_name = _specs_by_name(sheet.specifications)
    bindings: list[ColumnBinding] = []
    for index, header in enumerate(_header_texts(sheet)):
        if index == 0:
            bindings.append(ColumnBinding(index, BindingKind.SKU))
            continue
        spec = by_name.get(header) if header else None
        if spec is None:
            bindings.append(ColumnBinding(index, BindingKind.FREE))
        else:
            bindings.append(ColumnBinding(index, BindingKind.SPEC, spec))
    return bindings


def resolve_bindings(sheet: SheetConfig) -> list[ColumnBinding]:
    """Resolve every column position of `sheet` to sku, spec or free."""
    if sheet.columns:
        return _resolve_explicit(sheet)
    return _resolve_by_header(sheet)


def find_sku_column(sheet: SheetConfig, bindings: Sequence[ColumnBinding] | None = None) -> int | None:
    """Index of the sku column, or None when the sheet has none."""
    if bindings is None:
        bindings = resolve_bindings(sheet)
    for binding in bindings:
        if binding.kind is BindingKind.SKU:
            return binding.index
    if not sheet.columns:
        # 見出し行すら無いシートは慣例どおり列 0 を SKU とみなす
        return 0
    return None


def sku_column_index(sheet: SheetConfig, bindings: Sequence[ColumnBinding] | None = None) -> int:
    """Index of the sku column; fail fast when a data sheet has none."""
    index = find_sku_column(sheet, bindings)
    if index is None:
        raise MissingSkuColumnError(f"sheet '{sheet.name}' has no sku column")
    return index


def row_pairs(
    sheet: SheetConfig,
    row_index: int,
    bindings: Sequence[ColumnBinding] | None = None,
) -> list[tuple[Specification, str]]:
    """Ordered (Specification, selected label) pairs for one data row.

    Pairs are ordered by Specification.order, ties broken by column position.
    A Specification bound to several columns contributes once, with the
    leftmost non-empty selection.
    """
    if bindings is None:
        bindings = resolve_bindings(sheet)
    chosen: dict[str, tuple[Specification, str, int]] = {}
    for binding in bindings:
        if binding.kind is not BindingKind.SPEC or binding.specification is None:
            continue
        spec = binding.specification
        text = cell_text(sheet.cell(row_index, binding.index))
        current = chosen.get(spec.id)
        if current is None or (not current[1] and text):
            chosen[spec.id] = (spec, text, binding.index)
    ordered = sorted(chosen.values(), key=lambda item: (item[0].order, item[2]))
    return [(spec, text) for spec, text, _ in ordered]


def columns_bound_to(
    sheet: SheetConfig,
    spec_id: str,
    bindings: Sequence[ColumnBinding] | None = None,
) -> list[int]:
    """Column indices bound to `spec_id` (targets of label rewrites)."""
    if bindings is None:
        bindings = resolve_bindings(sheet)
    return [
        b.index
        for b in bindings
        if b.kind is BindingKind.SPEC and b.specification is not None and b.specification.id == spec_id
    ]
