from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.config_models import ImportOptions
from ..models.sheet import CellData, ColumnDef, ColumnType, SheetConfig, SheetType, cell_text
from ..models.specification import Specification, SpecValue, new_id

"""Whole-workbook import/export between raw tables and SheetConfig objects.

A raw table is an ordered mapping of sheet name -> rows of plain cell values,
as produced by the workbook adapter (skusync.excel) or any other codec.

Import rules:
- A sheet named like `ImportOptions.config_sheet_name` (case-insensitive) is a
  config sheet: `Specification | Value | SKU Code` rows defining the
  specifications. It is kept verbatim and never synchronized.
- Every data sheet gets its own copy of those specifications with fresh ids.
- A data sheet whose cell (0, 0) is not the SKU header gets a generated header
  row inserted above its data (`SKU`, then specification names by order).
- Column definitions are derived from the header row: column 0 is the sku
  column, a header equal to a specification name binds that specification,
  anything else is free text.

Malformed input never rejects the import; odd rows degrade to empty cells.
"""

__all__ = [
    "CONFIG_SHEET_HEADERS",
    "RawTable",
    "build_header_row",
    "clone_specifications",
    "derive_columns",
    "export_sheets",
    "has_valid_header",
    "import_sheets",
    "parse_config_rows",
]

logger = logging.getLogger(__name__)

RawTable = dict[str, list[list[Any]]]

CONFIG_SHEET_HEADERS = ("Specification", "Value", "SKU Code")


def _as_row(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    # スカラー行は 1 セルの行として扱う
    return [raw]


def _to_cells(rows: Sequence[Any]) -> list[list[CellData]]:
    return [[CellData.of(value) for value in _as_row(row)] for row in rows]


def parse_config_rows(rows: Sequence[Any]) -> list[Specification]:
    """Parse config sheet rows (row 0 = headers) into ordered specifications.

    Rows with a blank specification or value are skipped; a missing SKU Code
    cell means an empty fragment. Specifications keep first-appearance order.
    """
    grouped: dict[str, list[SpecValue]] = {}
    for raw in list(rows)[1:]:
        cells = [CellData.of(v) for v in _as_row(raw)]
        while len(cells) < 3:
            cells.append(CellData())
        spec_name, label, code = (cell_text(c) for c in cells[:3])
        if not spec_name or not label:
            continue
        grouped.setdefault(spec_name, []).append(
            SpecValue(id=new_id(), display_value=label, sku_fragment=code)
        )
    return [
        Specification(id=new_id(), name=name, order=index, values=tuple(values))
        for index, (name, values) in enumerate(grouped.items())
    ]


def clone_specifications(specifications: Sequence[Specification]) -> tuple[Specification, ...]:
    """Deep copy with fresh ids so each sheet owns an independent set."""
    return tuple(
        Specification(
            id=new_id(),
            name=spec.name,
            order=spec.order,
            values=tuple(
                SpecValue(id=new_id(), display_value=v.display_value, sku_fragment=v.sku_fragment)
                for v in spec.values
            ),
        )
        for spec in specifications
    )


def build_header_row(specifications: Sequence[Specification], sku_header: str = "SKU") -> list[CellData]:
    """`SKU` followed by specification names sorted by order."""
    header = [CellData.of(sku_header)]
    for spec in sorted(specifications, key=lambda s: s.order):
        header.append(CellData.of(spec.name))
    return header


def has_valid_header(data: Sequence[Sequence[CellData]], sku_header: str = "SKU") -> bool:
    if not data or not data[0]:
        return False
    return cell_text(data[0][0]).lower() == sku_header.lower()


def derive_columns(
    header: Sequence[CellData],
    specifications: Sequence[Specification],
) -> list[ColumnDef]:
    """Column definitions from a header row: sku, spec (by name) or free."""
    by_name: dict[str, Specification] = {}
    for spec in sorted(specifications, key=lambda s: s.order):
        by_name.setdefault(spec.name, spec)
    columns: list[ColumnDef] = []
    for index, cell in enumerate(header):
        text = cell_text(cell)
        if index == 0:
            columns.append(ColumnDef(id=new_id(), type=ColumnType.SKU, header=text))
            continue
        spec = by_name.get(text) if text else None
        if spec is None:
            columns.append(ColumnDef(id=new_id(), type=ColumnType.FREE, header=text))
        else:
            columns.append(ColumnDef(id=new_id(), type=ColumnType.SPEC, header=text, spec_id=spec.id))
    return columns


def import_sheets(raw_table: Mapping[str, Any], options: ImportOptions | None = None) -> list[SheetConfig]:
    """Build SheetConfig objects from a raw table. Config sheets come first.

    SKU cells are imported as-is; regenerating them is the caller's job.
    """
    options = options or ImportOptions()
    config_key = options.config_sheet_name.lower()

    parsed_specs: list[Specification] = []
    for name, rows in raw_table.items():
        if str(name).lower() == config_key:
            parsed_specs = parse_config_rows(rows or [])
            logger.debug(f"import: config sheet '{name}' -> {len(parsed_specs)} specification(s)")
            break

    configs: list[SheetConfig] = []
    data_sheets: list[SheetConfig] = []
    for name, rows in raw_table.items():
        sheet_name = str(name)
        cells = _to_cells(rows or [])
        if sheet_name.lower() == config_key:
            configs.append(SheetConfig(id=new_id(), name=sheet_name, type=SheetType.CONFIG, data=cells))
            continue
        specs = clone_specifications(parsed_specs)
        if not has_valid_header(cells, options.sku_header):
            logger.info(f"import: sheet '{sheet_name}' has no SKU header row -> header inserted")
            cells = [build_header_row(specs, options.sku_header), *cells]
        data_sheets.append(SheetConfig(
            id=new_id(),
            name=sheet_name,
            type=SheetType.DATA,
            data=cells,
            columns=derive_columns(cells[0], specs),
            specifications=specs,
        ))
    return [*configs, *data_sheets]


def _export_value(cell: CellData) -> Any:
    value = cell.v
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return value


def export_sheets(sheets: Sequence[SheetConfig]) -> RawTable:
    """Verbatim snapshot export (SKU cells included), config sheets first."""
    ordered = sorted(sheets, key=lambda s: 0 if s.type is SheetType.CONFIG else 1)
    return {
        sheet.name: [[_export_value(cell) for cell in row] for row in sheet.data]
        for sheet in ordered
    }
