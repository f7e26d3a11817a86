from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from ..models.config_models import ImportOptions
from ..models.finding import ValidationReport
from ..models.settings import AppSettings
from ..models.sheet import CellData, ColumnDef, ColumnType, SheetConfig, SheetType
from ..models.specification import new_id
from ..models.workbook_state import WorkbookState
from .binding import effective_columns, find_sku_column, resolve_bindings
from .combinations import PopulateMode, generate_combinations, spec_columns
from .reactivity import PropagationResult, ReactivityEngine, SpecificationChangeset
from .spec_store import SpecificationStore
from .tabular import RawTable, export_sheets, import_sheets
from .validator import run_validation

"""Workbook service: the single entry point used by the UI layer.

Operations are dispatched one at a time. Each specification mutation runs the
store first, then hands the resulting changeset to the reactivity engine and
returns only after propagation has fully applied. Sheet mutations and
settings changes are followed by the matching SKU refresh.
"""

__all__ = [
    "ReadOnlyCellError",
    "SheetNotFoundError",
    "Workbook",
]

logger = logging.getLogger(__name__)


class SheetNotFoundError(KeyError):
    """Raised when an operation addresses an unknown sheet id."""


class ReadOnlyCellError(ValueError):
    """Raised on attempts to edit or delete the generated SKU column."""


class Workbook:
    """Sheets, specifications and settings plus the engine that keeps them consistent."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        import_options: ImportOptions | None = None,
    ) -> None:
        self.state = WorkbookState(settings=settings or AppSettings())
        self.import_options = import_options or ImportOptions()
        self.engine = ReactivityEngine(self.state)
        self.last_propagation: PropagationResult | None = None

    # --- lookup ---------------------------------------------------------------

    @property
    def sheets(self) -> list[SheetConfig]:
        return self.state.sheets

    def sheet(self, sheet_id: str) -> SheetConfig:
        sheet = self.state.get_sheet(sheet_id)
        if sheet is None:
            raise SheetNotFoundError(sheet_id)
        return sheet

    def sheet_by_name(self, name: str) -> SheetConfig | None:
        for sheet in self.state.sheets:
            if sheet.name == name:
                return sheet
        return None

    def specifications(self, sheet_id: str) -> SpecificationStore:
        return SpecificationStore(self.sheet(sheet_id))

    def _propagate(self, changeset: SpecificationChangeset) -> PropagationResult:
        self.last_propagation = self.engine.apply(changeset)
        return self.last_propagation

    # --- sheet lifecycle ------------------------------------------------------

    def add_sheet(self, name: str | None = None, sheet_type: SheetType = SheetType.DATA) -> str:
        """Create a sheet with a `SKU` header row and a single sku column."""
        sheet_name = name or f"Sheet {len(self.state.sheets) + 1}"
        header = self.import_options.sku_header
        if sheet_type is SheetType.DATA:
            sheet = SheetConfig(
                id=new_id(),
                name=sheet_name,
                type=sheet_type,
                data=[[CellData.of(header)]],
                columns=[ColumnDef(id=new_id(), type=ColumnType.SKU, header=header)],
            )
        else:
            sheet = SheetConfig(id=new_id(), name=sheet_name, type=sheet_type)
        self.state.sheets.append(sheet)
        self.engine.track(sheet)
        if self.state.active_sheet_id is None:
            self.state.active_sheet_id = sheet.id
        logger.debug(f"add sheet '{sheet_name}' type={sheet_type.value}")
        return sheet.id

    def remove_sheet(self, sheet_id: str) -> None:
        sheet = self.sheet(sheet_id)
        self.state.sheets.remove(sheet)
        self.engine.untrack(sheet_id)
        if self.state.active_sheet_id == sheet_id:
            self.state.active_sheet_id = self.state.sheets[0].id if self.state.sheets else None

    def set_active_sheet(self, sheet_id: str) -> None:
        self.sheet(sheet_id)
        self.state.active_sheet_id = sheet_id

    # --- specification mutation API ------------------------------------------

    def create_specification(self, sheet_id: str, name: str) -> str:
        spec_id, changeset = self.specifications(sheet_id).create_specification(name)
        self._propagate(changeset)
        return spec_id

    def rename_specification(self, sheet_id: str, spec_id: str, name: str) -> None:
        self._propagate(self.specifications(sheet_id).rename_specification(spec_id, name))

    def add_value(self, sheet_id: str, spec_id: str, display_value: str, sku_fragment: str) -> str:
        value_id, changeset = self.specifications(sheet_id).add_value(spec_id, display_value, sku_fragment)
        self._propagate(changeset)
        return value_id

    def update_value(
        self,
        sheet_id: str,
        spec_id: str,
        value_id: str,
        display_value: str | None = None,
        sku_fragment: str | None = None,
    ) -> PropagationResult:
        changeset = self.specifications(sheet_id).update_value(
            spec_id, value_id, display_value=display_value, sku_fragment=sku_fragment
        )
        return self._propagate(changeset)

    def remove_value(self, sheet_id: str, spec_id: str, value_id: str) -> None:
        self._propagate(self.specifications(sheet_id).remove_value(spec_id, value_id))

    def reorder(self, sheet_id: str, spec_id: str, new_order: int) -> None:
        self._propagate(self.specifications(sheet_id).reorder(spec_id, new_order))

    def delete_specification(self, sheet_id: str, spec_id: str) -> None:
        self._propagate(self.specifications(sheet_id).delete_specification(spec_id))

    # --- sheet mutation API ---------------------------------------------------

    def set_cell_value(self, sheet_id: str, row: int, col: int, value: Any) -> None:
        """User edit of one cell; keeps the row's SKU warm."""
        sheet = self.sheet(sheet_id)
        if row < 0 or col < 0:
            raise IndexError(f"cell ({row}, {col}) out of range")
        if sheet.type is SheetType.DATA and row >= 1 and col == find_sku_column(sheet):
            raise ReadOnlyCellError(f"sheet '{sheet.name}': SKU column is generated and read-only")
        existing = sheet.cell(row, col)
        cell = CellData.of(value)
        if existing is not None:
            cell.style = dict(existing.style)
        sheet.set_cell(row, col, cell)
        if sheet.type is not SheetType.DATA:
            return
        if row == 0:
            if sheet.columns and col < len(sheet.columns):
                sheet.columns[col] = replace(sheet.columns[col], header=cell.text)
            # 見出し変更は見出し駆動の束縛を変えうるのでシート全体を再計算
            self.engine.regenerate_sheet(sheet)
        else:
            self.engine.refresh_row(sheet, row)

    def _materialize_columns(self, sheet: SheetConfig) -> None:
        if sheet.columns:
            return
        sheet.columns = effective_columns(sheet)
        if not sheet.columns:
            header = self.import_options.sku_header
            sheet.columns = [ColumnDef(id=new_id(), type=ColumnType.SKU, header=header)]
            sheet.set_cell(0, 0, CellData.of(header))

    def add_column(self, sheet_id: str, column: ColumnDef, position: int | None = None) -> None:
        """Insert a column definition and an empty cell per row (header cell = column header)."""
        sheet = self.sheet(sheet_id)
        if column.type is ColumnType.SKU:
            raise ReadOnlyCellError(f"sheet '{sheet.name}' already has a SKU column")
        self._materialize_columns(sheet)
        if position is None or position > len(sheet.columns):
            position = len(sheet.columns)
        position = max(position, 0)
        sheet.columns.insert(position, column)
        if not sheet.data:
            sheet.data.append([])
        for row_index, row in enumerate(sheet.data):
            while len(row) < position:
                row.append(CellData())
            row.insert(position, CellData.of(column.header) if row_index == 0 else CellData())
        logger.debug(f"sheet={sheet.name} add column '{column.header}' at {position}")
        self.engine.regenerate_sheet(sheet)

    def delete_column(self, sheet_id: str, column_index: int) -> None:
        sheet = self.sheet(sheet_id)
        self._materialize_columns(sheet)
        if column_index < 0 or column_index >= len(sheet.columns):
            raise IndexError(f"column {column_index} out of range")
        if sheet.columns[column_index].type is ColumnType.SKU:
            raise ReadOnlyCellError(f"sheet '{sheet.name}': the SKU column cannot be deleted")
        del sheet.columns[column_index]
        for row in sheet.data:
            if column_index < len(row):
                del row[column_index]
        self.engine.regenerate_sheet(sheet)

    def auto_populate(
        self,
        sheet_id: str,
        spec_order: Sequence[str] | None = None,
        mode: PopulateMode | str = PopulateMode.REPLACE,
    ) -> int:
        """Fill the sheet with every combination of its spec-column values.

        `spec_order` lists specification ids, first = changes least often
        (default: column order). REPLACE drops the existing data rows, APPEND
        keeps them. Returns the number of rows generated; when there is nothing
        to combine the sheet is left untouched.
        """
        sheet = self.sheet(sheet_id)
        mode = PopulateMode(mode)
        available = spec_columns(sheet)
        if spec_order is None:
            ordered = available
        else:
            by_id = {spec.id: (spec, col) for spec, col in available}
            missing = [spec_id for spec_id in spec_order if spec_id not in by_id]
            if missing:
                raise ValueError(f"sheet '{sheet.name}': specification(s) not bound to a column: {missing}")
            ordered = [by_id[spec_id] for spec_id in dict.fromkeys(spec_order)]
        rows = generate_combinations(ordered, len(resolve_bindings(sheet)))
        if not rows:
            logger.info(f"sheet={sheet.name} auto-populate: no combinations, sheet left unchanged")
            return 0
        if mode is PopulateMode.REPLACE:
            del sheet.data[1:]
        sheet.data.extend(rows)
        logger.info(f"sheet={sheet.name} auto-populated {len(rows)} row(s) mode={mode.value}")
        self.engine.regenerate_sheet(sheet)
        return len(rows)

    # --- settings API ---------------------------------------------------------

    def get_settings(self) -> AppSettings:
        return self.state.settings

    def update_settings(
        self,
        delimiter: str | None = None,
        prefix: str | None = None,
        suffix: str | None = None,
    ) -> int:
        """Apply settings; any effective change regenerates every data sheet."""
        updated = self.state.settings.merged(delimiter=delimiter, prefix=prefix, suffix=suffix)
        if updated == self.state.settings:
            return 0
        self.state.settings = updated
        logger.info(
            f"settings updated delimiter={updated.delimiter!r} prefix={updated.prefix!r} suffix={updated.suffix!r}"
        )
        return self.engine.regenerate_all()

    # --- import / export / validation ----------------------------------------

    def import_sheets(self, raw_table: Mapping[str, Any]) -> int:
        """Replace the whole state with the imported sheets and regenerate all SKUs.

        Returns the number of SKU cells rewritten by the regeneration.
        """
        sheets = import_sheets(raw_table, self.import_options)
        self.state.sheets = sheets
        self.state.active_sheet_id = next(
            (s.id for s in sheets if s.type is SheetType.DATA), sheets[0].id if sheets else None
        )
        self.engine.reset()
        written = self.engine.regenerate_all()
        logger.info(f"imported {len(sheets)} sheet(s), regenerated {written} SKU cell(s)")
        return written

    def export_sheets(self) -> RawTable:
        return export_sheets(self.state.sheets)

    def run_validation(self, sheet_id: str) -> ValidationReport:
        return run_validation(self.sheet(sheet_id))
