from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ..models.settings import AppSettings
from ..models.sheet import CellData, SheetConfig, SheetType, cell_text
from ..models.specification import Specification
from ..models.workbook_state import WorkbookState
from .binding import ColumnBinding, columns_bound_to, resolve_bindings, sku_column_index
from .sku_generator import generate_row_sku

"""Reactivity engine: keeps derived sheet state warm after specification changes.

The specification store hands every mutation to the engine as an explicit
SpecificationChangeset. The engine diffs it against the last observed
snapshot of that sheet and then:

- RewritingLabels: for each persisting value whose display_value changed,
  rewrites cells equal to the old label in the columns bound to its
  specification.
- RegeneratingSKUs: when a fragment changed, or the specification table
  changed structurally (spec/value added or removed, order changed),
  recomputes the SKU column of the owning sheet.

Labels are rewritten before SKUs are regenerated so regeneration sees the new
labels. A label rename alone never regenerates SKUs. Adding or removing a value
also regenerates the owning sheet, which goes beyond persisting-id propagation
so that a SKU always reflects the current specification table.

Every value change is checked against the live sheets before anything is
written; a change whose Specification is gone raises StaleSpecificationError.

State transitions: idle -> diffing -> (rewriting_labels) -> (regenerating_skus) -> idle

The baseline of a sheet is replaced only after its pass has fully applied.
The engine never calls back into the specification store; a call arriving
while a pass is running is rejected.
"""

__all__ = [
    "EngineState",
    "PropagationResult",
    "ReactivityEngine",
    "ReactivityError",
    "SpecificationChangeset",
    "SpecificationDiff",
    "StaleSpecificationError",
    "ValueChange",
    "diff_specifications",
    "regenerate_row_sku",
    "regenerate_sheet_skus",
]

logger = logging.getLogger(__name__)


class ReactivityError(Exception):
    """Base exception for reactivity engine failures."""


class StaleSpecificationError(ReactivityError):
    """A diffed value points at a Specification that no longer exists at rewrite time."""


class EngineState(Enum):
    IDLE = "idle"
    DIFFING = "diffing"
    REWRITING_LABELS = "rewriting_labels"
    REGENERATING_SKUS = "regenerating_skus"


@dataclass(frozen=True)
class SpecificationChangeset:
    """Message from the store: the new specification snapshot of one sheet."""
    sheet_id: str
    specifications: tuple[Specification, ...]


@dataclass(frozen=True)
class ValueChange:
    """Field changes on a value id present in both snapshots."""
    spec_id: str
    value_id: str
    old_display: str
    new_display: str
    old_fragment: str
    new_fragment: str

    @property
    def label_changed(self) -> bool:
        return self.old_display != self.new_display

    @property
    def fragment_changed(self) -> bool:
        return self.old_fragment != self.new_fragment


@dataclass(frozen=True)
class SpecificationDiff:
    value_changes: tuple[ValueChange, ...] = ()
    structural: bool = False  # 仕様/値の追加削除・order 変更

    @property
    def label_changes(self) -> tuple[ValueChange, ...]:
        return tuple(c for c in self.value_changes if c.label_changed)

    @property
    def fragment_changes(self) -> tuple[ValueChange, ...]:
        return tuple(c for c in self.value_changes if c.fragment_changed)

    @property
    def needs_regeneration(self) -> bool:
        return self.structural or bool(self.fragment_changes)

    @property
    def is_empty(self) -> bool:
        return not self.value_changes and not self.structural


@dataclass(frozen=True)
class PropagationResult:
    sheet_id: str | None
    diff: SpecificationDiff
    relabeled_cells: int = 0
    regenerated_cells: int = 0


def diff_specifications(
    previous: Sequence[Specification],
    current: Sequence[Specification],
) -> SpecificationDiff:
    """Compare two snapshots value-by-value.

    Only field changes on a value id present on both sides produce a
    ValueChange. Created or deleted ids only mark the diff as structural.
    """
    prev_values: dict[str, tuple[str, str, str]] = {}  # value_id -> (spec_id, display, fragment)
    for spec in previous:
        for value in spec.values:
            prev_values[value.id] = (spec.id, value.display_value, value.sku_fragment)

    changes: list[ValueChange] = []
    seen: set[str] = set()
    for spec in current:
        for value in spec.values:
            seen.add(value.id)
            before = prev_values.get(value.id)
            if before is None:
                continue
            _, old_display, old_fragment = before
            if old_display == value.display_value and old_fragment == value.sku_fragment:
                continue
            changes.append(ValueChange(
                spec_id=spec.id,
                value_id=value.id,
                old_display=old_display,
                new_display=value.display_value,
                old_fragment=old_fragment,
                new_fragment=value.sku_fragment,
            ))

    prev_orders = {spec.id: spec.order for spec in previous}
    curr_orders = {spec.id: spec.order for spec in current}
    structural = (
        prev_orders != curr_orders
        or set(prev_values) != seen
    )
    return SpecificationDiff(value_changes=tuple(changes), structural=structural)


def regenerate_row_sku(
    sheet: SheetConfig,
    row_index: int,
    settings: AppSettings,
    bindings: Sequence[ColumnBinding] | None = None,
    sku_col: int | None = None,
) -> bool:
    """Recompute one row's SKU cell; write only if it differs. Returns True on write."""
    if row_index < 1 or row_index >= len(sheet.data):
        return False
    if bindings is None:
        bindings = resolve_bindings(sheet)
    if sku_col is None:
        sku_col = sku_column_index(sheet, bindings)
    sku = generate_row_sku(sheet, row_index, settings, bindings)
    current = sheet.cell(row_index, sku_col)
    if cell_text(current) == sku:
        return False
    style = dict(current.style) if current is not None else {}
    sheet.set_cell(row_index, sku_col, CellData(v=sku, m=sku, style=style))
    return True


def regenerate_sheet_skus(sheet: SheetConfig, settings: AppSettings) -> int:
    """Recompute the SKU column of every data row. Returns the number of cells written.

    Raises MissingSkuColumnError for a data sheet without a sku column.
    """
    if sheet.type is not SheetType.DATA:
        return 0
    bindings = resolve_bindings(sheet)
    sku_col = sku_column_index(sheet, bindings)
    written = 0
    for row_index in sheet.data_row_indices:
        if regenerate_row_sku(sheet, row_index, settings, bindings, sku_col):
            written += 1
    return written


class ReactivityEngine:
    """Diff-and-propagate engine bound to one WorkbookState."""

    def __init__(self, state: WorkbookState) -> None:
        self._state = state
        self._baselines: dict[str, tuple[Specification, ...]] = {}
        self.status = EngineState.IDLE

    # --- baseline bookkeeping -------------------------------------------------

    def track(self, sheet: SheetConfig) -> None:
        """Record `sheet`'s current specifications as its baseline."""
        self._baselines[sheet.id] = sheet.specifications

    def untrack(self, sheet_id: str) -> None:
        self._baselines.pop(sheet_id, None)

    def reset(self) -> None:
        """Drop all baselines and re-track every sheet of the state (after import)."""
        self._baselines.clear()
        for sheet in self._state.sheets:
            self.track(sheet)

    def baseline(self, sheet_id: str) -> tuple[Specification, ...] | None:
        return self._baselines.get(sheet_id)

    # --- transitions ----------------------------------------------------------

    def _enter(self, state: EngineState) -> None:
        logger.debug(f"reactivity: {self.status.value} -> {state.value}")
        self.status = state

    def _ensure_idle(self, operation: str) -> None:
        if self.status is not EngineState.IDLE:
            raise ReactivityError(
                f"re-entrant {operation} while engine is {self.status.value}"
            )

    def apply(self, changeset: SpecificationChangeset) -> PropagationResult:
        """Diff `changeset` against the sheet's baseline and propagate the result."""
        self._ensure_idle("apply")
        baseline = self._baselines.get(changeset.sheet_id, ())
        if baseline is changeset.specifications:
            return PropagationResult(changeset.sheet_id, SpecificationDiff())

        relabeled = 0
        regenerated = 0
        self._enter(EngineState.DIFFING)
        try:
            diff = diff_specifications(baseline, changeset.specifications)
            if diff.is_empty:
                logger.debug(f"reactivity: sheet={changeset.sheet_id} no relevant diff")
            owners = {change.spec_id: self._owners_of(change) for change in diff.value_changes}
            if diff.label_changes:
                self._enter(EngineState.REWRITING_LABELS)
                for change in diff.label_changes:
                    relabeled += self._rewrite_labels(change, owners[change.spec_id])
            if diff.needs_regeneration:
                self._enter(EngineState.REGENERATING_SKUS)
                for sheet in self._affected_sheets(changeset.sheet_id, diff):
                    regenerated += regenerate_sheet_skus(sheet, self._state.settings)
            # ベースライン更新は全書き換え完了後のみ
            self._baselines[changeset.sheet_id] = changeset.specifications
        finally:
            self._enter(EngineState.IDLE)

        if relabeled or regenerated:
            logger.info(
                f"propagated sheet={changeset.sheet_id} relabeled={relabeled} regenerated={regenerated}"
            )
        return PropagationResult(changeset.sheet_id, diff, relabeled, regenerated)

    def regenerate_all(self) -> int:
        """Regenerate every data sheet (settings change, import)."""
        self._ensure_idle("regenerate_all")
        self._enter(EngineState.REGENERATING_SKUS)
        try:
            written = sum(
                regenerate_sheet_skus(sheet, self._state.settings) for sheet in self._state.sheets
            )
        finally:
            self._enter(EngineState.IDLE)
        logger.debug(f"reactivity: regenerated {written} SKU cells across all sheets")
        return written

    def regenerate_sheet(self, sheet: SheetConfig) -> int:
        """Regenerate one sheet after a structural column or header edit."""
        self._ensure_idle("regenerate_sheet")
        self._enter(EngineState.REGENERATING_SKUS)
        try:
            return regenerate_sheet_skus(sheet, self._state.settings)
        finally:
            self._enter(EngineState.IDLE)

    def refresh_row(self, sheet: SheetConfig, row_index: int) -> bool:
        """Recompute the SKU of a single edited row."""
        self._ensure_idle("refresh_row")
        if sheet.type is not SheetType.DATA:
            return False
        self._enter(EngineState.REGENERATING_SKUS)
        try:
            return regenerate_row_sku(sheet, row_index, self._state.settings)
        finally:
            self._enter(EngineState.IDLE)

    # --- passes ---------------------------------------------------------------

    def _affected_sheets(self, sheet_id: str, diff: SpecificationDiff) -> list[SheetConfig]:
        affected: dict[str, SheetConfig] = {}
        origin = self._state.get_sheet(sheet_id)
        if origin is not None and diff.structural:
            affected[origin.id] = origin
        for change in diff.fragment_changes:
            for sheet in self._owners_of(change):
                affected.setdefault(sheet.id, sheet)
        return [s for s in affected.values() if s.type is SheetType.DATA]

    def _owners_of(self, change: ValueChange) -> list[SheetConfig]:
        owners = self._state.sheets_owning(change.spec_id)
        if not owners:
            raise StaleSpecificationError(
                f"value {change.value_id} references specification {change.spec_id} "
                f"which no longer exists"
            )
        return owners

    def _rewrite_labels(self, change: ValueChange, owners: list[SheetConfig]) -> int:
        old_label = change.old_display.strip()
        new_label = change.new_display
        rewritten = 0
        if not old_label:
            return 0
        for sheet in owners:
            if sheet.type is not SheetType.DATA:
                continue
            for col in columns_bound_to(sheet, change.spec_id):
                for row_index in sheet.data_row_indices:
                    cell = sheet.cell(row_index, col)
                    if cell is None or cell_text(cell) != old_label:
                        continue
                    cell.v = new_label
                    cell.m = new_label
                    rewritten += 1
        logger.debug(
            f"relabel spec={change.spec_id} '{change.old_display}' -> '{new_label}' cells={rewritten}"
        )
        return rewritten
