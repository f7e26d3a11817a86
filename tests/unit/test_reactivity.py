from __future__ import annotations

import pytest

from skusync.models.settings import AppSettings
from skusync.models.sheet import CellData, ColumnDef, ColumnType, SheetConfig, SheetType
from skusync.models.specification import Specification, SpecValue
from skusync.models.workbook_state import WorkbookState
from skusync.services.binding import MissingSkuColumnError
from skusync.services.reactivity import (
    EngineState,
    ReactivityEngine,
    ReactivityError,
    SpecificationChangeset,
    StaleSpecificationError,
    diff_specifications,
    regenerate_sheet_skus,
)


def _color(*values: SpecValue, order: int = 0) -> Specification:
    return Specification("color", "Color", order, tuple(values))


RED = SpecValue("red", "Red", "R")
BLUE = SpecValue("blue", "Blue", "B")


# --- diff -----------------------------------------------------------------------

def test_diff_detects_label_and_fragment_changes():
    before = (_color(RED, BLUE),)
    after = (_color(SpecValue("red", "Crimson", "R"), SpecValue("blue", "Blue", "BL")),)
    diff = diff_specifications(before, after)

    assert not diff.structural
    assert [c.value_id for c in diff.label_changes] == ["red"]
    assert [c.value_id for c in diff.fragment_changes] == ["blue"]
    assert diff.needs_regeneration


def test_label_only_diff_does_not_regenerate():
    diff = diff_specifications((_color(RED),), (_color(SpecValue("red", "Crimson", "R")),))
    assert diff.label_changes
    assert not diff.needs_regeneration


def test_added_or_removed_values_are_structural_without_value_changes():
    added = diff_specifications((_color(RED),), (_color(RED, BLUE),))
    removed = diff_specifications((_color(RED, BLUE),), (_color(RED),))
    assert added.structural and added.value_changes == ()
    assert removed.structural and removed.value_changes == ()


def test_order_change_is_structural_name_change_is_not():
    assert diff_specifications((_color(RED),), (_color(RED, order=1),)).structural
    renamed = (Specification("color", "Colour", 0, (RED,)),)
    assert diff_specifications((_color(RED),), renamed).is_empty


# --- engine ----------------------------------------------------------------------

def test_fragment_change_regenerates_skus(color_size_workbook):
    wb, ids = color_size_workbook
    result = wb.update_value(ids["sheet"], ids["color"], ids["red"], sku_fragment="RD")

    sheet = wb.sheet(ids["sheet"])
    assert sheet.cell(1, 0).text == "RD-S"
    assert result.regenerated_cells == 1
    assert result.relabeled_cells == 0


def test_label_change_rewrites_cells_and_keeps_sku(color_size_workbook):
    wb, ids = color_size_workbook
    result = wb.update_value(ids["sheet"], ids["color"], ids["red"], display_value="Crimson")

    sheet = wb.sheet(ids["sheet"])
    assert sheet.cell(1, 1).text == "Crimson"
    assert sheet.cell(1, 0).text == "R-S"
    assert result.relabeled_cells == 1
    assert result.regenerated_cells == 0


def test_label_rewrite_only_touches_bound_columns(color_size_workbook):
    wb, ids = color_size_workbook
    wb.set_cell_value(ids["sheet"], 1, 3, "Red")
    wb.update_value(ids["sheet"], ids["color"], ids["red"], display_value="Crimson")

    sheet = wb.sheet(ids["sheet"])
    assert sheet.cell(1, 1).text == "Crimson"
    assert sheet.cell(1, 3).text == "Red"


def test_combined_change_rewrites_before_regenerating(color_size_workbook):
    wb, ids = color_size_workbook
    wb.update_value(ids["sheet"], ids["color"], ids["red"], display_value="Crimson", sku_fragment="CR")

    sheet = wb.sheet(ids["sheet"])
    assert sheet.cell(1, 1).text == "Crimson"
    assert sheet.cell(1, 0).text == "CR-S"


def test_removing_selected_value_drops_its_fragment(color_size_workbook):
    wb, ids = color_size_workbook
    wb.remove_value(ids["sheet"], ids["color"], ids["red"])
    assert wb.sheet(ids["sheet"]).cell(1, 0).text == "S"


def test_reorder_regenerates_in_new_order(color_size_workbook):
    wb, ids = color_size_workbook
    wb.reorder(ids["sheet"], ids["size"], 0)
    assert wb.sheet(ids["sheet"]).cell(1, 0).text == "S-R"


def test_regeneration_preserves_cell_style(color_size_workbook):
    wb, ids = color_size_workbook
    sheet = wb.sheet(ids["sheet"])
    sheet.cell(1, 0).style["bold"] = True
    wb.update_value(ids["sheet"], ids["color"], ids["red"], sku_fragment="RD")
    assert sheet.cell(1, 0).style == {"bold": True}


def test_baseline_advances_only_after_apply(color_size_workbook):
    wb, ids = color_size_workbook
    sheet = wb.sheet(ids["sheet"])
    wb.update_value(ids["sheet"], ids["color"], ids["red"], sku_fragment="RD")
    assert wb.engine.baseline(ids["sheet"]) is sheet.specifications
    assert wb.engine.status is EngineState.IDLE


def test_same_snapshot_is_a_noop(color_size_workbook):
    wb, ids = color_size_workbook
    sheet = wb.sheet(ids["sheet"])
    result = wb.engine.apply(SpecificationChangeset(sheet.id, sheet.specifications))
    assert result.diff.is_empty
    assert result.regenerated_cells == 0


def test_reentrant_apply_is_rejected(color_size_workbook):
    wb, ids = color_size_workbook
    sheet = wb.sheet(ids["sheet"])
    wb.engine.status = EngineState.REGENERATING_SKUS
    with pytest.raises(ReactivityError):
        wb.engine.apply(SpecificationChangeset(sheet.id, ()))


def test_stale_specification_is_reported():
    sheet = SheetConfig(
        id="s",
        name="S",
        type=SheetType.DATA,
        data=[[CellData.of("SKU")]],
        columns=[ColumnDef("c0", ColumnType.SKU, "SKU")],
        specifications=(_color(RED),),
    )
    state = WorkbookState(sheets=[sheet])
    engine = ReactivityEngine(state)
    engine.track(sheet)
    # 変更セットが指す仕様がシート側から既に消えている
    sheet.specifications = ()
    changeset = SpecificationChangeset("s", (_color(SpecValue("red", "Crimson", "R")),))
    with pytest.raises(StaleSpecificationError):
        engine.apply(changeset)
    assert engine.status is EngineState.IDLE
    assert engine.baseline("s")[0].values[0].display_value == "Red"


def test_missing_sku_column_fails_fast():
    sheet = SheetConfig(
        id="s",
        name="NoSku",
        type=SheetType.DATA,
        data=[[CellData.of("Color")], [CellData.of("Red")]],
        columns=[ColumnDef("c0", ColumnType.SPEC, "Color", spec_id="color")],
        specifications=(_color(RED),),
    )
    with pytest.raises(MissingSkuColumnError):
        regenerate_sheet_skus(sheet, AppSettings())


def test_config_sheets_are_never_regenerated():
    sheet = SheetConfig(id="c", name="Config", type=SheetType.CONFIG, data=[[CellData.of("x")]])
    assert regenerate_sheet_skus(sheet, AppSettings()) == 0


def test_stale_specification_fragment_only_change_is_reported():
    sheet = SheetConfig(
        id="s",
        name="S",
        type=SheetType.DATA,
        data=[[CellData.of("SKU"), CellData.of("Color")], [CellData.of("R"), CellData.of("Red")]],
        columns=[ColumnDef("c0", ColumnType.SKU, "SKU")],
        specifications=(_color(RED),),
    )
    state = WorkbookState(sheets=[sheet])
    engine = ReactivityEngine(state)
    engine.track(sheet)
    sheet.specifications = ()
    changeset = SpecificationChangeset("s", (_color(SpecValue("red", "Red", "RD")),))
    with pytest.raises(StaleSpecificationError):
        engine.apply(changeset)
    assert engine.status is EngineState.IDLE
    assert engine.baseline("s")[0].values[0].sku_fragment == "R"
    assert sheet.cell(1, 0).text == "R"


def test_label_rewrite_matches_trimmed_cell_text(color_size_workbook):
    wb, ids = color_size_workbook
    sheet = wb.sheet(ids["sheet"])
    sheet.set_cell(2, 1, CellData(v="  Red ", m="  Red "))
    result = wb.update_value(ids["sheet"], ids["color"], ids["red"], display_value="Crimson")
    assert sheet.cell(2, 1).text == "Crimson"
    assert result.relabeled_cells == 2


def test_regeneration_is_idempotent(sample_workbook):
    sheet = sample_workbook.sheet_by_name("Sample Products")
    sheet.cell(1, 0).v = "STALE"
    settings = sample_workbook.get_settings()
    assert regenerate_sheet_skus(sheet, settings) == 1
    snapshot = [[c.text for c in row] for row in sheet.data]
    assert regenerate_sheet_skus(sheet, settings) == 0
    assert [[c.text for c in row] for row in sheet.data] == snapshot
