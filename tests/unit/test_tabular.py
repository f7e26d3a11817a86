from __future__ import annotations

from skusync.models.config_models import ImportOptions
from skusync.models.sheet import ColumnType, SheetType
from skusync.services.sample_data import sample_config_rows, sample_raw_table
from skusync.services.tabular import (
    export_sheets,
    has_valid_header,
    import_sheets,
    parse_config_rows,
)


def test_parse_config_rows_groups_by_specification():
    specs = parse_config_rows([
        ["Specification", "Value", "SKU Code"],
        ["Color", "Red", "R"],
        ["Size", "Small", "S"],
        ["Color", "Blue", "B"],
        ["", "orphan", "X"],
        ["Size", None, "Z"],
        ["Size", "Large"],
    ])
    assert [(s.name, s.order) for s in specs] == [("Color", 0), ("Size", 1)]
    assert [(v.display_value, v.sku_fragment) for v in specs[0].values] == [("Red", "R"), ("Blue", "B")]
    assert [(v.display_value, v.sku_fragment) for v in specs[1].values] == [("Small", "S"), ("Large", "")]


def test_import_puts_config_first_and_marks_types():
    raw = {"Products": [["SKU", "Color"], ["", "Red"]], "config": sample_config_rows()}
    sheets = import_sheets(raw)
    assert [(s.name, s.type) for s in sheets] == [("config", SheetType.CONFIG), ("Products", SheetType.DATA)]
    assert sheets[0].columns == []
    assert sheets[0].specifications == ()


def test_each_data_sheet_owns_independent_specs():
    raw = {"Config": sample_config_rows(), "A": [["SKU"]], "B": [["SKU"]]}
    _, a, b = import_sheets(raw)
    assert [s.name for s in a.specifications] == [s.name for s in b.specifications]
    ids_a = {s.id for s in a.specifications}
    ids_b = {s.id for s in b.specifications}
    assert ids_a.isdisjoint(ids_b)


def test_header_row_is_inserted_when_missing():
    raw = {"Config": [["Specification", "Value", "SKU Code"], ["Color", "Red", "R"]], "Data": [["", "Red"]]}
    data_sheet = import_sheets(raw)[1]
    assert [c.text for c in data_sheet.data[0]] == ["SKU", "Color"]
    assert [c.text for c in data_sheet.data[1]] == ["", "Red"]
    assert [c.type for c in data_sheet.columns] == [ColumnType.SKU, ColumnType.SPEC]


def test_columns_derived_from_header():
    raw = sample_raw_table()
    raw["Sample Products"][0].append("Product Name")
    sheet = import_sheets(raw)[1]
    kinds = {c.header: c.type for c in sheet.columns}
    assert kinds["SKU"] is ColumnType.SKU
    assert kinds["Color"] is ColumnType.SPEC
    assert kinds["Product Name"] is ColumnType.FREE
    color = next(c for c in sheet.columns if c.header == "Color")
    assert sheet.find_specification(color.spec_id).name == "Color"


def test_custom_sku_header_is_case_insensitive():
    options = ImportOptions(sku_header="Code")
    raw = {"Data": [["code", "x"]]}
    sheet = import_sheets(raw, options)[0]
    assert len(sheet.data) == 1
    assert has_valid_header(sheet.data, "CODE")


def test_empty_table_imports_nothing():
    assert import_sheets({}) == []


def test_export_is_verbatim_with_config_first():
    raw = {"Data": [["SKU", "Flag"], ["X", True]], "Config": [["Specification", "Value", "SKU Code"]]}
    sheets = import_sheets(raw)
    exported = export_sheets(list(reversed(sheets)))
    assert list(exported) == ["Config", "Data"]
    assert exported["Data"] == [["SKU", "Flag"], ["X", "TRUE"]]
