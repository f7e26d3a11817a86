from __future__ import annotations

from pathlib import Path

import pytest

from skusync.excel.reader import WorkbookReadError, read_workbook
from skusync.excel.writer import write_workbook
from skusync.services.sample_data import sample_raw_table


def test_xlsx_round_trip_keeps_sheet_order_and_cells(tmp_path: Path):
    path = write_workbook(sample_raw_table(), tmp_path / "sample.xlsx")
    raw = read_workbook(path)
    assert list(raw) == ["Config", "Sample Products"]
    assert raw["Sample Products"][0] == ["SKU", "Color", "Size", "Material"]
    assert raw["Sample Products"][1] == ["R-S-COT", "Red", "Small", "Cotton"]


def test_csv_is_a_single_sheet_named_after_the_file(tmp_path: Path):
    csv_path = tmp_path / "products.csv"
    csv_path.write_text("SKU,Size\n,NA\n,\n", encoding="utf-8")
    raw = read_workbook(csv_path, keep_na_strings=["NA"])
    assert raw == {"products": [["SKU", "Size"], [None, "NA"]]}


def test_na_strings_become_empty_without_keep_list(tmp_path: Path):
    csv_path = tmp_path / "products.csv"
    csv_path.write_text("SKU,Size\nX,NA\n", encoding="utf-8")
    assert read_workbook(csv_path)["products"][1] == ["X", None]


def test_empty_csv_yields_empty_sheet(tmp_path: Path):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("", encoding="utf-8")
    assert read_workbook(csv_path) == {"empty": []}


def test_missing_and_unsupported_files_raise(tmp_path: Path):
    with pytest.raises(WorkbookReadError):
        read_workbook(tmp_path / "nope.xlsx")
    other = tmp_path / "notes.txt"
    other.write_text("x", encoding="utf-8")
    with pytest.raises(WorkbookReadError):
        read_workbook(other)


def test_csv_writer_picks_last_sheet(tmp_path: Path):
    path = write_workbook(sample_raw_table(), tmp_path / "out" / "products.csv")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "SKU,Color,Size,Material"
    assert len(lines) == 6
