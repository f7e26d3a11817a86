# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from skusync.logging.init import reset_logging
from skusync.models.settings import AppSettings
from skusync.services.sample_data import sample_raw_table
from skusync.services.workbook import Workbook


@pytest.fixture(autouse=True)
def _reset_logger_state():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in ("SKUSYNC_DELIMITER", "SKUSYNC_PREFIX", "SKUSYNC_SUFFIX"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """settings:
  delimiter: "-"
  prefix: ""
  suffix: ""
import:
  config_sheet_name: Config
  sku_header: SKU
  keep_na_strings: [NA]
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "skusync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_workbook() -> Workbook:
    """Workbook imported from the built-in sample (Color/Size/Material, 5 products)."""
    wb = Workbook()
    wb.import_sheets(sample_raw_table())
    return wb


@pytest.fixture()
def color_size_workbook() -> tuple[Workbook, dict[str, str]]:
    """Workbook with one data sheet built through the mutation API.

    Color{order:0}=[Red/R, Blue/B], Size{order:1}=[Small/S, Large/L],
    columns SKU | Color | Size | Notes, one row selecting (Red, Small).
    """
    from skusync.models.sheet import ColumnDef, ColumnType
    from skusync.models.specification import new_id

    wb = Workbook(settings=AppSettings(delimiter="-", prefix="", suffix=""))
    sheet_id = wb.add_sheet("Products")
    color = wb.create_specification(sheet_id, "Color")
    red = wb.add_value(sheet_id, color, "Red", "R")
    blue = wb.add_value(sheet_id, color, "Blue", "B")
    size = wb.create_specification(sheet_id, "Size")
    small = wb.add_value(sheet_id, size, "Small", "S")
    large = wb.add_value(sheet_id, size, "Large", "L")
    wb.add_column(sheet_id, ColumnDef(id=new_id(), type=ColumnType.SPEC, header="Color", spec_id=color))
    wb.add_column(sheet_id, ColumnDef(id=new_id(), type=ColumnType.SPEC, header="Size", spec_id=size))
    wb.add_column(sheet_id, ColumnDef(id=new_id(), type=ColumnType.FREE, header="Notes"))
    wb.set_cell_value(sheet_id, 1, 1, "Red")
    wb.set_cell_value(sheet_id, 1, 2, "Small")
    ids = {
        "sheet": sheet_id,
        "color": color,
        "size": size,
        "red": red,
        "blue": blue,
        "small": small,
        "large": large,
    }
    return wb, ids
