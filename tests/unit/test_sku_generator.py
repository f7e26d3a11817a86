from __future__ import annotations

from skusync.models.settings import AppSettings
from skusync.models.specification import Specification, SpecValue
from skusync.services.sku_generator import generate_sku

"""Unit tests for the SKU generator (pure function, never raises)."""

COLOR = Specification(
    id="color",
    name="Color",
    order=0,
    values=(SpecValue("red", "Red", "R"), SpecValue("blue", "Blue", "B"), SpecValue("none", "Plain", "")),
)
SIZE = Specification(
    id="size",
    name="Size",
    order=1,
    values=(SpecValue("small", "Small", "S"), SpecValue("large", "Large", "L")),
)
DASH = AppSettings(delimiter="-", prefix="", suffix="")


def test_joins_fragments_in_pair_order():
    assert generate_sku([(COLOR, "Red"), (SIZE, "Small")], DASH) == "R-S"


def test_applies_prefix_and_suffix():
    settings = AppSettings(delimiter="_", prefix="SKU_", suffix="!")
    assert generate_sku([(COLOR, "Blue"), (SIZE, "Large")], settings) == "SKU_B_L!"


def test_no_selection_yields_empty_string_without_decoration():
    settings = AppSettings(delimiter="-", prefix="P", suffix="S")
    assert generate_sku([], settings) == ""
    assert generate_sku([(COLOR, ""), (SIZE, None)], settings) == ""


def test_empty_fragment_contributes_nothing():
    assert generate_sku([(COLOR, "Plain"), (SIZE, "Small")], DASH) == "S"
    assert generate_sku([(COLOR, "Plain")], AppSettings(prefix="X")) == ""


def test_unknown_label_is_omitted():
    assert generate_sku([(COLOR, "Purple"), (SIZE, "Large")], DASH) == "L"


def test_match_is_case_sensitive():
    assert generate_sku([(COLOR, "red"), (SIZE, "small")], DASH) == ""


def test_single_fragment_has_no_delimiter():
    assert generate_sku([(SIZE, "Large")], AppSettings(delimiter="--", prefix="<", suffix=">")) == "<L>"
