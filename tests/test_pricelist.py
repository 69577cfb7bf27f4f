import json
from pathlib import Path

import pytest

from roomquote.pricelist import (
    MATERIAL_COLUMNS,
    OTHERS_COLUMNS,
    WORK_COLUMNS,
    PriceList,
    PriceListEntry,
    db_column_for_entry,
    db_columns_to_price_list,
    format_price,
    load_price_list,
    price_list_to_db_columns,
)


def test_default_price_list_shape(default_price_list):
    assert len(default_price_list.work) == len(WORK_COLUMNS)
    assert len(default_price_list.material) == len(MATERIAL_COLUMNS)
    assert len(default_price_list.installations) == 14
    assert default_price_list.others[0].label == "Scaffolding - assembly and disassembly"
    board = default_price_list.find("material", "Plasterboard", "simple, partition")
    assert board.capacity.value == 1


def test_find_requires_exact_name_and_subtitle(default_price_list):
    assert default_price_list.find("work", "Large Format", "above 60cm").price == 80
    assert default_price_list.find("work", "Large Format", "below 60cm") is None
    assert default_price_list.find("work", "large format") is None
    with pytest.raises(KeyError):
        default_price_list.category("services")


def test_price_list_to_db_columns(default_price_list):
    row = price_list_to_db_columns(default_price_list)
    assert row["work_wiring_price"] == 65
    assert row["work_auxiliary_and_finishing_price"] == 65
    assert row["material_simple_plasterboarding_partition_capacity"] == 1
    assert row["work_sanitary_bathtub_price"] == 150
    assert row["others_scaffolding_assembly_and_disassembly_price"] == 30
    assert row["others_vat_price"] == 23
    assert db_column_for_entry("others", 99) is None


def test_db_columns_overlay_leaves_default_untouched(default_price_list):
    overlaid = db_columns_to_price_list(
        {"work_wiring_price": "70", "material_plaster_capacity": 12}, default_price_list
    )
    assert overlaid.work[1].price == 70
    assert overlaid.find("material", "Plaster").capacity.value == 12
    assert default_price_list.work[1].price == 65
    assert default_price_list.find("material", "Plaster").capacity.value == 8


def test_snapshot_is_independent(default_price_list):
    snapshot = default_price_list.snapshot()
    snapshot.work[0].price = 999
    assert default_price_list.work[0].price != 999


def test_load_json_price_list(tmp_path: Path):
    path = tmp_path / "prices.json"
    path.write_text(
        json.dumps({"work": [{"name": "Wiring", "price": "65", "unit": "€/pc"}], "others": []}),
        encoding="utf-8",
    )
    price_list = load_price_list(path)
    assert price_list.work[0].price == 65
    assert price_list.material == []


def test_invalid_price_lists_are_rejected(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_price_list(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_price_list(broken)

    with pytest.raises(ValueError):
        PriceList.from_dict({"work": {"name": "Wiring"}})
    with pytest.raises(ValueError):
        PriceListEntry.from_dict({"price": 4})


def test_format_price_uses_decimal_comma():
    assert format_price(12.5) == "€12,50"
    assert format_price(3, "CZK ") == "CZK 3,00"
