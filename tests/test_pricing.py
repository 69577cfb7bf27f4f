import pytest

from roomquote.catalog import new_work_item
from roomquote.config import PricingConfig
from roomquote.models import Room
from roomquote.pricelist import PriceList
from roomquote.pricing import (
    auxiliary_rates,
    calculate_room_price,
    calculate_room_price_with_materials,
)


def _room(*items):
    return Room(id="room-1", name="Bathroom", work_items=list(items))


def _by_id(lines):
    return {line.id: line for line in lines}


def test_plasterboard_partition_end_to_end(small_price_list):
    item = new_work_item(
        "plasterboarding_partition", selected_type="Simple", fields={"Width": 3, "Length": 2.5}
    )
    breakdown = calculate_room_price_with_materials(_room(item), small_price_list)

    assert breakdown.base_work_total == pytest.approx(90)
    assert breakdown.base_material_total == pytest.approx(20)
    # No auxiliary entries in the list, so the 10% fallback applies to both.
    assert breakdown.work_total == pytest.approx(99)
    assert breakdown.material_total == pytest.approx(22)
    assert breakdown.others_total == 0
    assert breakdown.total == pytest.approx(121)

    material_line = _by_id(breakdown.material_items)[f"{item.id}_material"]
    assert material_line.name == "Plasterboard"
    assert material_line.calculation.quantity == 4
    assert material_line.calculation.material_cost == pytest.approx(20)


def test_adhesive_counted_once_from_combined_area(small_price_list):
    tiling = new_work_item("tiling_under_60", fields={"Width": 3, "Height": 2})
    paving = new_work_item("paving_under_60", fields={"Width": 2, "Length": 2})
    breakdown = calculate_room_price_with_materials(_room(tiling, paving), small_price_list)

    assert breakdown.areas.tiling_paving_area == pytest.approx(10)
    adhesive_lines = [line for line in breakdown.material_items if line.name == "Adhesive"]
    assert len(adhesive_lines) == 1
    # ceil(10 / 3) packages at 15
    assert adhesive_lines[0].calculation.quantity == 4
    assert adhesive_lines[0].calculation.material_cost == pytest.approx(60)
    assert breakdown.base_material_total == pytest.approx(60)

    single = new_work_item("tiling_under_60", fields={"Width": 5, "Height": 2})
    alone = calculate_room_price_with_materials(_room(single), small_price_list)
    assert alone.base_material_total == pytest.approx(breakdown.base_material_total)


def test_grouting_added_for_tiled_area(small_price_list):
    tiling = new_work_item("tiling_under_60", fields={"Width": 3, "Height": 2})
    paving = new_work_item("paving_under_60", fields={"Width": 2, "Length": 2})
    breakdown = calculate_room_price_with_materials(_room(tiling, paving), small_price_list)

    grouting = _by_id(breakdown.items)["room-1_grouting"]
    assert grouting.calculation.quantity == pytest.approx(10)
    assert grouting.calculation.work_cost == pytest.approx(50)
    assert breakdown.base_work_total == pytest.approx(180 + 112 + 50)


def test_large_format_priced_separately_without_material(small_price_list):
    large = new_work_item(
        "tiling_under_60", fields={"Width": 2, "Height": 2, "Large Format_above 60cm": True}
    )
    normal = new_work_item("tiling_under_60", fields={"Width": 3, "Height": 2})
    breakdown = calculate_room_price_with_materials(_room(large, normal), small_price_list)

    lines = _by_id(breakdown.items)
    assert lines[large.id].name == "Large Format"
    assert lines[large.id].calculation.work_cost == pytest.approx(320)
    assert breakdown.areas.tiling_paving_area == pytest.approx(6)
    adhesive = [line for line in breakdown.material_items if line.name == "Adhesive"]
    assert len(adhesive) == 1
    assert adhesive[0].calculation.material_cost == pytest.approx(30)
    assert lines["room-1_grouting"].calculation.work_cost == pytest.approx(30)


def test_extra_works_become_their_own_lines(small_price_list):
    tiling = new_work_item(
        "tiling_under_60", fields={"Width": 3, "Height": 2, "Jolly Edging": 2.5}
    )
    paving = new_work_item(
        "paving_under_60",
        fields={"Width": 2, "Length": 2, "Plinth_cutting and grinding": 3, "Plinth_bonding": 3},
    )
    breakdown = calculate_room_price_with_materials(_room(tiling, paving), small_price_list)

    lines = _by_id(breakdown.items)
    assert lines[f"{tiling.id}_jolly"].calculation.work_cost == pytest.approx(62.5)
    assert lines[f"{paving.id}_plinth_cutting"].calculation.work_cost == pytest.approx(18)
    assert lines[f"{paving.id}_plinth_bonding"].calculation.work_cost == pytest.approx(12)


def test_scaffolding_split_into_assembly_and_rental():
    scaffolding = new_work_item(
        "rentals", name="Scaffolding", fields={"Length": 4, "Height": 3, "Rental duration": 5}
    )
    breakdown = calculate_room_price_with_materials(_room(scaffolding), PriceList())

    lines = _by_id(breakdown.others_items)
    assembly = lines[scaffolding.id]
    rental = lines[f"{scaffolding.id}_rental"]
    assert assembly.calculation.work_cost == pytest.approx(360)
    assert assembly.subtitle.endswith(" - montáž a demontáž")
    assert rental.calculation.work_cost == pytest.approx(600)
    assert rental.subtitle.endswith(" - prenájom")
    assert breakdown.others_total == pytest.approx(960)
    assert breakdown.total == pytest.approx(960)
    assert not breakdown.items


def test_scaffolding_rates_follow_settings():
    scaffolding = new_work_item(
        "rentals", name="Scaffolding", fields={"Length": 2, "Height": 2, "Rental duration": 1}
    )
    settings = PricingConfig(scaffolding_assembly_rate=20, scaffolding_rental_rate=5)
    breakdown = calculate_room_price_with_materials(_room(scaffolding), PriceList(), settings)
    assert breakdown.others_total == pytest.approx(4 * 20 + 4 * 5)


def test_window_and_door_jamb_material_lines(small_price_list):
    window = new_work_item("window_installation", fields={"Circumference": 3, "Price": 240})
    jambs = new_work_item("door_jamb_installation", fields={"Count": 2, "Price": 60})
    breakdown = calculate_room_price_with_materials(_room(window, jambs), small_price_list)

    work = _by_id(breakdown.items)
    assert work[window.id].calculation.work_cost == pytest.approx(21)
    assert work[jambs.id].calculation.work_cost == pytest.approx(20)

    materials = _by_id(breakdown.material_items)
    assert materials[f"{window.id}_window_material"].name == "Okná"
    assert materials[f"{window.id}_window_material"].calculation.material_cost == pytest.approx(240)
    assert materials[f"{jambs.id}_doorjamb_material"].name == "Zárubne"
    assert materials[f"{jambs.id}_doorjamb_material"].calculation.material_cost == pytest.approx(120)
    assert breakdown.base_material_total == pytest.approx(360)


def test_floating_floor_brings_skirting(small_price_list):
    floor = new_work_item("floating_floor", fields={"Width": 4, "Length": 3})
    breakdown = calculate_room_price_with_materials(_room(floor), small_price_list)

    assert breakdown.areas.floating_floor_perimeter == pytest.approx(14)
    assert _by_id(breakdown.items)["room-1_skirting"].calculation.work_cost == pytest.approx(56)
    board = _by_id(breakdown.material_items)["room-1_skirting_material"]
    assert board.calculation.material_cost == pytest.approx(42)
    assert breakdown.base_work_total == pytest.approx(84 + 56)
    assert breakdown.base_material_total == pytest.approx(210 + 42)


def test_others_are_not_surcharged(small_price_list):
    commute = new_work_item("commute", fields={"Distance": 25, "Duration": 3})
    custom = new_work_item(
        "custom_work", selected_type="Work", fields={"Name": "Haulage", "Quantity": 1, "Price": 40}
    )
    drill = new_work_item("rentals", name="Tool rental", fields={"Count": 2})
    breakdown = calculate_room_price_with_materials(_room(commute, custom, drill), small_price_list)

    others = _by_id(breakdown.others_items)
    assert others[commute.id].calculation.work_cost == pytest.approx(75)
    assert others[custom.id].name == "Haulage"
    assert others[drill.id].calculation.work_cost == pytest.approx(20)
    assert breakdown.others_total == pytest.approx(135)
    assert breakdown.work_total == 0
    assert breakdown.total == pytest.approx(135)


def test_auxiliary_rates_read_from_price_list(default_price_list):
    assert auxiliary_rates(default_price_list) == (pytest.approx(0.65), pytest.approx(0.10))
    assert auxiliary_rates(PriceList()) == (pytest.approx(0.10), pytest.approx(0.10))
    custom = PricingConfig(auxiliary_work_rate=0.2, auxiliary_material_rate=0.05)
    assert auxiliary_rates(None, custom) == (pytest.approx(0.2), pytest.approx(0.05))


def test_default_list_surcharges_work_and_material(default_price_list):
    netting = new_work_item("netting_wall", fields={"Width": 5, "Height": 2})
    breakdown = calculate_room_price_with_materials(_room(netting), default_price_list)
    # 10 m2 at 6, mesh at 2, adhesive ceil(10 / 6) packages at 9
    assert breakdown.base_work_total == pytest.approx(60)
    assert breakdown.base_material_total == pytest.approx(20 + 18)
    assert breakdown.work_total == pytest.approx(60 * 1.65)
    assert breakdown.material_total == pytest.approx(38 * 1.10)


def test_unmatched_items_are_reported_with_suggestions(small_price_list):
    levelling = new_work_item("levelling", fields={"Width": 2, "Length": 2})
    breakdown = calculate_room_price_with_materials(_room(levelling), small_price_list)

    assert breakdown.total == 0
    assert len(breakdown.unmatched) == 1
    unmatched = breakdown.unmatched[0]
    assert unmatched.work_item is levelling
    assert len(unmatched.suggestions) == 3


def test_empty_inputs_price_to_zero(small_price_list):
    assert calculate_room_price(None, small_price_list) == 0
    assert calculate_room_price(_room(), small_price_list) == 0
    assert calculate_room_price(_room(new_work_item("wiring")), None) == 0


def test_calculate_room_price_matches_breakdown_total(small_price_list):
    item = new_work_item(
        "plasterboarding_partition", selected_type="Simple", fields={"Width": 3, "Length": 2.5}
    )
    assert calculate_room_price(_room(item), small_price_list) == pytest.approx(121)
