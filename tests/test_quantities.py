import pytest

from roomquote.models import DoorWindowItems, Opening
from roomquote.quantities import derive_quantity_and_unit, scaffolding_costs
from roomquote.utils import parse_number


def test_wall_area_subtracts_structured_openings():
    openings = DoorWindowItems(
        doors=[Opening(id="d1", width=0.8, height=2)],
        windows=[Opening(id="w1", width="1.2", height="1")],
    )
    result = derive_quantity_and_unit({"Width": 4, "Height": 2.6}, "netting_wall", openings)
    assert result.unit == "m2"
    assert result.quantity == pytest.approx(10.4 - 1.6 - 1.2)


def test_floor_area_uses_length_when_height_missing():
    result = derive_quantity_and_unit({"Width": 3, "Length": 2.5}, "plasterboarding_partition")
    assert result.quantity == pytest.approx(7.5)
    assert result.unit == "m2"


def test_area_never_drops_below_zero():
    openings = DoorWindowItems(doors=[Opening(width=3, height=3)])
    result = derive_quantity_and_unit({"Width": 1, "Height": 1}, "plastering_wall", openings)
    assert result.quantity == 0


def test_legacy_records_deduct_flat_opening_areas():
    result = derive_quantity_and_unit(
        {"Width": 5, "Height": 3, "Doors": 1, "Windows": 2}, "plastering_wall", None
    )
    assert result.quantity == pytest.approx(15 - 2 - 3)


def test_linear_quantities_ignore_openings():
    openings = DoorWindowItems(doors=[Opening(width=1, height=2)])
    result = derive_quantity_and_unit({"Length": 6}, "corner_bead", openings)
    assert result.unit == "m"
    assert result.quantity == pytest.approx(6)


def test_count_and_outlet_labels_in_both_languages():
    assert derive_quantity_and_unit({"Count": 3}, "door_jamb_installation").quantity == 3
    assert derive_quantity_and_unit({"Number of outlets": 12}, "wiring").unit == "pc"
    assert derive_quantity_and_unit({"Počet vývodov": 4}, "plumbing").quantity == 4


def test_commute_multiplies_distance_by_days():
    result = derive_quantity_and_unit({"Distance": 25, "Duration": 3}, "commute")
    assert result.unit == "km"
    assert result.quantity == pytest.approx(75)

    single_day = derive_quantity_and_unit({"Vzdialenosť": 40}, "commute")
    assert single_day.quantity == pytest.approx(40)


def test_duration_outside_commute_is_hours():
    result = derive_quantity_and_unit({"Duration": 8}, "preparatory")
    assert result.unit == "h"
    assert result.quantity == 8


def test_circumference_and_rental_days():
    assert derive_quantity_and_unit({"Circumference": 4.4}, "window_installation").unit == "m"
    rental = derive_quantity_and_unit({"Rental duration": 3}, "rentals", subtitle="Core Drill")
    assert rental.unit == "day"
    assert rental.quantity == 3


def test_empty_fields_yield_zero_without_unit():
    result = derive_quantity_and_unit({}, "wiring")
    assert result.quantity == 0
    assert result.unit is None
    assert derive_quantity_and_unit(None, "wiring").quantity == 0


def test_scaffolding_costs_split_assembly_and_rental():
    area, days, assembly, rental = scaffolding_costs(
        {"Length": 4, "Height": 3, "Rental duration": 5}
    )
    assert area == pytest.approx(12)
    assert days == 5
    assert assembly == pytest.approx(360)
    assert rental == pytest.approx(600)


def test_parse_number_reads_leading_numbers_and_rejects_garbage():
    assert parse_number("12.5 m") == pytest.approx(12.5)
    assert parse_number(" 3") == 3
    assert parse_number("abc") == 0
    assert parse_number(None) == 0
    assert parse_number(True) == 0
    assert parse_number(float("nan")) == 0
