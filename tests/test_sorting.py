from roomquote.catalog import new_work_item
from roomquote.models import Room
from roomquote.pricing import calculate_room_price_with_materials
from roomquote.sorting import CUSTOM_WORK_POSITION, UNKNOWN_POSITION, build_index, item_position, sort_items_by_master_list


def test_items_follow_price_list_order(default_price_list):
    items = [
        {"property_id": "custom_work", "name": "Cleanup"},
        {"property_id": "painting_wall", "name": "Painting"},
        {"name": "Something unknown"},
        {"property_id": "wiring", "name": "Electrical installation work"},
    ]
    ordered = sort_items_by_master_list(items, default_price_list)
    assert [item["name"] for item in ordered] == [
        "Electrical installation work",
        "Painting",
        "Something unknown",
        "Cleanup",
    ]


def test_sanitary_lines_ordered_by_type(default_price_list):
    index = build_index(default_price_list, "work")
    bathtub = item_position({"name": "Sanitary installations", "subtitle": "Bathtub"}, index)
    valve = item_position({"name": "Sanitary installations", "subtitle": "Corner valve"}, index)
    assert valve < bathtub < UNKNOWN_POSITION


def test_large_format_lines_sit_with_their_parent(default_price_list):
    index = build_index(default_price_list, "work")
    position = item_position({"name": "Veľkoformát Obklad"}, index)
    assert position == index["Tiling under 60cm"]


def test_special_positions(default_price_list):
    index = build_index(default_price_list, "work")
    assert item_position({"property_id": "custom_work"}, index) == CUSTOM_WORK_POSITION
    assert item_position({"name": "Nope"}, index) == UNKNOWN_POSITION


def test_missing_inputs():
    assert sort_items_by_master_list(None, None) == []
    items = [{"name": "b"}, {"name": "a"}]
    assert sort_items_by_master_list(items, None) == items


def test_breakdown_lines_can_be_sorted(default_price_list):
    room = Room(
        id="room-1",
        work_items=[
            new_work_item("painting_wall", fields={"Width": 3, "Height": 2.5}),
            new_work_item("plasterboarding_partition", selected_type="Simple", fields={"Width": 3, "Length": 2.5}),
        ],
    )
    breakdown = calculate_room_price_with_materials(room, default_price_list)
    ordered = sort_items_by_master_list(breakdown.items, default_price_list)
    assert [line.property_id for line in ordered] == ["plasterboarding_partition", "painting_wall"]
