import pytest

from roomquote.catalog import new_work_item
from roomquote.matching import find_price_list_item, suggest_price_entries
from roomquote.pricelist import PriceList


def _list(work=(), installations=()):
    return PriceList.from_dict({"work": list(work), "installations": list(installations)})


def test_plasterboarding_type_selects_matching_subtitle(default_price_list):
    item = new_work_item(
        "plasterboarding_partition", selected_type="Double", fields={"Width": 2, "Length": 2}
    )
    entry = find_price_list_item(item, default_price_list)
    assert entry is not None
    assert entry.name == "Plasterboarding"
    assert entry.subtitle == "partition, double"


def test_plasterboarding_matches_slovak_subtitles():
    price_list = _list(
        work=[
            {"name": "Plasterboarding", "subtitle": "priečka, jednoduchá", "price": 11},
            {"name": "Plasterboarding", "subtitle": "priečka, zdvojená", "price": 19},
        ]
    )
    item = new_work_item("plasterboarding_partition", selected_type="Double")
    entry = find_price_list_item(item, price_list)
    assert entry is not None
    assert entry.price == 19


def test_ceiling_item_never_matches_wall_entry():
    price_list = _list(
        work=[
            {"name": "Plasterboarding", "subtitle": "partition, simple", "price": 12},
            {"name": "Netting", "subtitle": "wall", "price": 8},
        ]
    )
    assert find_price_list_item(new_work_item("plasterboarding_ceiling"), price_list) is None
    assert find_price_list_item(new_work_item("netting_ceiling"), price_list) is None


def test_wall_item_skips_ceiling_entry_listed_first():
    price_list = _list(
        work=[
            {"name": "Netting", "subtitle": "ceiling", "price": 10},
            {"name": "Netting", "subtitle": "wall", "price": 8},
        ]
    )
    entry = find_price_list_item(new_work_item("netting_wall"), price_list)
    assert entry is not None
    assert entry.subtitle == "wall"


def test_painting_picks_wall_or_ceiling_entry(default_price_list):
    wall = find_price_list_item(new_work_item("painting_wall"), default_price_list)
    ceiling = find_price_list_item(new_work_item("painting_ceiling"), default_price_list)
    assert wall.subtitle == "wall, 2 layers"
    assert ceiling.subtitle == "ceiling, 2 layers"


def test_sanitary_requires_exact_type(default_price_list):
    item = new_work_item("sanitary_installation", selected_type="Bathtub")
    entry = find_price_list_item(item, default_price_list)
    assert entry is not None
    assert entry.subtitle == "Bathtub"

    untyped = new_work_item("sanitary_installation")
    assert find_price_list_item(untyped, default_price_list) is None


def test_exact_name_preferred_over_substring():
    price_list = _list(
        work=[
            {"name": "Painting of railings", "subtitle": "wall", "price": 40},
            {"name": "Painting", "subtitle": "wall, 2 layers", "price": 6},
        ]
    )
    entry = find_price_list_item(new_work_item("painting_wall"), price_list)
    assert entry.price == 6


def test_legacy_alias_is_accepted():
    price_list = _list(work=[{"name": "Elektroinštalačné práce", "price": 65}])
    entry = find_price_list_item(new_work_item("wiring"), price_list)
    assert entry is not None
    assert entry.price == 65


def test_rental_matches_by_item_name(default_price_list):
    item = new_work_item("rentals", name="Core Drill", fields={"Count": 1})
    entry = find_price_list_item(item, default_price_list)
    assert entry is not None
    assert entry.name == "Core Drill"


def test_missing_inputs_return_none(default_price_list):
    assert find_price_list_item(None, default_price_list) is None
    assert find_price_list_item(new_work_item("wiring"), None) is None
    assert find_price_list_item(new_work_item("wiring"), PriceList()) is None


def test_suggestions_rank_similar_entries(default_price_list):
    item = new_work_item("wiring", name="Wiring", subtitle="outlet")
    suggestions = suggest_price_entries(item, default_price_list, limit=2)
    assert len(suggestions) == 2
    assert suggestions[0].entry.name == "Wiring"
    assert suggestions[0].score >= suggestions[1].score
    assert suggest_price_entries(item, PriceList()) == []


def test_simple_type_matches_slovak_subtitle():
    price_list = _list(
        work=[
            {"name": "Plasterboarding", "subtitle": "priečka, zdvojená", "price": 19},
            {"name": "Plasterboarding", "subtitle": "priečka, jednoduchá", "price": 11},
        ]
    )
    entry = find_price_list_item(new_work_item("plasterboarding_partition", selected_type="Simple"), price_list)
    assert entry is not None
    assert entry.price == 11


def test_simple_offset_wall_matches_slovak_subtitle():
    price_list = _list(
        work=[
            {"name": "Plasterboarding", "subtitle": "zdvojená predsadená stena", "price": 24},
            {"name": "Plasterboarding", "subtitle": "jednoduchá predsadená stena", "price": 16},
        ]
    )
    entry = find_price_list_item(new_work_item("plasterboarding_offset", selected_type="Simple"), price_list)
    assert entry is not None
    assert entry.price == 16


WALL_SUBTITLES = ("wall", "stena", "partition", "priečka", "predsadená stena")
CEILING_SUBTITLES = ("ceiling", "strop")
LOCATION_FAMILIES = [
    ("Plasterboarding", "plasterboarding_offset", "plasterboarding_ceiling"),
    ("Netting", "netting_wall", "netting_ceiling"),
]


@pytest.mark.parametrize("family, wall_property, ceiling_property", LOCATION_FAMILIES)
@pytest.mark.parametrize("ceiling", CEILING_SUBTITLES)
@pytest.mark.parametrize("wall", WALL_SUBTITLES)
def test_wall_and_ceiling_entries_never_cross(family, wall_property, ceiling_property, ceiling, wall):
    wall_item = new_work_item(wall_property, subtitle=wall)
    ceiling_item = new_work_item(ceiling_property, subtitle=ceiling)
    wall_entry = {"name": family, "subtitle": wall, "price": 8}
    ceiling_entry = {"name": family, "subtitle": ceiling, "price": 10}

    assert find_price_list_item(ceiling_item, _list(work=[wall_entry])) is None
    assert find_price_list_item(wall_item, _list(work=[ceiling_entry])) is None

    assert find_price_list_item(ceiling_item, _list(work=[wall_entry, ceiling_entry])).price == 10
    assert find_price_list_item(wall_item, _list(work=[ceiling_entry, wall_entry])).price == 8
