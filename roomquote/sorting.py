"""Order quote lines the way the general price list lists them."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

from .catalog import get_property
from .constants import PropertyId
from .pricelist import PriceList

T = TypeVar("T")

UNKNOWN_POSITION = 99999
CUSTOM_WORK_POSITION = 999999

_CATEGORY_SECTIONS: Dict[str, Tuple[str, ...]] = {
    "work": ("work", "installations"),
    "material": ("material",),
    "others": ("others",),
}

_LARGE_FORMAT_MARKER = "Veľkoformát"
_LARGE_FORMAT_PARENTS = (("Obklad", "Tiling under 60cm"), ("Dlažba", "Paving under 60cm"))


def _attribute(item: Any, *names: str) -> Optional[str]:
    for name in names:
        if isinstance(item, dict):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        if value:
            return str(value)
    return None


def build_index(master_list: PriceList, category: str = "work") -> Dict[str, int]:
    """Map entry names, ``name-subtitle`` keys and property ids to positions."""

    index: Dict[str, int] = {}
    position = 0
    for section in _CATEGORY_SECTIONS.get(category, ()):
        for entry in master_list.category(section):
            index.setdefault(entry.name, position)
            if entry.subtitle:
                index.setdefault(f"{entry.name}-{entry.subtitle}", position)
            position += 1
    return index


def item_position(item: Any, index: Dict[str, int]) -> int:
    property_id = _attribute(item, "property_id", "propertyId")
    name = _attribute(item, "name")
    subtitle = _attribute(item, "subtitle", "selected_type", "selectedType")

    if property_id and property_id in index:
        return index[property_id]

    prop = get_property(property_id)
    if prop is not None and prop.price_name:
        for candidate in (prop.price_name,) + prop.aliases:
            if subtitle and f"{candidate}-{subtitle}" in index:
                return index[f"{candidate}-{subtitle}"]
            if candidate in index:
                return index[candidate]

    if name and subtitle and f"{name}-{subtitle}" in index:
        return index[f"{name}-{subtitle}"]
    if name and name in index:
        return index[name]

    if name and _LARGE_FORMAT_MARKER in name:
        for marker, parent in _LARGE_FORMAT_PARENTS:
            if marker in name and parent in index:
                return index[parent]

    if property_id == PropertyId.CUSTOM_WORK:
        return CUSTOM_WORK_POSITION
    return UNKNOWN_POSITION


def sort_items_by_master_list(
    items: Optional[Sequence[T]], master_list: Optional[PriceList], category: str = "work"
) -> List[T]:
    """Return ``items`` sorted by their position in ``master_list``.

    The sort is stable, so lines sharing a position keep their order. Custom
    work always goes last and unknown lines just before it.
    """

    if not items:
        return []
    if master_list is None:
        return list(items)
    index = build_index(master_list, category)
    return sorted(items, key=lambda item: item_position(item, index))


__all__ = [
    "CUSTOM_WORK_POSITION",
    "UNKNOWN_POSITION",
    "build_index",
    "item_position",
    "sort_items_by_master_list",
]
