"""Catalogue of the work properties a room can be priced with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .constants import EntryName, Field, PropertyId
from .models import DoorWindowItems, WorkItem, new_client_id


@dataclass(frozen=True)
class WorkProperty:
    """Static description of a work property.

    ``price_name`` is the canonical price-list entry name the property is
    priced against; ``aliases`` are older entry names still found in
    snapshots taken before the list was renamed.
    """

    property_id: str
    name: str
    price_name: Optional[str]
    subtitle: Optional[str] = None
    fields: Tuple[str, ...] = ()
    types: Tuple[str, ...] = ()
    additional_fields: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()

    @property
    def second_dimension(self) -> Optional[str]:
        """Return ``Height`` or ``Length`` for area-based properties."""

        if Field.WIDTH not in self.fields:
            return None
        if Field.HEIGHT in self.fields:
            return Field.HEIGHT
        if Field.LENGTH in self.fields:
            return Field.LENGTH
        return None

    @property
    def has_openings(self) -> bool:
        return Field.DOORS in self.fields or Field.WINDOWS in self.fields


_WALL = (Field.WIDTH, Field.HEIGHT, Field.DOORS, Field.WINDOWS)
_WALL_PLAIN = (Field.WIDTH, Field.HEIGHT)
_FLOOR = (Field.WIDTH, Field.LENGTH)

SANITARY_TYPES: Tuple[str, ...] = (
    "Corner valve",
    "Standing mixer tap",
    "Wall-mounted tap",
    "Flush-mounted tap",
    "Toilet combi",
    "Concealed toilet",
    "Sink",
    "Sink with cabinet",
    "Bathtub",
    "Shower cubicle",
    "Installation of gutter",
    "Urinal",
    "Bath screen",
    "Mirror",
)

RENTAL_ITEMS: Dict[str, Tuple[str, ...]] = {
    EntryName.SCAFFOLDING: (Field.LENGTH, Field.HEIGHT, Field.RENTAL_DURATION),
    EntryName.CORE_DRILL: (Field.COUNT,),
    EntryName.TOOL_RENTAL: (Field.COUNT,),
}

_PROPERTIES: List[WorkProperty] = [
    WorkProperty(PropertyId.PREPARATORY, "Preparatory and demolition works",
                 "Preparatory and demolition works", fields=(Field.DURATION,)),
    WorkProperty(PropertyId.WIRING, "Electrical installation work", "Wiring",
                 subtitle="switch, socket, light, connection point", fields=(Field.OUTLETS,),
                 aliases=("Elektroinštalačné práce", "Electrical installation work")),
    WorkProperty(PropertyId.PLUMBING, "Plumbing work", "Plumbing",
                 subtitle="hot, cold, waste, connection point", fields=(Field.OUTLETS,),
                 aliases=("Vodoinštalačné práce", "Plumbing work")),
    WorkProperty(PropertyId.BRICK_PARTITIONS, "Brick partitions", "Brick partitions",
                 subtitle="75 - 175mm", fields=_WALL, aliases=("Murovanie priečok",)),
    WorkProperty(PropertyId.BRICK_LOAD_BEARING, "Brick load-bearing wall", "Brick load-bearing wall",
                 subtitle="200 - 450mm", fields=_WALL, aliases=("Murovanie nosného muriva",)),
    WorkProperty(PropertyId.PLASTERBOARDING_PARTITION, "Plasterboarding", EntryName.PLASTERBOARDING,
                 subtitle="partition", fields=(Field.WIDTH, Field.LENGTH, Field.WINDOWS),
                 types=("Simple", "Double", "Triple"),
                 aliases=("Sádrokartón", "Sadrokartonárske práce")),
    WorkProperty(PropertyId.PLASTERBOARDING_OFFSET, "Plasterboarding", EntryName.PLASTERBOARDING,
                 subtitle="offset wall", fields=_WALL, types=("Simple", "Double"),
                 aliases=("Sádrokartón", "Sadrokartonárske práce")),
    WorkProperty(PropertyId.PLASTERBOARDING_CEILING, "Plasterboarding", EntryName.PLASTERBOARDING,
                 subtitle="ceiling", fields=_FLOOR,
                 aliases=("Sádrokartón", "Sadrokartonárske práce")),
    WorkProperty(PropertyId.NETTING_WALL, "Netting", EntryName.NETTING,
                 subtitle="wall", fields=_WALL, aliases=("Sieťkovanie",)),
    WorkProperty(PropertyId.NETTING_CEILING, "Netting", EntryName.NETTING,
                 subtitle="ceiling", fields=_FLOOR, aliases=("Sieťkovanie",)),
    WorkProperty(PropertyId.PLASTERING_WALL, "Plastering", EntryName.PLASTERING,
                 subtitle="wall", fields=_WALL, aliases=("Omietka",)),
    WorkProperty(PropertyId.PLASTERING_CEILING, "Plastering", EntryName.PLASTERING,
                 subtitle="ceiling", fields=_FLOOR, aliases=("Omietka",)),
    WorkProperty(PropertyId.FACADE_PLASTERING, "Facade Plastering", "Facade Plastering",
                 fields=_WALL, aliases=("Fasádne omietky",)),
    WorkProperty(PropertyId.CORNER_BEAD, "Installation of corner bead", "Installation of corner bead",
                 fields=(Field.LENGTH,),
                 aliases=("Osadenie rohových lišt", "Osadenie rohovej lišty")),
    WorkProperty(PropertyId.WINDOW_SASH, "Plastering of window sash", "Plastering of window sash",
                 fields=(Field.LENGTH,), aliases=("Omietka špalety",)),
    WorkProperty(PropertyId.PENETRATION_COATING, "Penetration coating", "Penetration coating",
                 fields=_WALL_PLAIN, aliases=("Penetračný náter",)),
    WorkProperty(PropertyId.PAINTING_WALL, "Painting", EntryName.PAINTING,
                 subtitle="wall, 2 layers", fields=_WALL_PLAIN, aliases=("Maľovanie",)),
    WorkProperty(PropertyId.PAINTING_CEILING, "Painting", EntryName.PAINTING,
                 subtitle="ceiling, 2 layers", fields=_FLOOR, aliases=("Maľovanie",)),
    WorkProperty(PropertyId.LEVELLING, "Levelling", "Levelling",
                 fields=_FLOOR, aliases=("Vyrovnávanie", "Nivelačka")),
    WorkProperty(PropertyId.FLOATING_FLOOR, "Floating floor", "Floating floor",
                 fields=_FLOOR, aliases=("Plávajúca podlaha",)),
    WorkProperty(PropertyId.TILING_UNDER_60, "Tiling under 60cm", "Tiling under 60cm",
                 subtitle="ceramic", fields=_WALL,
                 additional_fields=(Field.LARGE_FORMAT, Field.JOLLY_EDGING),
                 aliases=("Obklad do 60cm",)),
    WorkProperty(PropertyId.PAVING_UNDER_60, "Paving under 60cm", "Paving under 60cm",
                 subtitle="ceramic", fields=_FLOOR,
                 additional_fields=(Field.LARGE_FORMAT, Field.PLINTH_CUTTING, Field.PLINTH_BONDING),
                 aliases=("Dlažba do 60 cm",)),
    WorkProperty(PropertyId.GROUTING, "Grouting", EntryName.GROUTING, fields=_FLOOR),
    WorkProperty(PropertyId.SILICONING, "Siliconing", "Siliconing",
                 fields=(Field.LENGTH,), aliases=("Silikónovanie",)),
    WorkProperty(PropertyId.SANITARY_INSTALLATION, "Sanitary installation", EntryName.SANITARY,
                 fields=(Field.COUNT, Field.PRICE), types=SANITARY_TYPES),
    WorkProperty(PropertyId.WINDOW_INSTALLATION, "Window installation", "Window installation",
                 fields=(Field.CIRCUMFERENCE, Field.PRICE)),
    WorkProperty(PropertyId.DOOR_JAMB_INSTALLATION, "Installation of door jamb",
                 "Installation of door jamb", fields=(Field.COUNT, Field.PRICE)),
    WorkProperty(PropertyId.CUSTOM_WORK, "Custom work and material", EntryName.CUSTOM_WORK,
                 fields=(Field.NAME, Field.QUANTITY, Field.PRICE), types=("Work", "Material")),
    WorkProperty(PropertyId.COMMUTE, "Commute", EntryName.COMMUTE,
                 fields=(Field.DISTANCE, Field.DURATION), aliases=(EntryName.JOURNEY,)),
    WorkProperty(PropertyId.RENTALS, "Rentals", None),
]

CATALOG: Dict[str, WorkProperty] = {prop.property_id: prop for prop in _PROPERTIES}


def get_property(property_id: Optional[str]) -> Optional[WorkProperty]:
    if not property_id:
        return None
    return CATALOG.get(property_id)


def default_subtitle(property_id: Optional[str]) -> Optional[str]:
    prop = get_property(property_id)
    return prop.subtitle if prop else None


def new_work_item(
    property_id: str,
    *,
    name: Optional[str] = None,
    subtitle: Optional[str] = None,
    selected_type: Optional[str] = None,
    selected_unit: Optional[str] = None,
    fields: Optional[Mapping[str, Any]] = None,
) -> WorkItem:
    """Create a work item the way the room editor's add button does.

    The item receives a fresh client id which then stays with it for its
    whole life; its name and subtitle default to the catalogue values.
    """

    prop = get_property(property_id)
    if prop is None:
        raise KeyError(f"Unknown work property '{property_id}'")

    if property_id == PropertyId.RENTALS:
        if not name or name not in RENTAL_ITEMS:
            raise ValueError(f"Rental item must be one of {sorted(RENTAL_ITEMS)}")
        item_name = name
        item_subtitle = subtitle or (name if name == EntryName.SCAFFOLDING else None)
    else:
        item_name = name or prop.name
        item_subtitle = subtitle if subtitle is not None else prop.subtitle

    if prop.types and selected_type is not None and selected_type not in prop.types:
        raise ValueError(f"Type '{selected_type}' is not valid for '{property_id}'")

    if property_id == PropertyId.SANITARY_INSTALLATION and selected_type and item_subtitle is None:
        item_subtitle = selected_type

    client_id = new_client_id()
    return WorkItem(
        id=client_id,
        c_id=client_id,
        property_id=property_id,
        name=item_name,
        subtitle=item_subtitle,
        selected_type=selected_type,
        selected_unit=selected_unit,
        fields=dict(fields or {}),
        door_window_items=DoorWindowItems(),
    )


__all__ = [
    "CATALOG",
    "RENTAL_ITEMS",
    "SANITARY_TYPES",
    "WorkProperty",
    "default_subtitle",
    "get_property",
    "new_work_item",
]
