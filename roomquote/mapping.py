"""Translate work items to and from their per-category database rows."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .catalog import default_subtitle, get_property
from .constants import (
    CUSTOM_TYPE_MATERIAL,
    CUSTOM_TYPE_WORK,
    EntryName,
    Field,
    PropertyId,
    Unit,
)
from .materials import is_large_format
from .models import DoorWindowItems, Opening, WorkItem, new_client_id
from .utils import parse_number

logger = logging.getLogger(__name__)

PROPERTY_TO_TABLE: Dict[str, str] = {
    PropertyId.PREPARATORY: "demolitions",
    PropertyId.WIRING: "wirings",
    PropertyId.PLUMBING: "plumbings",
    PropertyId.BRICK_PARTITIONS: "brick_partitions",
    PropertyId.BRICK_LOAD_BEARING: "brick_load_bearing_walls",
    PropertyId.PLASTERBOARDING_PARTITION: "plasterboarding_partitions",
    PropertyId.PLASTERBOARDING_OFFSET: "plasterboarding_offset_walls",
    PropertyId.PLASTERBOARDING_CEILING: "plasterboarding_ceilings",
    PropertyId.NETTING_WALL: "netting_walls",
    PropertyId.NETTING_CEILING: "netting_ceilings",
    PropertyId.PLASTERING_WALL: "plastering_walls",
    PropertyId.PLASTERING_CEILING: "plastering_ceilings",
    PropertyId.FACADE_PLASTERING: "facade_plasterings",
    PropertyId.CORNER_BEAD: "installation_of_corner_beads",
    PropertyId.WINDOW_SASH: "plastering_of_window_sashes",
    PropertyId.PENETRATION_COATING: "penetration_coatings",
    PropertyId.PAINTING_WALL: "painting_walls",
    PropertyId.PAINTING_CEILING: "painting_ceilings",
    PropertyId.LEVELLING: "levellings",
    PropertyId.FLOATING_FLOOR: "laying_floating_floors",
    PropertyId.TILING_UNDER_60: "tile_ceramics",
    PropertyId.PAVING_UNDER_60: "paving_ceramics",
    PropertyId.GROUTING: "groutings",
    PropertyId.SILICONING: "siliconings",
    PropertyId.SANITARY_INSTALLATION: "installation_of_sanitaries",
    PropertyId.WINDOW_INSTALLATION: "window_installations",
    PropertyId.DOOR_JAMB_INSTALLATION: "installation_of_door_jambs",
    PropertyId.CUSTOM_WORK: "custom_works",
    # Commute has no table of its own and is told apart from custom work on read.
    PropertyId.COMMUTE: "custom_works",
    # Identifiers used by older clients.
    "demolition": "demolitions",
    "tile_ceramic": "tile_ceramics",
    "paving_ceramic": "paving_ceramics",
    "door_jamb": "installation_of_door_jambs",
    "custom_material": "custom_materials",
    "scaffolding": "scaffoldings",
    "core_drill": "core_drills",
    "tool_rental": "tool_rentals",
}

TABLE_TO_PROPERTY: Dict[str, str] = {
    table: property_id
    for property_id, table in PROPERTY_TO_TABLE.items()
    if get_property(property_id) is not None and property_id != PropertyId.COMMUTE
}
TABLE_TO_PROPERTY.update(
    {
        "custom_materials": PropertyId.CUSTOM_WORK,
        "scaffoldings": PropertyId.RENTALS,
        "core_drills": PropertyId.RENTALS,
        "tool_rentals": PropertyId.RENTALS,
    }
)

RENTAL_TABLES: Dict[str, str] = {
    EntryName.SCAFFOLDING: "scaffoldings",
    EntryName.CORE_DRILL: "core_drills",
    EntryName.TOOL_RENTAL: "tool_rentals",
}

# Parent tables whose rows own door and window child rows.
FOREIGN_KEY_COLUMNS: Dict[str, str] = {
    "brick_load_bearing_walls": "brick_load_bearing_wall_id",
    "brick_partitions": "brick_partition_id",
    "facade_plasterings": "facade_plastering_id",
    "netting_walls": "netting_wall_id",
    "plasterboarding_offset_walls": "plasterboarding_offset_wall_id",
    "plasterboarding_partitions": "plasterboarding_partition_id",
    "plasterboarding_ceilings": "plasterboarding_ceiling_id",
    "plastering_walls": "plastering_wall_id",
    "tile_ceramics": "tile_ceramic_id",
}

COMMUTE_TITLES = (EntryName.COMMUTE_SK, EntryName.COMMUTE)

_BRICK_TABLES = {"brick_partitions", "brick_load_bearing_walls"}
_PLASTERBOARD_TABLES = {
    "plasterboarding_partitions",
    "plasterboarding_offset_walls",
    "plasterboarding_ceilings",
}
_AREA_TABLES = {
    "netting_walls",
    "netting_ceilings",
    "plastering_walls",
    "plastering_ceilings",
    "painting_walls",
    "painting_ceilings",
    "facade_plasterings",
    "penetration_coatings",
    "levellings",
    "laying_floating_floors",
    "tile_ceramics",
    "paving_ceramics",
    "groutings",
}
_LENGTH_TABLES = {"installation_of_corner_beads", "plastering_of_window_sashes", "siliconings"}
_OUTLET_TABLES = {"wirings", "plumbings"}
_CUSTOM_TABLES = {"custom_works", "custom_materials"}
_COUNT_RENTAL_TABLES = {"core_drills", "tool_rentals"}

# Complementary-work flag columns on brick walls.
BRICK_FLAG_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("netting", "Netting"),
    ("painting", "Painting"),
    ("plastering", "Plastering"),
    ("tiling", "Tiling under 60cm"),
    ("penetration_one", "Penetration coating"),
)

PLASTERBOARD_TYPE_CODES: Dict[str, int] = {"Simple": 1, "Double": 2, "Triple": 3}
PLASTERBOARD_TYPE_NAMES: Dict[int, str] = {code: name for name, code in PLASTERBOARD_TYPE_CODES.items()}

# Extra inputs stored next to the dimensions of tiling and paving rows.
EXTRA_FIELD_COLUMNS: Tuple[Tuple[str, str], ...] = (
    (Field.LARGE_FORMAT, "large_format"),
    (Field.JOLLY_EDGING, "jolly_edging"),
    (Field.PLINTH_CUTTING, "plinth_cutting"),
    (Field.PLINTH_BONDING, "plinth_bonding"),
)

# Opening counts of records saved before doors and windows carried sizes.
LEGACY_OPENING_COLUMNS: Tuple[Tuple[str, str], ...] = (
    (Field.DOORS, "doors"),
    (Field.WINDOWS, "windows"),
)


def get_table_name(property_id: Optional[str], work_item: Optional[WorkItem] = None) -> Optional[str]:
    """Return the table a work item is stored in, or ``None`` when unmapped.

    Custom items typed as material live in ``custom_materials`` and rentals
    are split by the rented item's name.
    """

    if not property_id:
        return None
    if work_item is not None:
        if property_id == PropertyId.CUSTOM_WORK and work_item.selected_type == CUSTOM_TYPE_MATERIAL:
            return "custom_materials"
        if property_id == PropertyId.RENTALS:
            return RENTAL_TABLES.get(work_item.name)
    return PROPERTY_TO_TABLE.get(property_id)


def foreign_key_column(table_name: Optional[str]) -> Optional[str]:
    if not table_name:
        return None
    return FOREIGN_KEY_COLUMNS.get(table_name)


def _second_dimension(property_id: str) -> str:
    prop = get_property(property_id)
    if prop is not None and prop.second_dimension:
        return prop.second_dimension
    return Field.HEIGHT


def _size_columns(work_item: WorkItem) -> Dict[str, float]:
    values = work_item.fields
    second = _second_dimension(work_item.property_id)
    return {
        "size1": parse_number(values.get(Field.WIDTH)),
        "size2": parse_number(values.get(second)),
    }


def _size_fields(row: Mapping[str, Any], property_id: str) -> Dict[str, Any]:
    return {
        Field.WIDTH: parse_number(row.get("size1")),
        _second_dimension(property_id): parse_number(row.get("size2")),
    }


def _legacy_opening_columns(work_item: WorkItem) -> Dict[str, float]:
    prop = get_property(work_item.property_id)
    if work_item.door_window_items is not None or prop is None or not prop.has_openings:
        return {}
    return {
        column: parse_number(work_item.fields.get(field_name))
        for field_name, column in LEGACY_OPENING_COLUMNS
        if field_name in prop.fields
    }


def _read_legacy_openings(item: WorkItem, row: Mapping[str, Any]) -> None:
    counts = {
        field_name: parse_number(row.get(column))
        for field_name, column in LEGACY_OPENING_COLUMNS
        if column in row
    }
    if counts:
        item.fields.update(counts)
        item.door_window_items = None


def _is_commute_row(row: Mapping[str, Any]) -> bool:
    # Heuristic: a custom item literally titled "Cesta" and priced in km reads back as commute.
    return row.get("title") in COMMUTE_TITLES and row.get("unit") == Unit.KM


def work_item_to_database(
    work_item: WorkItem, room_id: Optional[str], contractor_id: Optional[str]
) -> Optional[Dict[str, Any]]:
    """Build the row stored for ``work_item``.

    Returns ``None`` (and logs a warning) when the property has no table.
    The item's client id is kept so repeated saves upsert the same row.
    """

    table_name = get_table_name(work_item.property_id, work_item)
    if table_name is None:
        logger.warning("No table mapping for property %s", work_item.property_id)
        return None

    values = work_item.fields
    row: Dict[str, Any] = {
        "c_id": work_item.key or new_client_id(),
        "room_id": room_id,
        "contractor_id": contractor_id,
    }

    if table_name in _BRICK_TABLES:
        row.update(_size_columns(work_item))
        row.update(_legacy_opening_columns(work_item))
        for column, work_name in BRICK_FLAG_COLUMNS:
            row[column] = 1 if work_item.complementary_works.get(work_name) else 0
    elif table_name in _PLASTERBOARD_TABLES:
        row.update(_size_columns(work_item))
        row.update(_legacy_opening_columns(work_item))
        row["type"] = PLASTERBOARD_TYPE_CODES.get(work_item.selected_type or "")
    elif table_name in _AREA_TABLES:
        row.update(_size_columns(work_item))
        row.update(_legacy_opening_columns(work_item))
        prop = get_property(work_item.property_id)
        extras = prop.additional_fields if prop else ()
        for field_name, column in EXTRA_FIELD_COLUMNS:
            if field_name not in extras:
                continue
            if field_name == Field.LARGE_FORMAT:
                row[column] = 1 if is_large_format(work_item) else 0
            else:
                row[column] = parse_number(values.get(field_name))
    elif table_name in _LENGTH_TABLES:
        row["length"] = parse_number(values.get(Field.LENGTH))
    elif table_name in _OUTLET_TABLES:
        row["count"] = parse_number(values.get(Field.OUTLETS) or values.get(Field.OUTLETS_SK))
    elif table_name == "installation_of_sanitaries":
        row["type"] = work_item.selected_type or work_item.subtitle or ""
        row["count"] = parse_number(values.get(Field.COUNT))
        row["price_per_sanitary"] = parse_number(values.get(Field.PRICE))
    elif table_name == "installation_of_door_jambs":
        row["count"] = parse_number(values.get(Field.COUNT))
        row["price_per_door_jamb"] = parse_number(values.get(Field.PRICE))
    elif table_name == "window_installations":
        row["circumference"] = parse_number(values.get(Field.CIRCUMFERENCE))
        row["price_per_window"] = parse_number(values.get(Field.PRICE))
    elif table_name == "demolitions":
        row["duration"] = parse_number(values.get(Field.DURATION) or values.get(Field.DURATION_SK))
    elif table_name in _CUSTOM_TABLES and work_item.property_id == PropertyId.COMMUTE:
        row["title"] = work_item.name or EntryName.COMMUTE
        row["unit"] = Unit.KM
        row["number_of_units"] = parse_number(
            values.get(Field.DISTANCE) or values.get(Field.DISTANCE_SK)
        )
        row["number_of_days"] = parse_number(
            values.get(Field.DURATION) or values.get(Field.DURATION_SK)
        )
        row["price_per_unit"] = 0.0
    elif table_name in _CUSTOM_TABLES:
        row["title"] = values.get(Field.NAME) or work_item.name or ""
        row["unit"] = work_item.selected_unit or ""
        row["number_of_units"] = parse_number(values.get(Field.QUANTITY))
        row["number_of_days"] = 0.0
        row["price_per_unit"] = parse_number(values.get(Field.PRICE))
    elif table_name == "scaffoldings":
        row["length"] = parse_number(values.get(Field.LENGTH))
        row["height"] = parse_number(values.get(Field.HEIGHT))
        row["rental_duration"] = parse_number(values.get(Field.RENTAL_DURATION))
    elif table_name in _COUNT_RENTAL_TABLES:
        row["count"] = parse_number(values.get(Field.COUNT))
    else:
        logger.warning("Table %s has no column layout", table_name)
        return None
    return row


def database_to_work_item(row: Mapping[str, Any], table_name: str) -> Optional[WorkItem]:
    """Rebuild a work item from a row of ``table_name``.

    Every column written by :func:`work_item_to_database` is read back here.
    Returns ``None`` for unknown tables.
    """

    property_id = TABLE_TO_PROPERTY.get(table_name)
    if property_id is None:
        logger.warning("No property mapping for table %s", table_name)
        return None

    if table_name == "custom_works" and _is_commute_row(row):
        property_id = PropertyId.COMMUTE

    prop = get_property(property_id)
    client_id = row.get("c_id") or row.get("id")
    item = WorkItem(
        id=client_id,
        c_id=client_id,
        property_id=property_id,
        name=prop.name if prop else "",
        subtitle=default_subtitle(property_id),
        door_window_items=DoorWindowItems(),
    )

    if table_name in _BRICK_TABLES:
        item.fields = _size_fields(row, property_id)
        item.complementary_works = {
            work_name: 1 for column, work_name in BRICK_FLAG_COLUMNS if row.get(column) == 1
        }
    elif table_name in _PLASTERBOARD_TABLES:
        item.fields = _size_fields(row, property_id)
        code = row.get("type")
        item.selected_type = PLASTERBOARD_TYPE_NAMES.get(int(code)) if code is not None else None
    elif table_name in _AREA_TABLES:
        item.fields = _size_fields(row, property_id)
        for field_name, column in EXTRA_FIELD_COLUMNS:
            if column not in row:
                continue
            if field_name == Field.LARGE_FORMAT:
                item.fields[field_name] = row.get(column) == 1
            else:
                item.fields[field_name] = parse_number(row.get(column))
    elif table_name in _LENGTH_TABLES:
        item.fields = {Field.LENGTH: parse_number(row.get("length"))}
    elif table_name in _OUTLET_TABLES:
        item.fields = {Field.OUTLETS: parse_number(row.get("count"))}
    elif table_name == "installation_of_sanitaries":
        item.selected_type = row.get("type") or None
        item.subtitle = row.get("type") or None
        item.fields = {
            Field.COUNT: parse_number(row.get("count")),
            Field.PRICE: parse_number(row.get("price_per_sanitary")),
        }
    elif table_name == "installation_of_door_jambs":
        item.fields = {
            Field.COUNT: parse_number(row.get("count")),
            Field.PRICE: parse_number(row.get("price_per_door_jamb")),
        }
    elif table_name == "window_installations":
        item.fields = {
            Field.CIRCUMFERENCE: parse_number(row.get("circumference")),
            Field.PRICE: parse_number(row.get("price_per_window")),
        }
    elif table_name == "demolitions":
        item.fields = {Field.DURATION: parse_number(row.get("duration"))}
    elif property_id == PropertyId.COMMUTE:
        item.name = row.get("title") or EntryName.COMMUTE
        item.fields = {
            Field.DISTANCE: parse_number(row.get("number_of_units")),
            Field.DURATION: parse_number(row.get("number_of_days")),
        }
    elif table_name in _CUSTOM_TABLES:
        item.name = row.get("title") or ""
        item.selected_unit = row.get("unit") or None
        item.selected_type = (
            CUSTOM_TYPE_MATERIAL if table_name == "custom_materials" else CUSTOM_TYPE_WORK
        )
        item.fields = {
            Field.NAME: row.get("title") or "",
            Field.QUANTITY: parse_number(row.get("number_of_units")),
            Field.PRICE: parse_number(row.get("price_per_unit")),
        }
    elif table_name == "scaffoldings":
        item.name = EntryName.SCAFFOLDING
        item.subtitle = EntryName.SCAFFOLDING
        item.fields = {
            Field.LENGTH: parse_number(row.get("length")),
            Field.HEIGHT: parse_number(row.get("height")),
            Field.RENTAL_DURATION: parse_number(row.get("rental_duration")),
        }
    elif table_name in _COUNT_RENTAL_TABLES:
        item.name = EntryName.CORE_DRILL if table_name == "core_drills" else EntryName.TOOL_RENTAL
        item.fields = {Field.COUNT: parse_number(row.get("count"))}

    if table_name in _BRICK_TABLES or table_name in _PLASTERBOARD_TABLES or table_name in _AREA_TABLES:
        _read_legacy_openings(item, row)
    return item


def opening_to_database(
    opening: Opening, parent_table: str, parent_c_id: str
) -> Optional[Dict[str, Any]]:
    """Row for a door or window owned by the ``parent_table`` row ``parent_c_id``."""

    column = foreign_key_column(parent_table)
    if column is None:
        logger.warning("No foreign key column mapping for table %s", parent_table)
        return None
    return {
        "c_id": opening.c_id or opening.id or new_client_id(),
        "size1": parse_number(opening.width),
        "size2": parse_number(opening.height),
        column: parent_c_id,
    }


def discover_parent_column(row: Mapping[str, Any], parent_ids: Iterable[str]) -> Optional[str]:
    """Find the first ``*_id`` column of ``row`` that holds a known parent id.

    Only for rows whose parent table is unknown; prefer
    :func:`foreign_key_column`.
    """

    known = set(parent_ids)
    for column, value in row.items():
        if column.endswith("_id") and value in known:
            return column
    return None


def opening_from_database(
    row: Mapping[str, Any],
    parent_column: Optional[str] = None,
    parent_ids: Iterable[str] = (),
) -> Tuple[Optional[str], Opening]:
    """Return ``(parent_c_id, opening)`` for a door or window row."""

    column = parent_column or discover_parent_column(row, parent_ids)
    parent_c_id = row.get(column) if column else None
    client_id = row.get("c_id") or row.get("id")
    opening = Opening(
        id=client_id,
        c_id=client_id,
        width=parse_number(row.get("size1", row.get("width"))),
        height=parse_number(row.get("size2", row.get("height"))),
    )
    return parent_c_id, opening


__all__ = [
    "COMMUTE_TITLES",
    "FOREIGN_KEY_COLUMNS",
    "LEGACY_OPENING_COLUMNS",
    "PROPERTY_TO_TABLE",
    "RENTAL_TABLES",
    "TABLE_TO_PROPERTY",
    "database_to_work_item",
    "discover_parent_column",
    "foreign_key_column",
    "get_table_name",
    "opening_from_database",
    "opening_to_database",
    "work_item_to_database",
]
