"""Room quote core package.

This package turns the work items entered for a room into an itemised price
by matching them against a price list, deriving the materials they consume
and folding everything into work, material and other totals. It also maps
work items to their database rows and computes the minimal set of writes
needed to save an edited room.
"""

from .catalog import CATALOG, WorkProperty, get_property, new_work_item
from .config import AppConfig, OutputConfig, PricingConfig, StoreConfig, load_config
from .delta import (
    DoorWindowDelta,
    WorkItemsDelta,
    compute_door_window_delta,
    compute_work_items_delta,
    has_door_window_changed,
    has_item_changed,
)
from .mapping import (
    database_to_work_item,
    foreign_key_column,
    get_table_name,
    opening_from_database,
    opening_to_database,
    work_item_to_database,
)
from .matching import find_price_list_item, suggest_price_entries
from .materials import (
    ItemCalculation,
    calculate_work_item_price,
    calculate_work_item_with_materials,
    find_matching_material,
)
from .models import DoorWindowItems, Opening, Room, WorkItem
from .persistence import SaveReport, load_room_work_items, save_room_work_items
from .pricelist import PriceList, PriceListEntry, load_price_list
from .pricing import RoomPriceBreakdown, calculate_room_price, calculate_room_price_with_materials
from .quantities import QuantityResult, derive_quantity_and_unit
from .reporting import breakdown_to_frames, export_breakdown
from .sorting import sort_items_by_master_list
from .store import WorkItemStore

__all__ = [
    "AppConfig",
    "CATALOG",
    "DoorWindowDelta",
    "DoorWindowItems",
    "ItemCalculation",
    "Opening",
    "OutputConfig",
    "PriceList",
    "PriceListEntry",
    "PricingConfig",
    "QuantityResult",
    "Room",
    "RoomPriceBreakdown",
    "SaveReport",
    "StoreConfig",
    "WorkItem",
    "WorkItemStore",
    "WorkItemsDelta",
    "WorkProperty",
    "breakdown_to_frames",
    "calculate_room_price",
    "calculate_room_price_with_materials",
    "calculate_work_item_price",
    "calculate_work_item_with_materials",
    "compute_door_window_delta",
    "compute_work_items_delta",
    "database_to_work_item",
    "derive_quantity_and_unit",
    "export_breakdown",
    "find_matching_material",
    "find_price_list_item",
    "foreign_key_column",
    "get_property",
    "get_table_name",
    "has_door_window_changed",
    "has_item_changed",
    "load_config",
    "load_price_list",
    "load_room_work_items",
    "new_work_item",
    "opening_from_database",
    "opening_to_database",
    "save_room_work_items",
    "sort_items_by_master_list",
    "suggest_price_entries",
    "work_item_to_database",
]
