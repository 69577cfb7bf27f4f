"""Diff two snapshots of a room's work items into store operations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .mapping import get_table_name, work_item_to_database
from .models import DoorWindowItems, Opening, WorkItem
from .utils import parse_number

IGNORED_COLUMNS = ("room_id", "c_id", "user_id", "updated_at", "date_created", "created_at")

_PLACEHOLDER = "temp"


@dataclass
class WorkItemsDelta:
    """Work items grouped by the store operation they need.

    ``delete_tables`` maps the key of a deleted item to the table it must be
    removed from when the item moved to another table.
    """

    to_insert: List[WorkItem] = field(default_factory=list)
    to_update: List[WorkItem] = field(default_factory=list)
    to_delete: List[WorkItem] = field(default_factory=list)
    unchanged: List[WorkItem] = field(default_factory=list)
    delete_tables: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.to_insert or self.to_update or self.to_delete)

    def summary(self) -> Dict[str, int]:
        return {
            "insert": len(self.to_insert),
            "update": len(self.to_update),
            "delete": len(self.to_delete),
            "unchanged": len(self.unchanged),
        }


@dataclass
class DoorWindowDelta:
    doors_to_insert: List[Opening] = field(default_factory=list)
    doors_to_update: List[Opening] = field(default_factory=list)
    doors_to_delete: List[Opening] = field(default_factory=list)
    windows_to_insert: List[Opening] = field(default_factory=list)
    windows_to_update: List[Opening] = field(default_factory=list)
    windows_to_delete: List[Opening] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.doors_to_insert,
                self.doors_to_update,
                self.doors_to_delete,
                self.windows_to_insert,
                self.windows_to_update,
                self.windows_to_delete,
            )
        )


def _comparable(row: Mapping[str, Any]) -> str:
    cleaned = {key: value for key, value in row.items() if key not in IGNORED_COLUMNS}
    return json.dumps(cleaned, sort_keys=True, ensure_ascii=False, default=str)


def rows_equal(left: Optional[Mapping[str, Any]], right: Optional[Mapping[str, Any]]) -> bool:
    if left is None or right is None:
        return False
    return _comparable(left) == _comparable(right)


def has_item_changed(original: WorkItem, current: WorkItem) -> bool:
    """Compare two versions of an item through their database rows.

    Items that cannot be mapped to a row count as changed, as does a move to
    another table.
    """

    original_row = work_item_to_database(original, _PLACEHOLDER, _PLACEHOLDER)
    current_row = work_item_to_database(current, _PLACEHOLDER, _PLACEHOLDER)
    if original_row is None or current_row is None:
        return True
    if get_table_name(original.property_id, original) != get_table_name(current.property_id, current):
        return True
    return not rows_equal(original_row, current_row)


def _same_size(left: Opening, right: Opening) -> bool:
    return parse_number(left.width) == parse_number(right.width) and parse_number(
        left.height
    ) == parse_number(right.height)


def _opening_key(opening: Opening) -> Optional[str]:
    return opening.c_id or opening.id


def _index_openings(openings: Sequence[Opening]) -> Dict[str, Opening]:
    indexed: Dict[str, Opening] = {}
    for opening in openings:
        key = _opening_key(opening)
        if key:
            indexed[key] = opening
    return indexed


def _openings_changed(original: Sequence[Opening], current: Sequence[Opening]) -> bool:
    if len(original) != len(current):
        return True
    by_key = _index_openings(original)
    for opening in current:
        key = _opening_key(opening)
        if not key:
            return True
        previous = by_key.get(key)
        if previous is None or not _same_size(previous, opening):
            return True
    return False


def has_door_window_changed(
    original: Optional[DoorWindowItems], current: Optional[DoorWindowItems]
) -> bool:
    original = original or DoorWindowItems()
    current = current or DoorWindowItems()
    return _openings_changed(original.doors, current.doors) or _openings_changed(
        original.windows, current.windows
    )


def compute_work_items_delta(
    original_items: Optional[Sequence[WorkItem]], current_items: Optional[Sequence[WorkItem]]
) -> WorkItemsDelta:
    """Classify ``current_items`` against what was loaded from the store.

    Items are keyed by ``c_id`` (falling back to ``id``); an item without a
    key is always inserted. A changed item whose table changed is deleted
    from its old table and inserted into the new one instead of updated.
    """

    delta = WorkItemsDelta()
    original_by_key: Dict[str, WorkItem] = {}
    for item in original_items or []:
        if item.key:
            original_by_key[item.key] = item

    seen = set()
    for current in current_items or []:
        key = current.key
        if not key:
            delta.to_insert.append(current)
            continue
        seen.add(key)
        original = original_by_key.get(key)
        if original is None:
            delta.to_insert.append(current)
        elif has_item_changed(original, current):
            original_table = get_table_name(original.property_id, original)
            current_table = get_table_name(current.property_id, current)
            if original_table != current_table:
                delta.to_delete.append(original)
                if original_table:
                    delta.delete_tables[key] = original_table
                delta.to_insert.append(current)
            else:
                delta.to_update.append(current)
        elif has_door_window_changed(original.door_window_items, current.door_window_items):
            delta.to_update.append(current)
        else:
            delta.unchanged.append(current)

    for key, original in original_by_key.items():
        if key not in seen:
            delta.to_delete.append(original)
    return delta


def _diff_openings(original: Sequence[Opening], current: Sequence[Opening]):
    # Openings without a key were never stored, so they are always inserted.
    by_key = _index_openings(original)
    current_keys = {_opening_key(opening) for opening in current if _opening_key(opening)}
    inserted: List[Opening] = []
    updated: List[Opening] = []
    for opening in current:
        key = _opening_key(opening)
        previous = by_key.get(key) if key else None
        if previous is None:
            inserted.append(opening)
        elif not _same_size(previous, opening):
            updated.append(opening)
    deleted = [opening for key, opening in by_key.items() if key not in current_keys]
    return inserted, updated, deleted


def compute_door_window_delta(
    original: Optional[DoorWindowItems], current: Optional[DoorWindowItems]
) -> DoorWindowDelta:
    original = original or DoorWindowItems()
    current = current or DoorWindowItems()
    doors = _diff_openings(original.doors, current.doors)
    windows = _diff_openings(original.windows, current.windows)
    return DoorWindowDelta(
        doors_to_insert=doors[0],
        doors_to_update=doors[1],
        doors_to_delete=doors[2],
        windows_to_insert=windows[0],
        windows_to_update=windows[1],
        windows_to_delete=windows[2],
    )


__all__ = [
    "DoorWindowDelta",
    "IGNORED_COLUMNS",
    "WorkItemsDelta",
    "compute_door_window_delta",
    "compute_work_items_delta",
    "has_door_window_changed",
    "has_item_changed",
    "rows_equal",
]
