"""Load a room's work items from the store and save edits back as a delta."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .delta import compute_door_window_delta, compute_work_items_delta
from .mapping import (
    database_to_work_item,
    foreign_key_column,
    get_table_name,
    opening_from_database,
    opening_to_database,
    work_item_to_database,
)
from .models import DoorWindowItems, Opening, WorkItem, new_client_id
from .store import OPENING_KINDS, WorkItemStore

logger = logging.getLogger(__name__)


@dataclass
class SaveFailure:
    operation: str
    c_id: Optional[str]
    table_name: Optional[str]
    error: str

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "operation": self.operation,
            "c_id": self.c_id,
            "table_name": self.table_name,
            "error": self.error,
        }


@dataclass
class SaveReport:
    """Outcome of a best-effort room save.

    Successful writes are never rolled back when a sibling write fails; the
    failed ones are listed in ``failures``. ``skipped`` holds the keys of
    items whose property has no table.
    """

    inserted: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: List[SaveFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.skipped

    def summary(self) -> Dict[str, int]:
        return {
            "inserted": len(self.inserted),
            "updated": len(self.updated),
            "deleted": len(self.deleted),
            "unchanged": len(self.unchanged),
            "skipped": len(self.skipped),
            "failed": len(self.failures),
        }


def load_room_work_items(store: WorkItemStore, room_id: str) -> List[WorkItem]:
    """Rebuild the work items of ``room_id`` with their doors and windows."""

    items: List[WorkItem] = []
    parents: Dict[str, Dict[str, WorkItem]] = {}
    for table_name, row in store.fetch_room_rows(room_id):
        item = database_to_work_item(row, table_name)
        if item is None:
            continue
        items.append(item)
        if foreign_key_column(table_name) and item.c_id:
            parents.setdefault(table_name, {})[item.c_id] = item

    for table_name, owners in parents.items():
        column = foreign_key_column(table_name)
        for kind in OPENING_KINDS:
            for row in store.fetch_openings(kind, table_name, owners):
                parent_c_id, opening = opening_from_database(row, parent_column=column)
                owner = owners.get(parent_c_id) if parent_c_id else None
                if owner is None:
                    logger.warning("Dropping %s row %s without a parent", kind, opening.c_id)
                    continue
                if owner.door_window_items is None:
                    owner.door_window_items = DoorWindowItems()
                getattr(owner.door_window_items, kind).append(opening)

    logger.debug("Loaded %s work item(s) for room %s", len(items), room_id)
    return items


def _write_openings(
    store: WorkItemStore,
    table_name: str,
    parent_c_id: str,
    original: Optional[DoorWindowItems],
    current: Optional[DoorWindowItems],
) -> None:
    delta = compute_door_window_delta(original, current)
    if delta.is_empty:
        return
    column = foreign_key_column(table_name)
    if column is None:
        logger.warning("Openings of %s %s are not stored: no parent column", table_name, parent_c_id)
        return

    groups: Tuple[Tuple[str, List[Opening], List[Opening]], ...] = (
        ("doors", delta.doors_to_insert + delta.doors_to_update, delta.doors_to_delete),
        ("windows", delta.windows_to_insert + delta.windows_to_update, delta.windows_to_delete),
    )
    for kind, upserts, deletes in groups:
        for opening in upserts:
            row = opening_to_database(opening, table_name, parent_c_id)
            if row is None:
                continue
            opening.c_id = row["c_id"]
            store.upsert_opening(kind, table_name, column, row)
        for opening in deletes:
            if opening.c_id or opening.id:
                store.delete_opening(kind, opening.c_id or opening.id)


def save_room_work_items(
    store: WorkItemStore,
    room_id: str,
    contractor_id: Optional[str],
    original: Optional[Sequence[WorkItem]],
    current: Optional[Sequence[WorkItem]],
    max_workers: int = 4,
) -> SaveReport:
    """Write only what changed between ``original`` and ``current``.

    Writes run concurrently and are joined before returning. Each failure is
    logged and reported on its own; nothing is rolled back.
    """

    delta = compute_work_items_delta(original, current)
    report = SaveReport(unchanged=[item.key for item in delta.unchanged if item.key])
    original_by_key = {item.key: item for item in original or [] if item.key}
    tasks: List[Tuple[str, Optional[str], Optional[str], Callable[[], None]]] = []

    def _upsert_task(item: WorkItem, previous: Optional[WorkItem]) -> Callable[[], None]:
        table_name = get_table_name(item.property_id, item)
        row = work_item_to_database(item, room_id, contractor_id)

        def run() -> None:
            store.upsert_row(table_name, row)
            _write_openings(
                store,
                table_name,
                row["c_id"],
                previous.door_window_items if previous is not None else None,
                item.door_window_items,
            )

        return run

    def _delete_task(table_name: str, c_id: str) -> Callable[[], None]:
        def run() -> None:
            store.delete_row(table_name, c_id)
            store.delete_openings_of(table_name, c_id)

        return run

    for operation, items in (("insert", delta.to_insert), ("update", delta.to_update)):
        for item in items:
            table_name = get_table_name(item.property_id, item)
            if table_name is None:
                logger.warning(
                    "Skipping work item %s: property %s has no table", item.key, item.property_id
                )
                report.skipped.append(item.key or "")
                continue
            if not item.c_id:
                # The id assigned here is kept for every later save.
                item.c_id = item.id or new_client_id()
                item.id = item.id or item.c_id
            previous = original_by_key.get(item.key) if operation == "update" else None
            tasks.append((operation, item.key, table_name, _upsert_task(item, previous)))

    for item in delta.to_delete:
        key = item.key
        table_name = delta.delete_tables.get(key or "") or get_table_name(item.property_id, item)
        if table_name is None or not key:
            logger.warning("Cannot delete work item %s: no table", key)
            report.skipped.append(key or "")
            continue
        tasks.append(("delete", key, table_name, _delete_task(table_name, key)))

    if not tasks:
        logger.info("Room %s: nothing to save", room_id)
        return report

    buckets = {"insert": report.inserted, "update": report.updated, "delete": report.deleted}
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {
            executor.submit(task): (operation, key, table_name)
            for operation, key, table_name, task in tasks
        }
        for future in as_completed(futures):
            operation, key, table_name = futures[future]
            try:
                future.result()
            except Exception as exc:  # each write fails on its own
                logger.error("Failed to %s %s in %s: %s", operation, key, table_name, exc)
                report.failures.append(
                    SaveFailure(operation=operation, c_id=key, table_name=table_name, error=str(exc))
                )
                continue
            buckets[operation].append(key or "")

    logger.info("Room %s saved: %s", room_id, report.summary())
    return report


__all__ = ["SaveFailure", "SaveReport", "load_room_work_items", "save_room_work_items"]
