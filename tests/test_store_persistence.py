from pathlib import Path

import pytest

from roomquote.catalog import new_work_item
from roomquote.models import Opening, WorkItem
from roomquote.persistence import load_room_work_items, save_room_work_items
from roomquote.store import WorkItemStore


def _room_items():
    netting = new_work_item("netting_wall", fields={"Width": 4, "Height": 2.6})
    netting.door_window_items.doors.append(Opening(id="door-1", c_id="door-1", width=0.8, height=2))
    return [
        netting,
        new_work_item("wiring", fields={"Number of outlets": 8}),
        new_work_item("commute", fields={"Distance": 25, "Duration": 3}),
        new_work_item("rentals", name="Scaffolding", fields={"Length": 4, "Height": 3, "Rental duration": 5}),
    ]


def test_store_upserts_rows_by_client_id(tmp_path: Path):
    store = WorkItemStore(tmp_path / "rows.sqlite")
    store.upsert_row("wirings", {"c_id": "a", "room_id": "r1", "count": 4})
    store.upsert_row("wirings", {"c_id": "a", "room_id": "r1", "count": 6})

    assert store.fetch_row("wirings", "a")["count"] == 6
    assert store.fetch_room_rows("r1") == [("wirings", {"c_id": "a", "room_id": "r1", "count": 6})]
    assert store.stats() == {"work_items": 1, "openings": 0}

    assert store.delete_row("wirings", "a") is True
    assert store.delete_row("wirings", "a") is False
    assert store.fetch_row("wirings", "a") is None


def test_store_rejects_rows_without_identity(tmp_path: Path):
    store = WorkItemStore(tmp_path / "rows.sqlite")
    with pytest.raises(ValueError):
        store.upsert_row("wirings", {"room_id": "r1"})
    with pytest.raises(ValueError):
        store.upsert_opening("gates", "netting_walls", "netting_wall_id", {"c_id": "d", "netting_wall_id": "p"})
    with pytest.raises(ValueError):
        store.upsert_opening("doors", "netting_walls", "netting_wall_id", {"c_id": "d"})


def test_save_then_load_restores_items_and_openings(tmp_path: Path):
    store = WorkItemStore(tmp_path / "rows.sqlite")
    items = _room_items()

    report = save_room_work_items(store, "room-1", "contractor-9", [], items)
    assert report.ok
    assert sorted(report.inserted) == sorted(item.key for item in items)

    loaded = load_room_work_items(store, "room-1")
    assert sorted(item.property_id for item in loaded) == sorted(item.property_id for item in items)
    netting = next(item for item in loaded if item.property_id == "netting_wall")
    assert [door.c_id for door in netting.door_window_items.doors] == ["door-1"]
    assert netting.door_window_items.doors[0].width == pytest.approx(0.8)
    assert store.fetch_row("netting_walls", netting.c_id)["contractor_id"] == "contractor-9"

    again = save_room_work_items(store, "room-1", "contractor-9", loaded, items)
    assert again.summary()["unchanged"] == len(items)
    assert not again.inserted and not again.updated and not again.deleted


def test_save_applies_updates_deletes_and_opening_changes(tmp_path: Path):
    store = WorkItemStore(tmp_path / "rows.sqlite")
    save_room_work_items(store, "room-1", None, [], _room_items())
    loaded = load_room_work_items(store, "room-1")

    edited = [item.copy() for item in loaded if item.property_id != "wiring"]
    netting = next(item for item in edited if item.property_id == "netting_wall")
    netting.door_window_items.doors = []
    netting.door_window_items.windows.append(Opening(id="win-1", c_id="win-1", width=1.2, height=1))

    report = save_room_work_items(store, "room-1", None, loaded, edited)
    assert report.updated == [netting.key]
    assert len(report.deleted) == 1

    reloaded = load_room_work_items(store, "room-1")
    assert "wiring" not in {item.property_id for item in reloaded}
    netting = next(item for item in reloaded if item.property_id == "netting_wall")
    assert netting.door_window_items.doors == []
    assert [window.c_id for window in netting.door_window_items.windows] == ["win-1"]


def test_table_migration_removes_old_row(tmp_path: Path):
    store = WorkItemStore(tmp_path / "rows.sqlite")
    custom = new_work_item(
        "custom_work", selected_type="Work", fields={"Name": "Tiles", "Quantity": 2, "Price": 30}
    )
    save_room_work_items(store, "room-1", None, [], [custom])
    moved = custom.copy(selected_type="Material")

    report = save_room_work_items(store, "room-1", None, [custom], [moved])
    assert report.ok
    assert store.fetch_row("custom_works", custom.key) is None
    assert store.fetch_row("custom_materials", custom.key) is not None


def test_unmapped_items_are_skipped_not_failed(tmp_path: Path):
    store = WorkItemStore(tmp_path / "rows.sqlite")
    stray = WorkItem(id="stray", property_id="skirting_of_floating_floors")
    wiring = new_work_item("wiring", fields={"Number of outlets": 2})

    report = save_room_work_items(store, "room-1", None, [], [stray, wiring])
    assert report.skipped == ["stray"]
    assert report.inserted == [wiring.key]
    assert not report.failures
    assert not report.ok


class _FlakyStore(WorkItemStore):
    def upsert_row(self, table_name, row):
        if table_name == "wirings":
            raise RuntimeError("disk full")
        super().upsert_row(table_name, row)


def test_one_failed_write_does_not_stop_the_others(tmp_path: Path):
    store = _FlakyStore(tmp_path / "rows.sqlite")
    items = _room_items()

    report = save_room_work_items(store, "room-1", None, [], items, max_workers=2)
    assert len(report.failures) == 1
    failure = report.failures[0]
    assert failure.table_name == "wirings"
    assert failure.operation == "insert"
    assert "disk full" in failure.error
    assert len(report.inserted) == len(items) - 1
    assert len(load_room_work_items(store, "room-1")) == len(items) - 1
