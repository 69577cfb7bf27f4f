import json
from pathlib import Path

import pandas as pd
import pytest

from roomquote.catalog import new_work_item
from roomquote.config import OutputConfig
from roomquote.models import Room
from roomquote.pricing import calculate_room_price_with_materials
from roomquote.reporting import LINE_COLUMNS, breakdown_to_frames, export_breakdown


def _breakdown(price_list):
    room = Room(
        id="room-1",
        name="Bathroom",
        work_items=[
            new_work_item("plasterboarding_partition", selected_type="Simple", fields={"Width": 3, "Length": 2.5}),
            new_work_item("levelling", fields={"Width": 2, "Length": 2}),
            new_work_item("commute", fields={"Distance": 10}),
        ],
    )
    return calculate_room_price_with_materials(room, price_list)


def test_breakdown_frames(small_price_list):
    frames = breakdown_to_frames(_breakdown(small_price_list), small_price_list)

    assert list(frames["work"].columns) == LINE_COLUMNS
    assert frames["work"].loc[0, "work_cost"] == pytest.approx(90)
    assert frames["material"].loc[0, "name"] == "Plasterboard"
    assert frames["others"].loc[0, "total"] == pytest.approx(10)

    summary = dict(zip(frames["summary"]["metric"], frames["summary"]["value"]))
    assert summary["total"] == pytest.approx(99 + 22 + 10)

    unmatched = frames["unmatched"]
    assert list(unmatched["property_id"]) == ["levelling"]
    assert unmatched.loc[0, "suggestion"]


def test_export_breakdown_writes_reports(tmp_path: Path, small_price_list):
    output = OutputConfig(directory=tmp_path / "reports")
    paths = export_breakdown(
        _breakdown(small_price_list), output, small_price_list, {"room_id": "room-1"}
    )

    assert set(paths) == {"work", "material", "others", "summary", "audit"}
    for path in paths.values():
        assert path.exists()

    work = pd.read_csv(paths["work"])
    assert list(work.columns) == LINE_COLUMNS

    with paths["audit"].open("r", encoding="utf-8") as handle:
        audit = json.load(handle)
    assert audit["room_id"] == "room-1"
    assert audit["summary"]["others_total"] == pytest.approx(10)
    assert audit["areas"]["tiling_paving_area"] == 0
    assert audit["unmatched"][0]["property_id"] == "levelling"


def test_empty_breakdown_exports_headers_only(tmp_path: Path, small_price_list):
    output = OutputConfig(directory=tmp_path)
    paths = export_breakdown(calculate_room_price_with_materials(None, small_price_list), output)
    work = pd.read_csv(paths["work"])
    assert work.empty
    assert list(work.columns) == LINE_COLUMNS
