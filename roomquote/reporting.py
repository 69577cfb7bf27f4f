"""Utilities for exporting room price breakdowns to disk."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .config import OutputConfig
from .pricelist import PriceList
from .pricing import LineItem, RoomPriceBreakdown
from .sorting import sort_items_by_master_list

logger = logging.getLogger(__name__)

LINE_COLUMNS = [
    "id",
    "property_id",
    "name",
    "subtitle",
    "quantity",
    "unit",
    "price_per_unit",
    "work_cost",
    "material_cost",
    "total",
]
_NUMERIC_COLUMNS = ["quantity", "price_per_unit", "work_cost", "material_cost", "total"]


def lines_to_frame(lines: Sequence[LineItem]) -> pd.DataFrame:
    frame = pd.DataFrame([line.as_dict() for line in lines], columns=LINE_COLUMNS)
    if not frame.empty:
        frame[_NUMERIC_COLUMNS] = frame[_NUMERIC_COLUMNS].astype(float).round(2)
    return frame


def _unmatched_frame(breakdown: RoomPriceBreakdown) -> pd.DataFrame:
    records: List[Dict[str, Any]] = []
    for unmatched in breakdown.unmatched:
        item = unmatched.work_item
        best = unmatched.suggestions[0] if unmatched.suggestions else None
        records.append(
            {
                "id": item.id,
                "property_id": item.property_id,
                "name": item.name,
                "subtitle": item.subtitle or "",
                "suggestion": best.entry.label if best else "",
                "suggestion_category": best.category if best else "",
                "suggestion_score": best.score if best else None,
            }
        )
    return pd.DataFrame(
        records,
        columns=[
            "id",
            "property_id",
            "name",
            "subtitle",
            "suggestion",
            "suggestion_category",
            "suggestion_score",
        ],
    )


def breakdown_to_frames(
    breakdown: RoomPriceBreakdown, price_list: Optional[PriceList] = None
) -> Dict[str, pd.DataFrame]:
    """Return work, material, other, summary and unmatched tables.

    Lines are ordered as in ``price_list`` when one is given.
    """

    summary = breakdown.summary()
    return {
        "work": lines_to_frame(sort_items_by_master_list(breakdown.items, price_list, "work")),
        "material": lines_to_frame(
            sort_items_by_master_list(breakdown.material_items, price_list, "material")
        ),
        "others": lines_to_frame(
            sort_items_by_master_list(breakdown.others_items, price_list, "others")
        ),
        "summary": pd.DataFrame(
            {"metric": list(summary.keys()), "value": [round(value, 2) for value in summary.values()]}
        ),
        "unmatched": _unmatched_frame(breakdown),
    }


def export_breakdown(
    breakdown: RoomPriceBreakdown,
    output: OutputConfig,
    price_list: Optional[PriceList] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Path]:
    """Persist breakdown artefacts to the configured output directory."""

    output_dir = output.directory
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Writing reports to %s", output_dir)

    frames = breakdown_to_frames(breakdown, price_list)
    paths: Dict[str, Path] = {}

    for key, filename in (
        ("work", output.work_report),
        ("material", output.material_report),
        ("others", output.others_report),
        ("summary", output.summary_report),
    ):
        path = output_dir / filename
        frames[key].to_csv(path, index=False)
        paths[key] = path

    audit_payload: Dict[str, Any] = dict(metadata or {})
    audit_payload["summary"] = breakdown.summary()
    audit_payload["areas"] = asdict(breakdown.areas)
    audit_payload["unmatched"] = [unmatched.as_dict() for unmatched in breakdown.unmatched]
    audit_path = output_dir / output.audit_log
    with audit_path.open("w", encoding="utf-8") as handle:
        json.dump(audit_payload, handle, ensure_ascii=False, indent=2)
    paths["audit"] = audit_path

    return paths


__all__ = ["LINE_COLUMNS", "breakdown_to_frames", "export_breakdown", "lines_to_frame"]
