"""Command line interface for pricing a room."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import numpy as np

from .config import AppConfig, load_config
from .delta import compute_work_items_delta
from .models import Room
from .persistence import load_room_work_items, save_room_work_items
from .pricelist import format_price, load_price_list
from .pricing import RoomPriceBreakdown, calculate_room_price_with_materials
from .reporting import export_breakdown
from .store import WorkItemStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Price a room's work items against a price list")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to YAML configuration")
    parser.add_argument("--room", type=Path, required=True, help="Room JSON file to price")
    parser.add_argument("--price-list", type=Path, help="Override path to the price list")
    parser.add_argument("--baseline", type=Path, help="Earlier version of the room to diff against")
    parser.add_argument("--output-dir", type=Path, help="Directory for generated reports")
    parser.add_argument("--save", action="store_true", help="Save the room's work items to the store")
    parser.add_argument("--contractor-id", help="Contractor recorded on saved rows")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument("--quiet", action="store_true", help="Suppress console summary output")
    return parser


def load_room(path: Path) -> Room:
    """Read a room from JSON, either bare or wrapped in a ``room`` key."""

    room_path = Path(path).expanduser()
    if not room_path.exists():
        raise FileNotFoundError(f"Room file '{room_path}' does not exist")
    with room_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict) and isinstance(payload.get("room"), dict):
        payload = payload["room"]
    if not isinstance(payload, dict):
        raise ValueError(f"Room file '{room_path}' must contain an object")
    return Room.from_dict(payload)


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = load_config(args.config)
        _apply_overrides(config, args)
    except Exception as exc:  # pragma: no cover - CLI validation
        logger.error("Failed to load configuration: %s", exc)
        return 1

    try:
        price_list = load_price_list(config.price_list)
        room = load_room(args.room)
        baseline = load_room(args.baseline) if args.baseline else None
    except Exception as exc:
        logger.exception("Failed to load inputs: %s", exc)
        return 1

    breakdown = calculate_room_price_with_materials(room, price_list, config.pricing)

    metadata: Dict[str, Any] = {
        "room_id": room.id,
        "room_name": room.name,
        "price_list": str(config.price_list),
        "currency": config.pricing.currency,
    }
    if baseline is not None:
        delta = compute_work_items_delta(baseline.work_items, room.work_items)
        metadata["delta"] = delta.summary()
        baseline_total = calculate_room_price_with_materials(
            baseline, price_list, config.pricing
        ).total
        metadata["baseline_total"] = baseline_total
        metadata["difference"] = breakdown.total - baseline_total

    if args.save:
        if not room.id:
            logger.error("Room file has no id; cannot save its work items")
            return 1
        try:
            store = WorkItemStore(config.store.path)
            stored = load_room_work_items(store, room.id)
            report = save_room_work_items(
                store,
                room.id,
                args.contractor_id,
                stored,
                room.work_items,
                max_workers=config.store.max_workers,
            )
        except Exception as exc:
            logger.exception("Failed to save work items: %s", exc)
            return 1
        metadata["save"] = report.summary()
        metadata["save_failures"] = [failure.as_dict() for failure in report.failures]

    try:
        export_breakdown(breakdown, config.output, price_list, metadata)
    except Exception as exc:
        logger.exception("Failed to export breakdown: %s", exc)
        return 1

    if not args.quiet:
        _print_summary(room, breakdown, config.pricing.currency, metadata)

    if metadata.get("save_failures"):
        return 1
    return 0


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> None:
    if args.price_list:
        config.price_list = _resolve_override_path(args.price_list)

    if args.output_dir:
        config.output.directory = _resolve_override_path(args.output_dir)


def _resolve_override_path(path: Path) -> Path:
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def _print_summary(
    room: Room,
    breakdown: RoomPriceBreakdown,
    currency: str,
    metadata: Dict[str, Any],
) -> None:
    print(f"Room: {room.name or room.id or '-'} ({len(room.work_items)} work items)")
    for label, value in (
        ("Work", breakdown.work_total),
        ("Material", breakdown.material_total),
        ("Others", breakdown.others_total),
        ("Total", breakdown.total),
    ):
        print(f"  {label:<9}{_format_float(value):>14} {currency}")
    print(f"  Quoted   {format_price(breakdown.total, currency):>14}")

    if "delta" in metadata:
        delta = metadata["delta"]
        print(
            "Changes against baseline: "
            f"{delta['insert']} new, {delta['update']} changed, {delta['delete']} removed "
            f"(difference {_format_float(metadata['difference'])} {currency})"
        )
    if "save" in metadata:
        print(f"Saved: {metadata['save']}")
    if breakdown.unmatched:
        print(f"Work items without a price entry: {len(breakdown.unmatched)}")
        for unmatched in breakdown.unmatched:
            hint = unmatched.suggestions[0].entry.label if unmatched.suggestions else "-"
            print(f"  {unmatched.work_item.name or unmatched.work_item.property_id}: did you mean {hint}?")


def _format_float(value: float) -> str:
    try:
        if value is None or (isinstance(value, float) and np.isnan(value)):
            return "-"
        return f"{float(value):,.2f}"
    except Exception:  # pragma: no cover - formatting fallback
        return str(value)


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
