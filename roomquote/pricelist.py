"""Price-list structures, loading and column mapping."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import yaml

from .utils import clean_text, parse_number

logger = logging.getLogger(__name__)

CATEGORIES: Tuple[str, ...] = ("work", "material", "installations", "others")


@dataclass
class Capacity:
    """Amount of work a single package of material covers."""

    value: float
    unit: str = "m2"

    def as_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit}


@dataclass
class PriceListEntry:
    name: str
    price: float = 0.0
    unit: str = ""
    subtitle: Optional[str] = None
    capacity: Optional[Capacity] = None
    material_key: Optional[str] = None

    @property
    def label(self) -> str:
        if self.subtitle:
            return f"{self.name} - {self.subtitle}"
        return self.name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PriceListEntry":
        name = clean_text(data.get("name"))
        if not name:
            raise ValueError(f"Price-list entry without a name: {dict(data)!r}")
        capacity = None
        raw_capacity = data.get("capacity")
        if isinstance(raw_capacity, Mapping) and raw_capacity.get("value") is not None:
            capacity = Capacity(
                value=parse_number(raw_capacity.get("value")),
                unit=str(raw_capacity.get("unit") or "m2"),
            )
        elif isinstance(raw_capacity, (int, float)) and not isinstance(raw_capacity, bool):
            capacity = Capacity(value=float(raw_capacity))
        subtitle = data.get("subtitle")
        return cls(
            name=name,
            price=parse_number(data.get("price")),
            unit=str(data.get("unit") or ""),
            subtitle=str(subtitle) if subtitle not in (None, "") else None,
            capacity=capacity,
            material_key=data.get("materialKey") or data.get("material_key"),
        )

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "price": self.price, "unit": self.unit}
        if self.subtitle is not None:
            payload["subtitle"] = self.subtitle
        if self.capacity is not None:
            payload["capacity"] = self.capacity.as_dict()
        if self.material_key is not None:
            payload["materialKey"] = self.material_key
        return payload


@dataclass
class PriceList:
    """A contractor's price list split into its four categories.

    Positions inside each category matter for the column mapping used by
    :func:`price_list_to_db_columns`; pricing itself matches by name and
    subtitle.
    """

    work: List[PriceListEntry] = field(default_factory=list)
    material: List[PriceListEntry] = field(default_factory=list)
    installations: List[PriceListEntry] = field(default_factory=list)
    others: List[PriceListEntry] = field(default_factory=list)

    def category(self, name: str) -> List[PriceListEntry]:
        if name not in CATEGORIES:
            raise KeyError(f"Unknown price-list category '{name}'")
        return getattr(self, name)

    def iter_entries(self) -> Iterator[Tuple[str, PriceListEntry]]:
        for name in CATEGORIES:
            for entry in self.category(name):
                yield name, entry

    def find(
        self, category: str, name: str, subtitle: Optional[str] = None
    ) -> Optional[PriceListEntry]:
        """Return the first entry with exactly ``name`` (and ``subtitle`` when given)."""

        for entry in self.category(category):
            if entry.name != name:
                continue
            if subtitle is not None and entry.subtitle != subtitle:
                continue
            return entry
        return None

    def snapshot(self) -> "PriceList":
        """Deep copy frozen onto a project so later edits never leak into it."""

        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PriceList":
        if not isinstance(data, Mapping):
            raise ValueError("Price list must be a mapping of categories")
        parsed: Dict[str, List[PriceListEntry]] = {}
        for name in CATEGORIES:
            entries = data.get(name) or []
            if not isinstance(entries, list):
                raise ValueError(f"Price-list category '{name}' must be a list")
            parsed[name] = [PriceListEntry.from_dict(entry) for entry in entries]
        return cls(**parsed)

    def as_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {name: [entry.as_dict() for entry in self.category(name)] for name in CATEGORIES}


def load_price_list(path: Path) -> PriceList:
    """Load a :class:`PriceList` from a YAML or JSON file."""

    list_path = Path(path).expanduser()
    if not list_path.exists():
        raise FileNotFoundError(f"Price list '{list_path}' does not exist")

    with list_path.open("r", encoding="utf-8") as stream:
        if list_path.suffix.lower() == ".json":
            try:
                raw = json.load(stream)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Price list '{list_path}' is not valid JSON: {exc}") from exc
        else:
            raw = yaml.safe_load(stream) or {}

    if isinstance(raw, Mapping) and "price_list" in raw:
        raw = raw["price_list"]
    price_list = PriceList.from_dict(raw)
    logger.debug(
        "Loaded price list %s with %s entries",
        list_path,
        sum(1 for _ in price_list.iter_entries()),
    )
    return price_list


def format_price(value: float, currency: str = "€") -> str:
    """Render ``value`` the way quotes show it, e.g. ``€12,50``."""

    return f"{currency}{float(value):.2f}".replace(".", ",")


# Columns of the flat price table shared with the mobile client. The position
# inside each tuple is the position of the entry inside its category.
WORK_COLUMNS: Tuple[str, ...] = (
    "work_demolition_price",
    "work_wiring_price",
    "work_plumbing_price",
    "work_brick_partitions_price",
    "work_brick_load_bearing_wall_price",
    "work_simple_plasterboarding_partition_price",
    "work_double_plasterboarding_partition_price",
    "work_triple_plasterboarding_partition_price",
    "work_simple_plasterboarding_offset_wall_price",
    "work_double_plasterboarding_offset_wall_price",
    "work_plasterboarding_ceiling_price",
    "work_netting_wall_price",
    "work_netting_ceiling_price",
    "work_plastering_wall_price",
    "work_plastering_ceiling_price",
    "work_facade_plastering",
    "work_installation_of_corner_bead_price",
    "work_plastering_of_window_sash_price",
    "work_penetration_coating_price",
    "work_painting_wall_price",
    "work_painting_ceiling_price",
    "work_levelling_price",
    "work_laying_floating_floors_price",
    "work_skirting_of_floating_floor_price",
    "work_tiling_ceramic_price",
    "work_jolly_edging_price",
    "work_paving_ceramic_price",
    "work_plinth_cutting",
    "work_plinth_bonding",
    "work_large_format_paving_and_tiling_price",
    "work_grouting_price",
    "work_siliconing_price",
    "work_window_installation_price",
    "work_door_jamb_installation_price",
    "work_auxiliary_and_finishing_price",
)

MATERIAL_COLUMNS: Tuple[str, ...] = (
    "material_partition_masonry_price",
    "material_load_bearing_masonry_price",
    "material_simple_plasterboarding_partition_price",
    "material_double_plasterboarding_partition_price",
    "material_triple_plasterboarding_partition_price",
    "material_simple_plasterboarding_offset_wall_price",
    "material_double_plasterboarding_offset_wall_price",
    "material_plasterboarding_ceiling_price",
    "material_mesh_price",
    "material_adhesive_netting_price",
    "material_adhesive_tiling_and_paving_price",
    "material_plaster_price",
    "material_facade_plaster_price",
    "material_corner_bead_price",
    "material_primer_price",
    "material_paint_wall_price",
    "material_paint_ceiling_price",
    "material_self_levelling_compound_price",
    "material_floating_floor_price",
    "material_skirting_board_price",
    "material_silicone_price",
    "material_tiles_price",
    "material_pavings_price",
    "material_auxiliary_and_fastening_price",
)

MATERIAL_CAPACITY_COLUMNS: Dict[int, str] = {
    2: "material_simple_plasterboarding_partition_capacity",
    3: "material_double_plasterboarding_partition_capacity",
    4: "material_triple_plasterboarding_partition_capacity",
    5: "material_simple_plasterboarding_offset_wall_capacity",
    6: "material_double_plasterboarding_offset_wall_capacity",
    7: "material_plasterboarding_ceiling_capacity",
    9: "material_adhesive_netting_capacity",
    10: "material_adhesive_tiling_and_paving_capacity",
    11: "material_plaster_capacity",
    12: "material_facade_plaster_capacity",
    13: "material_corner_bead_capacity",
    17: "material_self_levelling_compound_capacity",
    20: "material_silicone_capacity",
}

INSTALLATIONS_COLUMNS: Tuple[str, ...] = (
    "work_sanitary_corner_valve_price",
    "work_sanitary_standing_mixer_tap_price",
    "work_sanitary_wall_mounted_tap_price",
    "work_sanitary_flush_mounted_tap_price",
    "work_sanitary_toilet_combi_price",
    "work_sanitary_toilet_with_concealed_cistern_price",
    "work_sanitary_sink_price",
    "work_sanitary_sink_with_cabinet_price",
    "work_sanitary_bathtub_price",
    "work_sanitary_shower_cubicle_price",
    "work_sanitary_gutter_price",
    "work_sanitary_urinal",
    "work_sanitary_bath_screen",
    "work_sanitary_mirror",
)

OTHERS_COLUMNS: Tuple[str, ...] = (
    "others_scaffolding_assembly_and_disassembly_price",
    "others_scaffolding_price",
    "others_core_drill_rental_price",
    "others_tool_rental_price",
    "others_commute_price",
    "others_vat_price",
)

_PRICE_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "work": WORK_COLUMNS,
    "material": MATERIAL_COLUMNS,
    "installations": INSTALLATIONS_COLUMNS,
    "others": OTHERS_COLUMNS,
}


def db_column_for_entry(category: str, index: int) -> Optional[str]:
    columns = _PRICE_COLUMNS.get(category)
    if columns is None or index < 0 or index >= len(columns):
        return None
    return columns[index]


def price_list_to_db_columns(price_list: PriceList) -> Dict[str, float]:
    """Flatten ``price_list`` into the named numeric columns of the price table."""

    row: Dict[str, float] = {}
    for category, columns in _PRICE_COLUMNS.items():
        for index, entry in enumerate(price_list.category(category)):
            if index < len(columns):
                row[columns[index]] = entry.price
            if category == "material" and entry.capacity is not None:
                capacity_column = MATERIAL_CAPACITY_COLUMNS.get(index)
                if capacity_column:
                    row[capacity_column] = entry.capacity.value
    return row


def db_columns_to_price_list(row: Mapping[str, Any], default: PriceList) -> PriceList:
    """Overlay the prices stored in ``row`` onto a copy of ``default``."""

    result = default.snapshot()
    for category, columns in _PRICE_COLUMNS.items():
        entries = result.category(category)
        for index, column in enumerate(columns):
            value = row.get(column)
            if value is None or index >= len(entries):
                continue
            entries[index].price = parse_number(value)

    for index, column in MATERIAL_CAPACITY_COLUMNS.items():
        value = row.get(column)
        if value is None or index >= len(result.material):
            continue
        entry = result.material[index]
        if entry.capacity is None:
            entry.capacity = Capacity(value=0.0)
        entry.capacity.value = parse_number(value)
    return result


__all__ = [
    "CATEGORIES",
    "Capacity",
    "PriceList",
    "PriceListEntry",
    "db_column_for_entry",
    "db_columns_to_price_list",
    "format_price",
    "load_price_list",
    "price_list_to_db_columns",
]
