"""Material lookup and per-item cost calculation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .config import PricingConfig
from .constants import (
    CUSTOM_TYPE_MATERIAL,
    TYPE_SUFFIXES,
    EntryName,
    Field,
    PropertyId,
)
from .matching import work_subtitle
from .models import WorkItem
from .pricelist import PriceList, PriceListEntry
from .quantities import derive_quantity_and_unit, mentions_scaffolding, scaffolding_costs
from .utils import (
    contains_any,
    field_value,
    locations_conflict,
    lower,
    parts_equivalent,
    split_parts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterialKeyMapping:
    name: str
    names_sk: Tuple[str, ...] = ()
    subtitle_pattern: Optional[str] = None

    def name_matches(self, name: str) -> bool:
        wanted = name.lower()
        return wanted == self.name.lower() or any(wanted == sk.lower() for sk in self.names_sk)


_PLASTERBOARD = ("Plasterboard", ("Sádrokartón",))

MATERIAL_KEY_MAPPINGS: Dict[str, MaterialKeyMapping] = {
    "plasterboarding_partition_simple": MaterialKeyMapping(*_PLASTERBOARD, "simple, partition"),
    "plasterboarding_partition_double": MaterialKeyMapping(*_PLASTERBOARD, "double, partition"),
    "plasterboarding_partition_triple": MaterialKeyMapping(*_PLASTERBOARD, "triple, partition"),
    "plasterboarding_offset_simple": MaterialKeyMapping(*_PLASTERBOARD, "simple, offset wall"),
    "plasterboarding_offset_double": MaterialKeyMapping(*_PLASTERBOARD, "double, offset wall"),
    "plasterboarding_ceiling": MaterialKeyMapping(*_PLASTERBOARD, "ceiling"),
    "brick_partitions": MaterialKeyMapping("Partition masonry", ("Murivo priečkové",)),
    "brick_load_bearing": MaterialKeyMapping("Load-bearing masonry", ("Murivo nosné",)),
    "netting_wall": MaterialKeyMapping("Mesh", ("Sieťka",)),
    "netting_ceiling": MaterialKeyMapping("Mesh", ("Sieťka",)),
    "plastering_wall": MaterialKeyMapping("Plaster", ("Omietka",)),
    "plastering_ceiling": MaterialKeyMapping("Plaster", ("Omietka",)),
    "window_sash": MaterialKeyMapping("Plaster", ("Omietka",)),
    "facade_plastering": MaterialKeyMapping("Facade Plaster", ("Fasádna omietka",)),
    "corner_bead": MaterialKeyMapping("Corner bead", ("Rohová lišta",)),
    "penetration_coating": MaterialKeyMapping("Primer", ("Penetrácia",)),
    "painting_wall": MaterialKeyMapping("Paint", ("Farba",), "wall"),
    "painting_ceiling": MaterialKeyMapping("Paint", ("Farba",), "ceiling"),
    "levelling": MaterialKeyMapping("Self-levelling compound", ("Nivelačná hmota",)),
    "floating_floor": MaterialKeyMapping("Floating floor", ("Plávajúca podlaha",)),
    "skirting": MaterialKeyMapping("Skirting board", ("Soklové lišty",)),
    "tiling_under_60": MaterialKeyMapping("Tiles", ("Obklad",)),
    "paving_under_60": MaterialKeyMapping("Pavings", ("Dlažba",)),
    "siliconing": MaterialKeyMapping("Silicone", ("Silikón",)),
}

ADHESIVE_TILING = "adhesive_tiling"
ADHESIVE_NETTING = "adhesive_netting"

ADHESIVE_KEY_MAPPINGS: Dict[str, MaterialKeyMapping] = {
    ADHESIVE_TILING: MaterialKeyMapping(
        EntryName.ADHESIVE, (EntryName.ADHESIVE_SK,), "tiling and paving"
    ),
    ADHESIVE_NETTING: MaterialKeyMapping(EntryName.ADHESIVE, (EntryName.ADHESIVE_SK,), "netting"),
}

# Work entry name (English or Slovak) to the material it consumes.
MATERIAL_NAME_MAP: Dict[str, str] = {
    "Brick partitions": "Partition masonry",
    "Murovanie priečok": "Partition masonry",
    "Brick load-bearing wall": "Load-bearing masonry",
    "Murovanie nosného muriva": "Load-bearing masonry",
    "Plasterboarding": "Plasterboard",
    "Sádrokartón": "Plasterboard",
    "Sadrokartonárske práce": "Plasterboard",
    "Netting": "Mesh",
    "Sieťkovanie": "Mesh",
    "Plastering": "Plaster",
    "Omietka": "Plaster",
    "Plastering of window sash": "Plaster",
    "Omietka špalety": "Plaster",
    "Facade Plastering": "Facade Plaster",
    "Fasádne omietky": "Facade Plaster",
    "Installation of corner bead": "Corner bead",
    "Osadenie rohových lišt": "Corner bead",
    "Osadenie rohovej lišty": "Corner bead",
    "Penetration coating": "Primer",
    "Penetračný náter": "Primer",
    "Painting": "Paint",
    "Maľovanie": "Paint",
    "Levelling": "Self-levelling compound",
    "Vyrovnávanie": "Self-levelling compound",
    "Nivelačka": "Self-levelling compound",
    "Floating floor": "Floating floor",
    "Plávajúca podlaha": "Floating floor",
    "Skirting": "Skirting board",
    "Lištovanie": "Skirting board",
    "Soklové lišty": "Skirting board",
    "Tiling under 60cm": "Tiles",
    "Obklad do 60cm": "Tiles",
    "Paving under 60cm": "Pavings",
    "Dlažba do 60 cm": "Pavings",
    "Siliconing": "Silicone",
    "Silikónovanie": "Silicone",
}

# Material names that appear under another spelling in Slovak price lists.
MATERIAL_NAME_ALIASES: Dict[str, Tuple[str, ...]] = {
    "Plasterboard": ("Sádrokartón",),
    "Skirting board": ("Soklové lišty",),
    "Mesh": ("Sieťka",),
    "Paint": ("Farba",),
}

_PLASTERBOARD_NAMES = {"plasterboard", "sádrokartón"}
_TYPE_WORDS = {suffix.strip().lower() for suffix in TYPE_SUFFIXES}


@dataclass
class ItemCalculation:
    """Cost breakdown of a single work item.

    ``material_quantity`` counts packages when the material is sold by
    capacity, otherwise it is the consumed quantity. ``additional_material``
    is the adhesive costed from the room-wide area.
    """

    work_cost: float = 0.0
    material_cost: float = 0.0
    quantity: float = 0.0
    unit: Optional[str] = None
    price_item: Optional[PriceListEntry] = None
    material: Optional[PriceListEntry] = None
    material_quantity: float = 0.0
    primary_material_cost: float = 0.0
    additional_material: Optional[PriceListEntry] = None
    additional_material_quantity: float = 0.0
    additional_material_cost: float = 0.0

    @property
    def price_per_unit(self) -> float:
        return self.price_item.price if self.price_item else 0.0

    @property
    def total(self) -> float:
        return self.work_cost + self.material_cost

    def as_dict(self) -> Dict[str, Any]:
        return {
            "work_cost": self.work_cost,
            "material_cost": self.material_cost,
            "quantity": self.quantity,
            "unit": self.unit,
            "price_per_unit": self.price_per_unit,
            "material": self.material.label if self.material else None,
            "material_quantity": self.material_quantity,
            "additional_material": (
                self.additional_material.label if self.additional_material else None
            ),
            "additional_material_quantity": self.additional_material_quantity,
            "additional_material_cost": self.additional_material_cost,
        }


def get_material_key(property_id: Optional[str], selected_type: Optional[str] = None) -> Optional[str]:
    """Build the lookup key ``property_id`` or ``property_id_type``."""

    if not property_id:
        return None
    base = property_id.lower()
    if selected_type:
        return f"{base}_{'_'.join(selected_type.lower().split())}"
    return base


def get_adhesive_key(
    property_id: Optional[str], price_item: Optional[PriceListEntry] = None
) -> Optional[str]:
    """Adhesive consumed by tiling, paving or netting work, else ``None``.

    Items of other properties priced against a tiling or netting entry use
    that entry's adhesive.
    """

    if _tiling_or_paving(property_id, price_item):
        return ADHESIVE_TILING
    if _netting(property_id, price_item):
        return ADHESIVE_NETTING
    return None


def _pattern_matches(pattern: str, subtitle: Optional[str]) -> bool:
    if not subtitle:
        return False
    subtitle_lower = lower(subtitle)
    subtitle_parts = split_parts(subtitle)
    for part in split_parts(pattern):
        if part in subtitle_lower:
            continue
        if any(parts_equivalent(part, other) for other in subtitle_parts):
            continue
        return False
    return True


def _find_by_mapping(
    mapping: MaterialKeyMapping, materials: Sequence[PriceListEntry]
) -> Optional[PriceListEntry]:
    for material in materials:
        if not mapping.name_matches(material.name):
            continue
        if mapping.subtitle_pattern and not _pattern_matches(mapping.subtitle_pattern, material.subtitle):
            continue
        return material
    return None


def find_material_by_key(
    material_key: Optional[str], materials: Sequence[PriceListEntry]
) -> Optional[PriceListEntry]:
    """Look a material up by its key.

    An entry carrying an explicit ``material_key`` wins; otherwise the key's
    mapping is matched on the English or Slovak name and every part of its
    subtitle pattern.
    """

    if not material_key or not materials:
        return None
    for material in materials:
        if material.material_key == material_key:
            return material
    mapping = MATERIAL_KEY_MAPPINGS.get(material_key)
    if mapping is None:
        return None
    return _find_by_mapping(mapping, materials)


def find_adhesive_by_key(
    adhesive_key: Optional[str], materials: Sequence[PriceListEntry]
) -> Optional[PriceListEntry]:
    mapping = ADHESIVE_KEY_MAPPINGS.get(adhesive_key or "")
    if mapping is None or not materials:
        return None
    return _find_by_mapping(mapping, materials)


def _split_type_suffix(work_name: str) -> Tuple[str, Optional[str]]:
    for suffix in TYPE_SUFFIXES:
        if work_name.endswith(suffix):
            return work_name[: -len(suffix)], suffix.strip().lower()
    return work_name, None


def _split_type_part(work_sub: str) -> Tuple[str, Optional[str]]:
    """Split a trailing board type off ``"offset wall, simple"``."""

    parts = split_parts(work_sub)
    if len(parts) > 1 and parts[-1] in _TYPE_WORDS:
        return ", ".join(parts[:-1]), parts[-1]
    return work_sub, None


def _plasterboard_combo_matches(subtype: str, extracted_type: str, material_sub: str) -> bool:
    if "predsadená stena" in subtype or "offset wall" in subtype:
        if extracted_type in ("simple", "jednoduchý"):
            return "jednoduchá predsadená stena" in material_sub or "simple, offset wall" in material_sub
        if extracted_type in ("double", "dvojitý"):
            return "zdvojená predsadená stena" in material_sub or "double, offset wall" in material_sub
        return (
            f"{extracted_type}, offset wall" in material_sub
            or f"{extracted_type}, predsadená stena" in material_sub
        )
    return f"{extracted_type}, {subtype}" in material_sub or f"{subtype}, {extracted_type}" in material_sub


def _parts_match(work_sub: str, material_sub: str, extracted_type: Optional[str]) -> bool:
    work_parts = split_parts(work_sub)
    material_parts = split_parts(material_sub)
    if extracted_type and extracted_type not in work_parts:
        work_parts.append(extracted_type)
    if not work_parts or len(work_parts) > len(material_parts):
        return False
    return all(
        any(parts_equivalent(part, other) for other in material_parts) for part in work_parts
    )


def _subtitle_matches(
    material_name: str,
    work_sub: str,
    material_sub: str,
    extracted_type: Optional[str],
    subtype: Optional[str] = None,
) -> bool:
    if work_sub in material_sub:
        return True

    if material_name.lower() == "paint":
        if contains_any(work_sub, ("stena", "wall")) and "wall" in material_sub:
            return True
        if contains_any(work_sub, ("strop", "ceiling")) and "ceiling" in material_sub:
            return True
        return False

    if material_name.lower() not in _PLASTERBOARD_NAMES:
        return False

    if contains_any(work_sub, ("ceiling", "strop")) and contains_any(material_sub, ("ceiling", "strop")):
        return True
    if extracted_type and _plasterboard_combo_matches(subtype or work_sub, extracted_type, material_sub):
        return True
    return _parts_match(work_sub, material_sub, extracted_type)


def find_matching_material(
    work_name: Optional[str], full_subtype: Optional[str], price_list: Optional[PriceList]
) -> Optional[PriceListEntry]:
    """Find the material consumed by the work entry called ``work_name``.

    ``full_subtype`` is the work subtitle joined with the selected type
    (``"partition, Simple"``). Subtitles are compared in both languages and
    regardless of word order for plasterboard. When no subtitle matches, the
    first material with the right name is used unless it belongs to the
    other side of the wall/ceiling split.
    """

    if not work_name or price_list is None or not price_list.material:
        return None

    base_name, extracted_type = _split_type_suffix(work_name)
    material_name = MATERIAL_NAME_MAP.get(base_name)
    if material_name is None:
        return None

    names = {material_name.lower()}
    names.update(alias.lower() for alias in MATERIAL_NAME_ALIASES.get(material_name, ()))
    candidates = [entry for entry in price_list.material if entry.name.lower() in names]
    work_sub = lower(full_subtype)
    subtype = work_sub
    if extracted_type is None:
        subtype, extracted_type = _split_type_part(work_sub)

    for entry in candidates:
        if not work_sub or not entry.subtitle:
            return entry
        if locations_conflict(work_sub, entry.subtitle):
            continue
        if _subtitle_matches(material_name, work_sub, lower(entry.subtitle), extracted_type, subtype):
            return entry

    if work_sub:
        for entry in candidates:
            if not locations_conflict(work_sub, entry.subtitle):
                return entry
    return None


def full_subtype(work_item: WorkItem) -> Optional[str]:
    subtitle = work_subtitle(work_item)
    if subtitle and work_item.selected_type:
        return f"{subtitle}, {work_item.selected_type}"
    return subtitle or work_item.selected_type


def resolve_material(
    work_item: WorkItem, price_item: Optional[PriceListEntry], price_list: PriceList
) -> Optional[PriceListEntry]:
    """Material for ``work_item``: key lookup first, name matching second."""

    key = get_material_key(work_item.property_id, work_item.selected_type)
    material = find_material_by_key(key, price_list.material)
    if material is not None:
        return material
    if price_item is None:
        return None
    return find_matching_material(price_item.name, full_subtype(work_item), price_list)


def _ceil(value: float) -> int:
    # Rounding first keeps exact multiples such as 7.2 / 2.4 from becoming 4.
    return int(math.ceil(round(value, 9)))


def material_packages(material: Optional[PriceListEntry], quantity: float) -> float:
    """Number of packages needed, or the raw quantity for continuous materials."""

    if material is None or not quantity:
        return 0.0
    if material.capacity is not None and material.capacity.value > 0:
        return float(_ceil(quantity / material.capacity.value))
    return quantity


def calculate_material_cost(material: Optional[PriceListEntry], quantity: float) -> float:
    """Cost of ``quantity`` of ``material``, rounded up to whole packages."""

    if material is None or not quantity:
        return 0.0
    return material_packages(material, quantity) * material.price


def _tiling_or_paving(property_id: Optional[str], price_item: Optional[PriceListEntry]) -> bool:
    if property_id in (PropertyId.TILING_UNDER_60, PropertyId.PAVING_UNDER_60):
        return True
    name = lower(price_item.name) if price_item else ""
    return contains_any(name, ("tiling", "obklad", "paving", "dlažba"))


def _netting(property_id: Optional[str], price_item: Optional[PriceListEntry]) -> bool:
    if property_id in (PropertyId.NETTING_WALL, PropertyId.NETTING_CEILING):
        return True
    name = lower(price_item.name) if price_item else ""
    return contains_any(name, ("netting", "sieťkovanie"))


def is_tiling_or_paving(work_item: WorkItem, price_item: Optional[PriceListEntry]) -> bool:
    return _tiling_or_paving(work_item.property_id, price_item)


def is_netting(work_item: WorkItem, price_item: Optional[PriceListEntry]) -> bool:
    return _netting(work_item.property_id, price_item)


def is_large_format(work_item: WorkItem) -> bool:
    value = work_item.fields.get(Field.LARGE_FORMAT)
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no")
    return bool(value)


def is_scaffolding(work_item: WorkItem) -> bool:
    return mentions_scaffolding(work_item.subtitle, work_item.name)


def calculate_work_item_price(
    work_item: WorkItem,
    price_item: Optional[PriceListEntry],
    settings: Optional[PricingConfig] = None,
) -> float:
    """Work cost of a single item against its price-list entry."""

    settings = settings or PricingConfig()
    values = work_item.fields

    if work_item.property_id == PropertyId.CUSTOM_WORK:
        return field_value(values, Field.QUANTITY) * field_value(values, Field.PRICE)
    if price_item is None:
        return 0.0
    if work_item.property_id == PropertyId.SANITARY_INSTALLATION:
        return field_value(values, Field.COUNT) * price_item.price

    if work_item.property_id == PropertyId.RENTALS and is_scaffolding(work_item):
        _, _, assembly, rental = scaffolding_costs(
            values, settings.scaffolding_assembly_rate, settings.scaffolding_rental_rate
        )
        return assembly + rental

    result = derive_quantity_and_unit(
        values,
        work_item.property_id,
        work_item.door_window_items,
        work_item.subtitle,
        assembly_rate=settings.scaffolding_assembly_rate,
        rental_rate=settings.scaffolding_rental_rate,
    )
    if result.combined_cost is not None:
        return result.combined_cost
    return max(0.0, result.quantity * price_item.price)


def calculate_work_item_with_materials(
    work_item: WorkItem,
    price_item: Optional[PriceListEntry],
    price_list: PriceList,
    total_tiling_paving_area: float = 0.0,
    skip_adhesive: bool = False,
    total_netting_area: float = 0.0,
    settings: Optional[PricingConfig] = None,
) -> ItemCalculation:
    """Work and material cost of one item, adhesive included.

    The adhesive for tiling, paving and netting is costed from the room-wide
    area passed in by the caller; ``skip_adhesive`` suppresses it for every
    item after the first so it is only counted once per room. Large-format
    tiles carry neither material nor adhesive.
    """

    settings = settings or PricingConfig()
    values = work_item.fields
    derived = derive_quantity_and_unit(
        values,
        work_item.property_id,
        work_item.door_window_items,
        work_item.subtitle,
        assembly_rate=settings.scaffolding_assembly_rate,
        rental_rate=settings.scaffolding_rental_rate,
    )
    calculation = ItemCalculation(
        work_cost=calculate_work_item_price(work_item, price_item, settings),
        quantity=derived.quantity,
        unit=derived.unit,
        price_item=price_item,
    )

    property_id = work_item.property_id
    if property_id == PropertyId.CUSTOM_WORK:
        calculation.quantity = field_value(values, Field.QUANTITY)
        calculation.unit = work_item.selected_unit
        if work_item.selected_type == CUSTOM_TYPE_MATERIAL:
            calculation.material_cost = calculation.work_cost
            calculation.primary_material_cost = calculation.work_cost
            calculation.work_cost = 0.0
        return calculation

    if property_id == PropertyId.SANITARY_INSTALLATION:
        count = field_value(values, Field.COUNT)
        calculation.quantity = count
        calculation.material_quantity = count
        calculation.primary_material_cost = count * field_value(values, Field.PRICE)
        calculation.material_cost = calculation.primary_material_cost
        return calculation

    if property_id == PropertyId.WINDOW_INSTALLATION:
        calculation.material_quantity = 1.0 if field_value(values, Field.PRICE) else 0.0
        calculation.primary_material_cost = field_value(values, Field.PRICE)
        calculation.material_cost = calculation.primary_material_cost
        return calculation

    if property_id == PropertyId.DOOR_JAMB_INSTALLATION:
        count = field_value(values, Field.COUNT)
        calculation.material_quantity = count
        calculation.primary_material_cost = count * field_value(values, Field.PRICE)
        calculation.material_cost = calculation.primary_material_cost
        return calculation

    if price_item is None or is_large_format(work_item):
        return calculation

    material = resolve_material(work_item, price_item, price_list)
    if material is not None:
        consumed = calculation.quantity
        if property_id == PropertyId.FLOATING_FLOOR and consumed:
            consumed = float(_ceil(consumed * settings.floating_floor_waste))
        calculation.material = material
        calculation.material_quantity = material_packages(material, consumed)
        calculation.primary_material_cost = calculate_material_cost(material, consumed)

    if not skip_adhesive:
        adhesive_key = get_adhesive_key(property_id, price_item)
        area_total = {
            ADHESIVE_TILING: total_tiling_paving_area,
            ADHESIVE_NETTING: total_netting_area,
        }.get(adhesive_key or "", 0.0)
        adhesive = find_adhesive_by_key(adhesive_key, price_list.material)
        if adhesive is not None:
            area = area_total if area_total > 0 else calculation.quantity
            calculation.additional_material = adhesive
            calculation.additional_material_quantity = area
            calculation.additional_material_cost = calculate_material_cost(adhesive, area)

    calculation.material_cost = (
        calculation.primary_material_cost + calculation.additional_material_cost
    )
    return calculation


__all__ = [
    "ADHESIVE_KEY_MAPPINGS",
    "ItemCalculation",
    "MATERIAL_KEY_MAPPINGS",
    "MATERIAL_NAME_MAP",
    "MaterialKeyMapping",
    "calculate_material_cost",
    "calculate_work_item_price",
    "calculate_work_item_with_materials",
    "find_adhesive_by_key",
    "find_material_by_key",
    "find_matching_material",
    "full_subtype",
    "get_adhesive_key",
    "get_material_key",
    "is_large_format",
    "is_netting",
    "is_scaffolding",
    "is_tiling_or_paving",
    "material_packages",
    "resolve_material",
]
