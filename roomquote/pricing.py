"""Room-level price aggregation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import PricingConfig
from .constants import EntryName, Field, PropertyId, Subtitle, Unit
from .matching import Suggestion, find_price_list_item, suggest_price_entries
from .materials import (
    ItemCalculation,
    calculate_material_cost,
    calculate_work_item_with_materials,
    is_large_format,
    is_netting,
    is_scaffolding,
    is_tiling_or_paving,
    material_packages,
)
from .models import Room, WorkItem
from .pricelist import PriceList, PriceListEntry
from .quantities import derive_quantity_and_unit, scaffolding_costs
from .utils import field_value, has_field, parse_number

logger = logging.getLogger(__name__)

_OTHERS_PROPERTIES = {PropertyId.CUSTOM_WORK, PropertyId.COMMUTE, PropertyId.RENTALS}
_OTHERS_ENTRY_NAMES = {
    EntryName.CUSTOM_WORK,
    EntryName.JOURNEY,
    EntryName.COMMUTE,
    EntryName.TOOL_RENTAL,
    EntryName.CORE_DRILL,
}

# (field, entry name, entry subtitle, line id suffix) of the per-item extras.
_EXTRA_WORKS = (
    (Field.JOLLY_EDGING, EntryName.JOLLY_EDGING, None, "_jolly"),
    (Field.PLINTH_CUTTING, EntryName.PLINTH, Subtitle.CUTTING_AND_GRINDING, "_plinth_cutting"),
    (Field.PLINTH_BONDING, EntryName.PLINTH, Subtitle.BONDING, "_plinth_bonding"),
)

_SKIRTING_WORK_NAMES = (EntryName.SKIRTING, EntryName.SKIRTING_SK)
_SKIRTING_MATERIAL_NAMES = (EntryName.SKIRTING_BOARD, EntryName.SKIRTING_BOARD_SK)


@dataclass
class LineItem:
    """One rendered line of a quote."""

    id: str
    name: str
    calculation: ItemCalculation
    subtitle: Optional[str] = None
    property_id: Optional[str] = None
    work_item: Optional[WorkItem] = None

    def as_dict(self) -> Dict[str, Any]:
        calc = self.calculation
        return {
            "id": self.id,
            "property_id": self.property_id,
            "name": self.name,
            "subtitle": self.subtitle or "",
            "quantity": calc.quantity,
            "unit": calc.unit or "",
            "price_per_unit": calc.price_per_unit,
            "work_cost": calc.work_cost,
            "material_cost": calc.material_cost,
            "total": calc.total,
        }


@dataclass
class AreaTotals:
    """Room-wide aggregates collected before items are priced."""

    tiling_paving_area: float = 0.0
    grouting_area: float = 0.0
    netting_area: float = 0.0
    floating_floor_perimeter: float = 0.0


@dataclass
class UnmatchedItem:
    work_item: WorkItem
    suggestions: List[Suggestion] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.work_item.id,
            "property_id": self.work_item.property_id,
            "name": self.work_item.name,
            "subtitle": self.work_item.subtitle,
            "suggestions": [suggestion.as_dict() for suggestion in self.suggestions],
        }


@dataclass
class RoomPriceBreakdown:
    """Fully itemised price of a room.

    ``work_total`` and ``material_total`` include the auxiliary surcharges;
    the ``base_*`` totals are the sums before them.
    """

    work_total: float = 0.0
    material_total: float = 0.0
    others_total: float = 0.0
    total: float = 0.0
    base_work_total: float = 0.0
    base_material_total: float = 0.0
    auxiliary_work_cost: float = 0.0
    auxiliary_material_cost: float = 0.0
    auxiliary_work_rate: float = 0.0
    auxiliary_material_rate: float = 0.0
    items: List[LineItem] = field(default_factory=list)
    material_items: List[LineItem] = field(default_factory=list)
    others_items: List[LineItem] = field(default_factory=list)
    unmatched: List[UnmatchedItem] = field(default_factory=list)
    areas: AreaTotals = field(default_factory=AreaTotals)

    def summary(self) -> Dict[str, float]:
        return {
            "base_work_total": self.base_work_total,
            "auxiliary_work_rate": self.auxiliary_work_rate,
            "auxiliary_work_cost": self.auxiliary_work_cost,
            "work_total": self.work_total,
            "base_material_total": self.base_material_total,
            "auxiliary_material_rate": self.auxiliary_material_rate,
            "auxiliary_material_cost": self.auxiliary_material_cost,
            "material_total": self.material_total,
            "others_total": self.others_total,
            "total": self.total,
        }


def _first_named(entries: Sequence[PriceListEntry], names: Iterable[str]) -> Optional[PriceListEntry]:
    for name in names:
        wanted = name.lower()
        for entry in entries:
            if entry.name.lower() == wanted:
                return entry
    return None


def auxiliary_rates(
    price_list: Optional[PriceList], settings: Optional[PricingConfig] = None
) -> Tuple[float, float]:
    """Return the auxiliary work and material rates as fractions.

    The rates come from the price list's percentage entries; the configured
    fallback applies when an entry is missing.
    """

    settings = settings or PricingConfig()
    work_rate = settings.auxiliary_work_rate
    material_rate = settings.auxiliary_material_rate
    if price_list is not None:
        work_entry = _first_named(price_list.work, (EntryName.AUX_WORK,))
        if work_entry is not None:
            work_rate = work_entry.price / 100.0
        material_entry = _first_named(price_list.material, (EntryName.AUX_MATERIAL,))
        if material_entry is not None:
            material_rate = material_entry.price / 100.0
    return work_rate, material_rate


def floating_floor_perimeter(work_item: WorkItem) -> float:
    values = work_item.fields
    if has_field(values, Field.CIRCUMFERENCE):
        return field_value(values, Field.CIRCUMFERENCE)
    if has_field(values, Field.WIDTH) and has_field(values, Field.LENGTH):
        return 2 * (field_value(values, Field.WIDTH) + field_value(values, Field.LENGTH))
    return 0.0


def compute_area_totals(
    work_items: Sequence[WorkItem], price_list: PriceList, settings: Optional[PricingConfig] = None
) -> AreaTotals:
    """First pass over a room: the areas that drive shared materials."""

    settings = settings or PricingConfig()
    totals = AreaTotals()
    for work_item in work_items:
        if work_item.property_id == PropertyId.FLOATING_FLOOR:
            totals.floating_floor_perimeter += floating_floor_perimeter(work_item)

        price_item = find_price_list_item(work_item, price_list)
        if price_item is None:
            continue
        tiling = is_tiling_or_paving(work_item, price_item)
        netting = is_netting(work_item, price_item)
        if not tiling and not netting:
            continue
        derived = derive_quantity_and_unit(
            work_item.fields,
            work_item.property_id,
            work_item.door_window_items,
            work_item.subtitle,
        )
        area = derived.quantity if derived.is_area else 0.0
        if tiling and not is_large_format(work_item):
            totals.tiling_paving_area += area
            totals.grouting_area += area
        if netting:
            totals.netting_area += area
    return totals


def is_others_item(work_item: WorkItem, price_item: Optional[PriceListEntry]) -> bool:
    if work_item.property_id in _OTHERS_PROPERTIES or is_scaffolding(work_item):
        return True
    return price_item is not None and price_item.name in _OTHERS_ENTRY_NAMES


def _scaffolding_lines(work_item: WorkItem, settings: PricingConfig) -> List[LineItem]:
    area, days, assembly, rental = scaffolding_costs(
        work_item.fields, settings.scaffolding_assembly_rate, settings.scaffolding_rental_rate
    )
    label = work_item.subtitle or work_item.name
    base_id = work_item.id or work_item.c_id or "scaffolding"
    return [
        LineItem(
            id=base_id,
            name=work_item.name,
            subtitle=label + Subtitle.SCAFFOLDING_ASSEMBLY,
            property_id=work_item.property_id,
            work_item=work_item,
            calculation=ItemCalculation(
                work_cost=assembly, quantity=area, unit=Unit.SQUARE_METER
            ),
        ),
        LineItem(
            id=f"{base_id}_rental",
            name=work_item.name,
            subtitle=label + Subtitle.SCAFFOLDING_RENTAL,
            property_id=work_item.property_id,
            work_item=work_item,
            calculation=ItemCalculation(work_cost=rental, quantity=area * days, unit=Unit.DAY),
        ),
    ]


def _material_lines(work_item: WorkItem, calc: ItemCalculation) -> List[LineItem]:
    lines: List[LineItem] = []
    item_id = work_item.id or work_item.c_id
    if calc.material is not None:
        lines.append(
            LineItem(
                id=f"{item_id}_material",
                name=calc.material.name,
                subtitle=calc.material.subtitle or "",
                property_id=work_item.property_id,
                work_item=work_item,
                calculation=ItemCalculation(
                    material_cost=calc.primary_material_cost,
                    quantity=calc.material_quantity,
                    unit=calc.material.unit or Unit.SQUARE_METER,
                    price_item=calc.material,
                ),
            )
        )
        return lines

    user_priced = {
        PropertyId.WINDOW_INSTALLATION: ("_window_material", EntryName.WINDOWS_DISPLAY),
        PropertyId.DOOR_JAMB_INSTALLATION: ("_doorjamb_material", EntryName.DOOR_JAMBS_DISPLAY),
        PropertyId.SANITARY_INSTALLATION: (
            "_sanitary_material",
            work_item.subtitle or work_item.selected_type or EntryName.SANITARY,
        ),
    }
    if work_item.property_id in user_priced and calc.primary_material_cost > 0:
        suffix, name = user_priced[work_item.property_id]
        lines.append(
            LineItem(
                id=f"{item_id}{suffix}",
                name=name,
                subtitle="",
                property_id=work_item.property_id,
                work_item=work_item,
                calculation=ItemCalculation(
                    material_cost=calc.primary_material_cost,
                    quantity=calc.material_quantity,
                    unit=Unit.PIECE,
                ),
            )
        )
    return lines


def _adhesive_line(
    work_item: WorkItem, calc: ItemCalculation, existing: Sequence[LineItem]
) -> Optional[LineItem]:
    adhesive = calc.additional_material
    if adhesive is None or calc.additional_material_quantity <= 0:
        return None
    subtitle = adhesive.subtitle or ""
    for line in existing:
        if line.name == adhesive.name and line.subtitle == subtitle:
            return None
    return LineItem(
        id=f"{work_item.id or work_item.c_id}_adhesive",
        name=adhesive.name,
        subtitle=subtitle,
        property_id=work_item.property_id,
        work_item=work_item,
        calculation=ItemCalculation(
            material_cost=calc.additional_material_cost,
            quantity=material_packages(adhesive, calc.additional_material_quantity),
            unit=adhesive.unit or Unit.PACKAGE,
            price_item=adhesive,
        ),
    )


def _extra_work_lines(work_item: WorkItem, price_list: PriceList) -> List[LineItem]:
    lines: List[LineItem] = []
    for field_name, entry_name, entry_subtitle, suffix in _EXTRA_WORKS:
        amount = parse_number(work_item.fields.get(field_name))
        if amount <= 0:
            continue
        entry = price_list.find("work", entry_name, entry_subtitle)
        if entry is None:
            logger.debug("No '%s' entry for %s on item %s", entry_name, entry_subtitle, work_item.id)
            continue
        lines.append(
            LineItem(
                id=f"{work_item.id or work_item.c_id}{suffix}",
                name=entry_name,
                subtitle=entry_subtitle,
                property_id=work_item.property_id,
                work_item=work_item,
                calculation=ItemCalculation(
                    work_cost=amount * entry.price,
                    quantity=amount,
                    unit=Unit.METER,
                    price_item=entry,
                ),
            )
        )
    return lines


def _unmatched(
    work_item: WorkItem, price_list: PriceList, settings: PricingConfig
) -> UnmatchedItem:
    logger.debug("Work item %s (%s) has no price entry", work_item.id, work_item.property_id)
    suggestions: List[Suggestion] = []
    if settings.suggestions > 0:
        suggestions = suggest_price_entries(work_item, price_list, limit=settings.suggestions)
    return UnmatchedItem(work_item=work_item, suggestions=suggestions)


def calculate_room_price_with_materials(
    room: Optional[Room],
    price_list: Optional[PriceList],
    settings: Optional[PricingConfig] = None,
) -> RoomPriceBreakdown:
    """Price every work item of ``room`` and fold the result into a breakdown.

    A first pass collects the room-wide tiling/paving, grouting and netting
    areas and the floating-floor perimeter. The second pass prices each item;
    adhesive is costed once from the aggregate area. Grouting, skirting and
    the auxiliary surcharges are added last.
    """

    settings = settings or PricingConfig()
    breakdown = RoomPriceBreakdown()
    if room is None or not room.work_items or price_list is None:
        return breakdown

    totals = compute_area_totals(room.work_items, price_list, settings)
    breakdown.areas = totals

    work_total = 0.0
    material_total = 0.0
    others_total = 0.0
    tiling_adhesive_added = False
    netting_adhesive_added = False

    for work_item in room.work_items:
        price_item = find_price_list_item(work_item, price_list)

        if is_scaffolding(work_item):
            lines = _scaffolding_lines(work_item, settings)
            breakdown.others_items.extend(lines)
            others_total += sum(line.calculation.work_cost for line in lines)
            continue

        if is_others_item(work_item, price_item):
            if price_item is None and work_item.property_id != PropertyId.CUSTOM_WORK:
                breakdown.unmatched.append(_unmatched(work_item, price_list, settings))
                continue
            calc = calculate_work_item_with_materials(
                work_item, price_item, price_list, settings=settings
            )
            others_total += calc.work_cost + calc.material_cost
            breakdown.others_items.append(
                LineItem(
                    id=work_item.id or work_item.c_id or "",
                    name=work_item.fields.get(Field.NAME) or work_item.name,
                    subtitle=work_item.subtitle,
                    property_id=work_item.property_id,
                    work_item=work_item,
                    calculation=calc,
                )
            )
            continue

        if price_item is None:
            breakdown.unmatched.append(_unmatched(work_item, price_list, settings))
            continue

        tiling = is_tiling_or_paving(work_item, price_item)
        netting = is_netting(work_item, price_item)
        large_format = tiling and is_large_format(work_item)

        effective_item = price_item
        if large_format:
            large_entry = price_list.find("work", EntryName.LARGE_FORMAT, Subtitle.ABOVE_60CM)
            if large_entry is not None:
                effective_item = large_entry

        skip_adhesive = (tiling and tiling_adhesive_added) or (netting and netting_adhesive_added)
        calc = calculate_work_item_with_materials(
            work_item,
            effective_item,
            price_list,
            totals.tiling_paving_area,
            skip_adhesive,
            totals.netting_area,
            settings,
        )
        if tiling and not large_format:
            tiling_adhesive_added = True
        if netting:
            netting_adhesive_added = True

        work_total += calc.work_cost
        material_total += calc.material_cost
        breakdown.items.append(
            LineItem(
                id=work_item.id or work_item.c_id or "",
                name=effective_item.name if large_format else work_item.name,
                subtitle=effective_item.subtitle if large_format else work_item.subtitle,
                property_id=work_item.property_id,
                work_item=work_item,
                calculation=calc,
            )
        )
        breakdown.material_items.extend(_material_lines(work_item, calc))
        adhesive_line = _adhesive_line(work_item, calc, breakdown.material_items)
        if adhesive_line is not None:
            breakdown.material_items.append(adhesive_line)

        for line in _extra_work_lines(work_item, price_list):
            work_total += line.calculation.work_cost
            breakdown.items.append(line)

    room_key = room.id or "room"

    if totals.grouting_area > 0:
        grouting = _first_named(price_list.work, (EntryName.GROUTING,))
        if grouting is not None:
            cost = totals.grouting_area * grouting.price
            work_total += cost
            breakdown.items.append(
                LineItem(
                    id=f"{room_key}_grouting",
                    name=grouting.name,
                    subtitle=grouting.subtitle,
                    calculation=ItemCalculation(
                        work_cost=cost,
                        quantity=totals.grouting_area,
                        unit=Unit.SQUARE_METER,
                        price_item=grouting,
                    ),
                )
            )

    if totals.floating_floor_perimeter > 0:
        perimeter = totals.floating_floor_perimeter
        skirting = _first_named(price_list.work, _SKIRTING_WORK_NAMES)
        if skirting is not None:
            cost = perimeter * skirting.price
            work_total += cost
            breakdown.items.append(
                LineItem(
                    id=f"{room_key}_skirting",
                    name=skirting.name,
                    subtitle=skirting.subtitle,
                    calculation=ItemCalculation(
                        work_cost=cost, quantity=perimeter, unit=Unit.METER, price_item=skirting
                    ),
                )
            )
        board = _first_named(price_list.material, _SKIRTING_MATERIAL_NAMES)
        if board is not None:
            cost = calculate_material_cost(board, perimeter)
            material_total += cost
            breakdown.material_items.append(
                LineItem(
                    id=f"{room_key}_skirting_material",
                    name=board.name,
                    subtitle=board.subtitle or "",
                    calculation=ItemCalculation(
                        material_cost=cost,
                        quantity=material_packages(board, perimeter),
                        unit=board.unit or Unit.METER,
                        price_item=board,
                    ),
                )
            )

    work_rate, material_rate = auxiliary_rates(price_list, settings)
    breakdown.base_work_total = work_total
    breakdown.base_material_total = material_total
    breakdown.auxiliary_work_rate = work_rate
    breakdown.auxiliary_material_rate = material_rate
    breakdown.auxiliary_work_cost = work_total * work_rate
    breakdown.auxiliary_material_cost = material_total * material_rate
    breakdown.work_total = work_total + breakdown.auxiliary_work_cost
    breakdown.material_total = material_total + breakdown.auxiliary_material_cost
    breakdown.others_total = others_total
    breakdown.total = breakdown.work_total + breakdown.material_total + others_total

    if breakdown.unmatched:
        logger.info(
            "Room %s: %s work item(s) without a price entry", room_key, len(breakdown.unmatched)
        )
    return breakdown


def calculate_room_price(
    room: Optional[Room], price_list: Optional[PriceList], settings: Optional[PricingConfig] = None
) -> float:
    return calculate_room_price_with_materials(room, price_list, settings).total


__all__ = [
    "AreaTotals",
    "LineItem",
    "RoomPriceBreakdown",
    "UnmatchedItem",
    "auxiliary_rates",
    "calculate_room_price",
    "calculate_room_price_with_materials",
    "compute_area_totals",
    "floating_floor_perimeter",
    "is_others_item",
]
