"""Derive quantities and units from a work item's free-form fields."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from .constants import (
    LEGACY_DOOR_AREA,
    LEGACY_WINDOW_AREA,
    SCAFFOLDING_TOKENS,
    Field,
    PropertyId,
    Unit,
)
from .models import DoorWindowItems
from .utils import contains_any, field_value, has_field, lower, parse_number

logger = logging.getLogger(__name__)

DEFAULT_SCAFFOLDING_ASSEMBLY_RATE = 30.0
DEFAULT_SCAFFOLDING_RENTAL_RATE = 10.0


@dataclass
class QuantityResult:
    """Outcome of :func:`derive_quantity_and_unit`.

    ``combined_cost`` is only set for scaffolding rentals, whose price is
    made of an assembly part and a daily rental part instead of a single
    quantity times rate.
    """

    quantity: float
    unit: Optional[str]
    combined_cost: Optional[float] = None

    @property
    def is_area(self) -> bool:
        return self.unit == Unit.SQUARE_METER


def mentions_scaffolding(*texts: Optional[str]) -> bool:
    return any(contains_any(lower(text), SCAFFOLDING_TOKENS) for text in texts)


def opening_area(door_window_items: Optional[DoorWindowItems]) -> float:
    """Total area of the structured doors and windows."""

    if door_window_items is None:
        return 0.0
    total = 0.0
    for opening in list(door_window_items.doors) + list(door_window_items.windows):
        total += parse_number(opening.width) * parse_number(opening.height)
    return total


def legacy_opening_area(fields: Mapping[str, Any]) -> float:
    """Flat deduction for records saved before openings had dimensions."""

    area = 0.0
    if fields.get(Field.DOORS):
        area += parse_number(fields.get(Field.DOORS)) * LEGACY_DOOR_AREA
    if fields.get(Field.WINDOWS):
        area += parse_number(fields.get(Field.WINDOWS)) * LEGACY_WINDOW_AREA
    return area


def scaffolding_costs(
    fields: Mapping[str, Any],
    assembly_rate: float = DEFAULT_SCAFFOLDING_ASSEMBLY_RATE,
    rental_rate: float = DEFAULT_SCAFFOLDING_RENTAL_RATE,
) -> Tuple[float, float, float, float]:
    """Return ``(area, days, assembly_cost, rental_cost)`` for a scaffolding rental."""

    area = field_value(fields, Field.LENGTH) * field_value(fields, Field.HEIGHT)
    days = field_value(fields, Field.RENTAL_DURATION)
    return area, days, area * assembly_rate, area * rental_rate * days


def derive_quantity_and_unit(
    fields: Optional[Mapping[str, Any]],
    property_id: Optional[str],
    door_window_items: Optional[DoorWindowItems] = None,
    subtitle: Optional[str] = None,
    *,
    assembly_rate: float = DEFAULT_SCAFFOLDING_ASSEMBLY_RATE,
    rental_rate: float = DEFAULT_SCAFFOLDING_RENTAL_RATE,
) -> QuantityResult:
    """Compute the priced quantity of a work item.

    Field combinations are checked in a fixed order and the first match wins,
    since real records often carry several of these keys at once. Area
    quantities then lose the area of their doors and windows and never drop
    below zero.
    """

    values: Mapping[str, Any] = fields or {}

    if has_field(values, Field.WIDTH) and has_field(values, Field.HEIGHT):
        result = QuantityResult(
            field_value(values, Field.WIDTH) * field_value(values, Field.HEIGHT),
            Unit.SQUARE_METER,
        )
    elif has_field(values, Field.WIDTH) and has_field(values, Field.LENGTH):
        result = QuantityResult(
            field_value(values, Field.WIDTH) * field_value(values, Field.LENGTH),
            Unit.SQUARE_METER,
        )
    elif has_field(values, Field.LENGTH):
        result = QuantityResult(field_value(values, Field.LENGTH), Unit.METER)
    elif has_field(values, Field.COUNT, Field.OUTLETS, Field.OUTLETS_SK):
        result = QuantityResult(
            field_value(values, Field.COUNT, Field.OUTLETS, Field.OUTLETS_SK), Unit.PIECE
        )
    elif has_field(values, Field.DISTANCE, Field.DISTANCE_SK) and property_id == PropertyId.COMMUTE:
        distance = field_value(values, Field.DISTANCE, Field.DISTANCE_SK)
        days = field_value(values, Field.DURATION, Field.DURATION_SK)
        result = QuantityResult(distance * (days if days > 0 else 1), Unit.KM)
    elif has_field(values, Field.DURATION, Field.DURATION_SK):
        result = QuantityResult(field_value(values, Field.DURATION, Field.DURATION_SK), Unit.HOUR)
    elif has_field(values, Field.CIRCUMFERENCE):
        result = QuantityResult(field_value(values, Field.CIRCUMFERENCE), Unit.METER)
    elif has_field(values, Field.DISTANCE, Field.DISTANCE_SK):
        result = QuantityResult(field_value(values, Field.DISTANCE, Field.DISTANCE_SK), Unit.KM)
    elif has_field(values, Field.RENTAL_DURATION):
        if mentions_scaffolding(subtitle):
            area, _, assembly, rental = scaffolding_costs(values, assembly_rate, rental_rate)
            return QuantityResult(area, Unit.SQUARE_METER, combined_cost=assembly + rental)
        result = QuantityResult(field_value(values, Field.RENTAL_DURATION), Unit.DAY)
    else:
        logger.debug("No quantity fields on %s item: %s", property_id, sorted(values))
        return QuantityResult(0.0, None)

    if result.is_area:
        if door_window_items is not None:
            result.quantity -= opening_area(door_window_items)
        else:
            result.quantity -= legacy_opening_area(values)

    result.quantity = max(0.0, result.quantity)
    return result


__all__ = [
    "DEFAULT_SCAFFOLDING_ASSEMBLY_RATE",
    "DEFAULT_SCAFFOLDING_RENTAL_RATE",
    "QuantityResult",
    "derive_quantity_and_unit",
    "legacy_opening_area",
    "mentions_scaffolding",
    "opening_area",
    "scaffolding_costs",
]
