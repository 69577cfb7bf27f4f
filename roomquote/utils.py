"""Utility helpers shared across the pricing engine."""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping, Optional

from .constants import BILINGUAL_PAIRS, CEILING_TOKENS, WALL_TOKENS

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> float:
    """Read a user-entered value as a float, treating garbage as ``0``.

    Strings are parsed up to the first character that cannot belong to a
    number, so ``"12.5 m"`` reads as ``12.5``. Missing, empty, boolean and
    non-finite values all collapse to ``0.0``.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        numeric = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return 0.0
        try:
            numeric = float(match.group(1))
        except ValueError:
            return 0.0
    if math.isnan(numeric) or math.isinf(numeric):
        return 0.0
    return numeric


def field_value(fields: Mapping[str, Any], *names: str) -> float:
    """Return the first truthy field among ``names`` parsed as a number."""

    for name in names:
        value = fields.get(name)
        if value:
            return parse_number(value)
    return 0.0


def has_field(fields: Mapping[str, Any], *names: str) -> bool:
    """True when any of ``names`` carries a truthy value."""

    return any(bool(fields.get(name)) for name in names)


def clean_text(value: Any) -> str:
    """Normalise textual values for matching."""

    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    return re.sub(r"\s+", " ", text.strip())


def lower(value: Optional[str]) -> str:
    return clean_text(value).lower()


def contains_any(text: str, tokens: Iterable[str]) -> bool:
    return any(token in text for token in tokens)


def indicates_ceiling(text: Optional[str]) -> bool:
    return contains_any(lower(text), CEILING_TOKENS)


def indicates_wall(text: Optional[str]) -> bool:
    return contains_any(lower(text), WALL_TOKENS)


def locations_conflict(left: Optional[str], right: Optional[str]) -> bool:
    """True when one text points at a ceiling and the other at a wall."""

    left_ceiling = indicates_ceiling(left)
    right_ceiling = indicates_ceiling(right)
    if left_ceiling and not right_ceiling and indicates_wall(right):
        return True
    if right_ceiling and not left_ceiling and indicates_wall(left):
        return True
    return False


def parts_equivalent(part: str, other: str) -> bool:
    """Compare two subtitle fragments, accepting English/Slovak synonyms."""

    if not part or not other:
        return False
    if part in other or other in part:
        return True
    for slovak, english in BILINGUAL_PAIRS:
        if slovak in part and english in other:
            return True
        if english in part and slovak in other:
            return True
    return False


def split_parts(text: Optional[str]) -> list:
    return [part.strip() for part in lower(text).split(",") if part.strip()]


__all__ = [
    "clean_text",
    "contains_any",
    "field_value",
    "has_field",
    "indicates_ceiling",
    "indicates_wall",
    "locations_conflict",
    "lower",
    "parse_number",
    "parts_equivalent",
    "split_parts",
]
