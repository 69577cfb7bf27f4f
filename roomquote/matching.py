"""Match work items against price-list entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process

from .catalog import default_subtitle, get_property
from .constants import (
    CEILING_TOKENS,
    OFFSET_WALL_TOKENS,
    PARTITION_TOKENS,
    TYPE_TOKENS,
    EntryName,
    PropertyId,
)
from .models import WorkItem
from .pricelist import CATEGORIES, PriceList, PriceListEntry
from .utils import contains_any, indicates_ceiling, indicates_wall, lower

logger = logging.getLogger(__name__)

# Families whose wall and ceiling variants must never be priced against each other.
_LOCATION_EXCLUSIVE = {
    EntryName.PLASTERBOARDING.lower(),
    EntryName.NETTING.lower(),
    EntryName.PLASTERING.lower(),
}

_SUBTYPE_TOKENS: Tuple[Tuple[str, ...], ...] = (PARTITION_TOKENS, OFFSET_WALL_TOKENS, CEILING_TOKENS)


@dataclass
class Suggestion:
    """Price-list entry proposed for a work item that found no match."""

    category: str
    entry: PriceListEntry
    score: float

    def as_dict(self) -> dict:
        return {
            "category": self.category,
            "name": self.entry.name,
            "subtitle": self.entry.subtitle,
            "price": self.entry.price,
            "score": round(self.score, 1),
        }


def target_names(work_item: WorkItem) -> Tuple[Optional[str], Tuple[str, ...]]:
    """Return the canonical entry name and legacy aliases for ``work_item``.

    Rentals group heterogeneous items (scaffolding, core drill, tool rental),
    so their own name is the target instead of the property's.
    """

    if work_item.property_id == PropertyId.RENTALS:
        return (work_item.name or None), ()
    prop = get_property(work_item.property_id)
    if prop is None or not prop.price_name:
        return None, ()
    return prop.price_name, prop.aliases


def work_subtitle(work_item: WorkItem) -> Optional[str]:
    return work_item.subtitle or default_subtitle(work_item.property_id)


def _work_location(work_item: WorkItem, subtitle: Optional[str]) -> Optional[str]:
    if indicates_ceiling(subtitle) or work_item.property_id.endswith("_ceiling"):
        return "ceiling"
    if indicates_wall(subtitle) or work_item.property_id.endswith(("_wall", "_partition", "_offset")):
        return "wall"
    return None


def _entry_location(entry: PriceListEntry) -> Optional[str]:
    if indicates_ceiling(entry.subtitle):
        return "ceiling"
    if indicates_wall(entry.subtitle):
        return "wall"
    return None


def _subtype_matches(work_sub: str, entry_sub: str) -> bool:
    for tokens in _SUBTYPE_TOKENS:
        if contains_any(work_sub, tokens) and contains_any(entry_sub, tokens):
            return True
    return False


def _type_matches(selected_type: str, entry_sub: str) -> bool:
    wanted = selected_type.lower()
    return contains_any(entry_sub, TYPE_TOKENS.get(wanted, (wanted,)))


def _painting_matches(work_sub: str, entry_sub: str) -> bool:
    if contains_any(work_sub, ("stena", "wall")) and "wall" in entry_sub:
        return True
    if contains_any(work_sub, ("strop", "ceiling")) and "ceiling" in entry_sub:
        return True
    return False


def _name_rank(entry: PriceListEntry, target: str, aliases: Sequence[str]) -> Optional[int]:
    """0 for an exact name, 1 for a substring or alias hit, ``None`` otherwise."""

    name = entry.name.lower()
    wanted = target.lower()
    if name == wanted:
        return 0
    if wanted in name or name in {alias.lower() for alias in aliases}:
        return 1
    return None


def _accepts(work_item: WorkItem, entry: PriceListEntry, target: str) -> bool:
    family = target.lower()
    work_sub = lower(work_subtitle(work_item))
    entry_sub = lower(entry.subtitle)

    if family == EntryName.SANITARY.lower():
        wanted = lower(work_item.subtitle or work_item.selected_type)
        return bool(wanted) and wanted == entry_sub

    if family in _LOCATION_EXCLUSIVE:
        location = _work_location(work_item, work_sub)
        if location is not None and entry_sub and _entry_location(entry) != location:
            return False

    if family == EntryName.PLASTERBOARDING.lower():
        if not entry_sub:
            return not work_item.selected_type
        if work_sub and contains_any(work_sub, sum(_SUBTYPE_TOKENS, ())):
            if not _subtype_matches(work_sub, entry_sub):
                return False
        if contains_any(work_sub, CEILING_TOKENS):
            return True
        return not work_item.selected_type or _type_matches(work_item.selected_type, entry_sub)

    if work_item.selected_type and entry_sub:
        return lower(work_item.selected_type) in entry_sub

    if family == EntryName.PAINTING.lower() and work_sub and entry_sub:
        return _painting_matches(work_sub, entry_sub)

    return True


def find_price_list_item(
    work_item: Optional[WorkItem], price_list: Optional[PriceList]
) -> Optional[PriceListEntry]:
    """Find the price-list entry a work item is priced against.

    Categories are searched in order (work, material, installations, others)
    and exact name hits are preferred over substring hits within a category.
    ``None`` means the item contributes nothing; callers must not treat it
    as an error.
    """

    if work_item is None or not work_item.property_id or price_list is None:
        return None

    target, aliases = target_names(work_item)
    if not target:
        logger.debug("No price-list target for property %s", work_item.property_id)
        return None

    for category in CATEGORIES:
        ranked: List[Tuple[int, int, PriceListEntry]] = []
        for position, entry in enumerate(price_list.category(category)):
            rank = _name_rank(entry, target, aliases)
            if rank is not None:
                ranked.append((rank, position, entry))
        ranked.sort(key=lambda item: (item[0], item[1]))
        for _, _, entry in ranked:
            if _accepts(work_item, entry, target):
                return entry

    logger.debug(
        "No price-list entry for %s (%s, %s)",
        work_item.property_id,
        work_item.subtitle,
        work_item.selected_type,
    )
    return None


def suggest_price_entries(
    work_item: WorkItem, price_list: PriceList, limit: int = 3
) -> List[Suggestion]:
    """Rank price-list entries by textual similarity to ``work_item``."""

    choices: List[str] = []
    owners: List[Tuple[str, PriceListEntry]] = []
    for category, entry in price_list.iter_entries():
        choices.append(entry.label)
        owners.append((category, entry))
    if not choices or limit <= 0:
        return []

    prop = get_property(work_item.property_id)
    query_parts = [
        work_item.name or (prop.name if prop else work_item.property_id),
        work_subtitle(work_item),
        work_item.selected_type,
    ]
    query = " ".join(part for part in query_parts if part)
    matches = process.extract(
        query,
        choices,
        scorer=fuzz.token_sort_ratio,
        processor=default_process,
        limit=limit,
    )
    suggestions: List[Suggestion] = []
    for _, score, index in matches:
        category, entry = owners[index]
        suggestions.append(Suggestion(category=category, entry=entry, score=float(score)))
    return suggestions


__all__ = [
    "Suggestion",
    "find_price_list_item",
    "suggest_price_entries",
    "target_names",
    "work_subtitle",
]
