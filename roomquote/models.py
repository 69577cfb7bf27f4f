"""In-memory shapes for rooms, work items and their openings."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


def new_client_id() -> str:
    """Return a fresh client-generated identifier."""

    return str(uuid.uuid4())


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class Opening:
    """A door or window cut out of a parent work item's area."""

    id: Optional[str] = None
    c_id: Optional[str] = None
    width: Any = 0
    height: Any = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Opening":
        return cls(
            id=_pick(data, "id"),
            c_id=_pick(data, "c_id", "cId"),
            width=_pick(data, "width", default=0),
            height=_pick(data, "height", default=0),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "c_id": self.c_id, "width": self.width, "height": self.height}


@dataclass
class DoorWindowItems:
    doors: List[Opening] = field(default_factory=list)
    windows: List[Opening] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["DoorWindowItems"]:
        if data is None:
            return None
        return cls(
            doors=[Opening.from_dict(item) for item in data.get("doors") or []],
            windows=[Opening.from_dict(item) for item in data.get("windows") or []],
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "doors": [door.as_dict() for door in self.doors],
            "windows": [window.as_dict() for window in self.windows],
        }


@dataclass
class WorkItem:
    """A single line of work entered for a room.

    ``fields`` holds the free-form inputs keyed by semantic label (Width,
    Height, Count, ...); which labels are present decides how the quantity is
    derived. ``door_window_items`` set to ``None`` marks a legacy record that
    predates structured openings.
    """

    id: Optional[str]
    property_id: str
    name: str = ""
    subtitle: Optional[str] = None
    selected_type: Optional[str] = None
    selected_unit: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    complementary_works: Dict[str, int] = field(default_factory=dict)
    door_window_items: Optional[DoorWindowItems] = None
    linked_to_parent: Optional[str] = None
    linked_work_key: Optional[str] = None
    c_id: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        """Identity used when diffing item sets."""

        return self.c_id or self.id

    def copy(self, **changes: Any) -> "WorkItem":
        duplicate = copy.deepcopy(self)
        for name, value in changes.items():
            setattr(duplicate, name, value)
        return duplicate

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkItem":
        property_id = _pick(data, "propertyId", "property_id")
        if not property_id:
            raise ValueError("Work item is missing its property id")
        openings = _pick(data, "doorWindowItems", "door_window_items")
        return cls(
            id=_pick(data, "id"),
            c_id=_pick(data, "c_id", "cId"),
            property_id=str(property_id),
            name=_pick(data, "name", default=""),
            subtitle=_pick(data, "subtitle"),
            selected_type=_pick(data, "selectedType", "selected_type"),
            selected_unit=_pick(data, "selectedUnit", "selected_unit"),
            fields=dict(_pick(data, "fields", default={})),
            complementary_works=dict(
                _pick(data, "complementaryWorks", "complementary_works", default={})
            ),
            door_window_items=DoorWindowItems.from_dict(openings),
            linked_to_parent=_pick(data, "linkedToParent", "linked_to_parent"),
            linked_work_key=_pick(data, "linkedWorkKey", "linked_work_key"),
        )

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "c_id": self.c_id,
            "propertyId": self.property_id,
            "name": self.name,
            "fields": copy.deepcopy(self.fields),
            "complementaryWorks": dict(self.complementary_works),
        }
        if self.subtitle is not None:
            payload["subtitle"] = self.subtitle
        if self.selected_type is not None:
            payload["selectedType"] = self.selected_type
        if self.selected_unit is not None:
            payload["selectedUnit"] = self.selected_unit
        if self.door_window_items is not None:
            payload["doorWindowItems"] = self.door_window_items.as_dict()
        if self.linked_to_parent is not None:
            payload["linkedToParent"] = self.linked_to_parent
        if self.linked_work_key is not None:
            payload["linkedWorkKey"] = self.linked_work_key
        return payload


@dataclass
class Room:
    id: Optional[str]
    name: str = ""
    work_items: List[WorkItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Room":
        items = _pick(data, "workItems", "work_items", default=[])
        return cls(
            id=_pick(data, "id"),
            name=_pick(data, "name", default=""),
            work_items=[WorkItem.from_dict(item) for item in items],
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "workItems": [item.as_dict() for item in self.work_items],
        }


__all__ = ["DoorWindowItems", "Opening", "Room", "WorkItem", "new_client_id"]
