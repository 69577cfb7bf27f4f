"""Shared identifiers, field labels and bilingual tokens."""

from __future__ import annotations

from typing import Dict, Tuple


class PropertyId:
    """Work property identifiers as stored on work items."""

    PREPARATORY = "preparatory"
    WIRING = "wiring"
    PLUMBING = "plumbing"
    BRICK_PARTITIONS = "brick_partitions"
    BRICK_LOAD_BEARING = "brick_load_bearing"
    PLASTERBOARDING_PARTITION = "plasterboarding_partition"
    PLASTERBOARDING_OFFSET = "plasterboarding_offset"
    PLASTERBOARDING_CEILING = "plasterboarding_ceiling"
    NETTING_WALL = "netting_wall"
    NETTING_CEILING = "netting_ceiling"
    PLASTERING_WALL = "plastering_wall"
    PLASTERING_CEILING = "plastering_ceiling"
    FACADE_PLASTERING = "facade_plastering"
    CORNER_BEAD = "corner_bead"
    WINDOW_SASH = "window_sash"
    PENETRATION_COATING = "penetration_coating"
    PAINTING_WALL = "painting_wall"
    PAINTING_CEILING = "painting_ceiling"
    LEVELLING = "levelling"
    FLOATING_FLOOR = "floating_floor"
    TILING_UNDER_60 = "tiling_under_60"
    PAVING_UNDER_60 = "paving_under_60"
    GROUTING = "grouting"
    SILICONING = "siliconing"
    SANITARY_INSTALLATION = "sanitary_installation"
    WINDOW_INSTALLATION = "window_installation"
    DOOR_JAMB_INSTALLATION = "door_jamb_installation"
    CUSTOM_WORK = "custom_work"
    COMMUTE = "commute"
    RENTALS = "rentals"


class Unit:
    HOUR = "h"
    PIECE = "pc"
    SQUARE_METER = "m2"
    METER = "m"
    KM = "km"
    DAY = "day"
    PACKAGE = "pkg"


class Field:
    """Semantic labels used as keys in a work item's field map."""

    WIDTH = "Width"
    HEIGHT = "Height"
    LENGTH = "Length"
    COUNT = "Count"
    CIRCUMFERENCE = "Circumference"
    DURATION = "Duration"
    DURATION_SK = "Trvanie"
    DISTANCE = "Distance"
    DISTANCE_SK = "Vzdialenosť"
    OUTLETS = "Number of outlets"
    OUTLETS_SK = "Počet vývodov"
    RENTAL_DURATION = "Rental duration"
    PRICE = "Price"
    QUANTITY = "Quantity"
    NAME = "Name"
    DOORS = "Doors"
    WINDOWS = "Windows"
    LARGE_FORMAT = "Large Format_above 60cm"
    JOLLY_EDGING = "Jolly Edging"
    PLINTH_CUTTING = "Plinth_cutting and grinding"
    PLINTH_BONDING = "Plinth_bonding"


class EntryName:
    """Price-list entry names referenced directly by the pricing rules."""

    PLASTERBOARDING = "Plasterboarding"
    NETTING = "Netting"
    PLASTERING = "Plastering"
    PAINTING = "Painting"
    SANITARY = "Sanitary installations"
    LARGE_FORMAT = "Large Format"
    JOLLY_EDGING = "Jolly Edging"
    PLINTH = "Plinth"
    GROUTING = "Grouting"
    SKIRTING = "Skirting"
    SKIRTING_SK = "Lištovanie"
    SKIRTING_BOARD = "Skirting board"
    SKIRTING_BOARD_SK = "Soklové lišty"
    ADHESIVE = "Adhesive"
    ADHESIVE_SK = "Lepidlo"
    AUX_WORK = "Auxiliary and finishing work"
    AUX_MATERIAL = "Auxiliary and fastening material"
    CUSTOM_WORK = "Custom work and material"
    JOURNEY = "Journey"
    COMMUTE = "Commute"
    COMMUTE_SK = "Cesta"
    TOOL_RENTAL = "Tool rental"
    CORE_DRILL = "Core Drill"
    SCAFFOLDING = "Scaffolding"
    WINDOWS_DISPLAY = "Okná"
    DOOR_JAMBS_DISPLAY = "Zárubne"


class Subtitle:
    ABOVE_60CM = "above 60cm"
    CUTTING_AND_GRINDING = "cutting and grinding"
    BONDING = "bonding"
    TILING_AND_PAVING = "tiling and paving"
    NETTING = "netting"
    SCAFFOLDING_ASSEMBLY = " - montáž a demontáž"
    SCAFFOLDING_RENTAL = " - prenájom"


# English and Slovak spellings that denote the same location or board type.
PARTITION_TOKENS: Tuple[str, ...] = ("partition", "priečk")
OFFSET_WALL_TOKENS: Tuple[str, ...] = ("offset wall", "predsadená stena")
CEILING_TOKENS: Tuple[str, ...] = ("ceiling", "strop")
WALL_TOKENS: Tuple[str, ...] = ("wall", "stena", "partition", "priečk", "offset", "predsadená")
SCAFFOLDING_TOKENS: Tuple[str, ...] = ("scaffolding", "lešenie")

TYPE_TOKENS: Dict[str, Tuple[str, ...]] = {
    "simple": ("simple", "jednoduch"),
    "double": ("double", "dvojit", "zdvojen"),
    "triple": ("triple", "trojit"),
}

TYPE_SUFFIXES: Tuple[str, ...] = (
    " Simple",
    " Double",
    " Triple",
    " jednoduchý",
    " dvojitý",
    " trojitý",
)

# Pairs treated as equivalent when comparing subtitle fragments across languages.
BILINGUAL_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("jednoduch", "simple"),
    ("dvojit", "double"),
    ("zdvojen", "double"),
    ("trojit", "triple"),
    ("priečk", "partition"),
    ("predsadená", "offset"),
    ("stena", "wall"),
    ("strop", "ceiling"),
)

LEGACY_DOOR_AREA = 2.0
LEGACY_WINDOW_AREA = 1.5

CUSTOM_TYPE_WORK = "Work"
CUSTOM_TYPE_MATERIAL = "Material"


__all__ = [
    "BILINGUAL_PAIRS",
    "CEILING_TOKENS",
    "CUSTOM_TYPE_MATERIAL",
    "CUSTOM_TYPE_WORK",
    "EntryName",
    "Field",
    "LEGACY_DOOR_AREA",
    "LEGACY_WINDOW_AREA",
    "OFFSET_WALL_TOKENS",
    "PARTITION_TOKENS",
    "PropertyId",
    "SCAFFOLDING_TOKENS",
    "Subtitle",
    "TYPE_SUFFIXES",
    "TYPE_TOKENS",
    "Unit",
    "WALL_TOKENS",
]
