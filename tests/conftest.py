from __future__ import annotations

from pathlib import Path
import sys

import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from roomquote import PriceList, load_price_list


@pytest.fixture(scope="session")
def default_price_list() -> PriceList:
    return load_price_list(ROOT / "config" / "price_list.yaml")


@pytest.fixture
def small_price_list() -> PriceList:
    """A short list with round prices and no auxiliary percentage entries."""

    return PriceList.from_dict(
        {
            "work": [
                {"name": "Plasterboarding", "subtitle": "partition, simple", "price": 12, "unit": "€/m2"},
                {"name": "Plasterboarding", "subtitle": "partition, double", "price": 20, "unit": "€/m2"},
                {"name": "Plasterboarding", "subtitle": "ceiling", "price": 25, "unit": "€/m2"},
                {"name": "Netting", "subtitle": "wall", "price": 8, "unit": "€/m2"},
                {"name": "Netting", "subtitle": "ceiling", "price": 10, "unit": "€/m2"},
                {"name": "Tiling under 60cm", "subtitle": "ceramic", "price": 30, "unit": "€/m2"},
                {"name": "Jolly Edging", "price": 25, "unit": "€/m"},
                {"name": "Paving under 60cm", "subtitle": "ceramic", "price": 28, "unit": "€/m2"},
                {"name": "Plinth", "subtitle": "cutting and grinding", "price": 6, "unit": "€/m"},
                {"name": "Plinth", "subtitle": "bonding", "price": 4, "unit": "€/m"},
                {"name": "Large Format", "subtitle": "above 60cm", "price": 80, "unit": "€/m2"},
                {"name": "Grouting", "subtitle": "tiling and paving", "price": 5, "unit": "€/m2"},
                {"name": "Floating floor", "subtitle": "laying", "price": 7, "unit": "€/m2"},
                {"name": "Skirting", "subtitle": "floating floor", "price": 4, "unit": "€/m"},
                {"name": "Window installation", "price": 7, "unit": "€/m"},
                {"name": "Installation of door jamb", "price": 10, "unit": "€/pc"},
            ],
            "material": [
                {
                    "name": "Plasterboard",
                    "subtitle": "simple, partition",
                    "price": 5,
                    "unit": "€/pc",
                    "capacity": {"value": 2.4, "unit": "m2"},
                },
                {"name": "Mesh", "price": 1, "unit": "€/m2"},
                {
                    "name": "Adhesive",
                    "subtitle": "netting",
                    "price": 9,
                    "unit": "€/pkg",
                    "capacity": {"value": 6, "unit": "m2"},
                },
                {
                    "name": "Adhesive",
                    "subtitle": "tiling and paving",
                    "price": 15,
                    "unit": "€/pkg",
                    "capacity": {"value": 3, "unit": "m2"},
                },
                {"name": "Floating floor", "price": 15, "unit": "€/m2"},
                {"name": "Skirting board", "price": 3, "unit": "€/m"},
            ],
            "installations": [
                {"name": "Sanitary installations", "subtitle": "Toilet combi", "price": 65, "unit": "€/pc"},
                {"name": "Sanitary installations", "subtitle": "Bathtub", "price": 90, "unit": "€/pc"},
            ],
            "others": [
                {"name": "Commute", "price": 1, "unit": "€/km"},
                {"name": "Tool rental", "price": 10, "unit": "€/h"},
            ],
        }
    )
