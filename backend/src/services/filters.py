from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

from models import Budget, FilterState, Place


class Setting(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


BUDGET_MAX_PRICE: Dict[Budget, int] = {
    Budget.LOW: 1,
    Budget.MEDIUM: 2,
    Budget.HIGH: 3,
}

OUTDOOR_TYPES: FrozenSet[str] = frozenset({"park", "campground", "natural_feature"})


def classify_setting(place: Place) -> Setting:
    if any(t.lower() in OUTDOOR_TYPES for t in place.types):
        return Setting.OUTDOOR
    return Setting.INDOOR


def within_budget(place: Place, budget: Optional[Budget]) -> bool:
    """Unknown price level never disqualifies a place."""
    if budget is None or place.price_level is None:
        return True
    return place.price_level <= BUDGET_MAX_PRICE[budget]


def matches_setting(place: Place, indoor: Optional[bool]) -> bool:
    if indoor is None:
        return True
    wanted = Setting.INDOOR if indoor else Setting.OUTDOOR
    return classify_setting(place) is wanted


def apply_filters(places: Sequence[Place], filters: FilterState) -> Tuple[Place, ...]:
    """Order-preserving budget and indoor/outdoor refinement.

    Category is not handled here; it is applied upstream by fetching
    with a different provider type.
    """
    return tuple(
        p for p in places if within_budget(p, filters.budget) and matches_setting(p, filters.indoor)
    )
