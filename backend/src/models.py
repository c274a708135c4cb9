"""Data models for the date ideas pipeline."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


class Mode(str, Enum):
    MOCK = "mock"
    LIVE = "live"


class Budget(str, Enum):
    LOW = "$"
    MEDIUM = "$$"
    HIGH = "$$$"


class Duration(str, Enum):
    SHORT = "1-2h"
    MEDIUM = "2-4h"
    FULL_DAY = "Full Day"


class Mood(str, Enum):
    CHILL = "Chill"
    ACTIVE = "Active"
    ROMANTIC = "Romantic"
    FUN = "Fun"
    COZY = "Cozy"


def parse_enum(enum_cls, value: Any):
    """Return the member of ``enum_cls`` matching ``value`` or None."""
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        return None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Coordinate(NamedTuple):
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Place:
    id: str
    name: str
    lat: float
    lng: float
    types: Tuple[str, ...] = ("point_of_interest",)
    rating: Optional[float] = None
    user_ratings_total: int = 0
    price_level: Optional[int] = None  # None means unknown, not free
    vicinity: str = ""
    open_now: Optional[bool] = None
    photos: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Place":
        """Build a Place from the places-proxy wire shape."""
        geometry = data.get("geometry") or {}
        location = geometry.get("location") or data.get("location") or {}
        lat = location.get("lat")
        lng = location.get("lng")
        if lat is None or lng is None:
            raise ValueError(f"place {data.get('id')!r} has no location")

        opening = data.get("opening_hours") or {}
        open_now = opening.get("open_now") if isinstance(opening, dict) else None
        rating = data.get("rating")
        price = data.get("price_level")
        types = tuple(str(t) for t in (data.get("types") or []) if t) or ("point_of_interest",)
        return cls(
            id=str(data.get("id") or data.get("place_id") or ""),
            name=str(data.get("name") or "Unnamed place"),
            lat=float(lat),
            lng=float(lng),
            types=types,
            rating=float(rating) if isinstance(rating, (int, float)) else None,
            user_ratings_total=int(data.get("user_ratings_total") or 0),
            price_level=int(price) if isinstance(price, (int, float)) and not isinstance(price, bool) else None,
            vicinity=str(data.get("vicinity") or ""),
            open_now=open_now if isinstance(open_now, bool) else None,
            photos=tuple(str(p) for p in (data.get("photos") or [])),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "user_ratings_total": self.user_ratings_total,
            "price_level": self.price_level,
            "vicinity": self.vicinity,
            "geometry": {"location": {"lat": self.lat, "lng": self.lng}},
            "photos": list(self.photos),
            "types": list(self.types),
        }
        if self.open_now is not None:
            payload["opening_hours"] = {"open_now": self.open_now}
        return payload


@dataclass(frozen=True)
class FilterState:
    radius_km: float = 5.0
    budget: Optional[Budget] = None
    duration: Optional[Duration] = None  # advisory only
    mood: Optional[Mood] = None  # advisory, forwarded to idea generation
    indoor: Optional[bool] = None  # True=indoor, False=outdoor, None=any

    def __post_init__(self) -> None:
        if not self.radius_km or self.radius_km <= 0:
            raise ValueError("radius_km must be positive")

    @property
    def radius_meters(self) -> int:
        return int(round(self.radius_km * 1000))

    @classmethod
    def from_preferences(cls, prefs: Optional["UserPreferences"]) -> "FilterState":
        if prefs is None:
            return cls()
        return cls(radius_km=prefs.radius, budget=prefs.default_budget, mood=prefs.default_mood)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radiusKm": self.radius_km,
            "budget": self.budget.value if self.budget else None,
            "duration": self.duration.value if self.duration else None,
            "mood": self.mood.value if self.mood else None,
            "indoor": self.indoor,
        }


@dataclass(frozen=True)
class Idea:
    title: str
    description: str
    place_ids: Tuple[str, ...]
    estimated_cost: Optional[Budget] = None
    estimated_duration: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Idea":
        ids = data.get("placeIds") or []
        if isinstance(ids, str):
            ids = [ids]
        elif not isinstance(ids, (list, tuple)):
            ids = []
        duration = data.get("duration") or data.get("estimatedDuration")
        return cls(
            title=str(data.get("title") or "").strip(),
            description=str(data.get("description") or "").strip(),
            place_ids=tuple(str(i) for i in ids if i),
            estimated_cost=parse_enum(Budget, data.get("estimatedCost") or data.get("estimatedBudget")),
            estimated_duration=str(duration) if duration else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "placeIds": list(self.place_ids),
            "estimatedCost": self.estimated_cost.value if self.estimated_cost else None,
            "duration": self.estimated_duration,
        }


@dataclass
class Memory:
    id: str
    date: str  # ISO-8601 creation time
    title: str
    description: str
    place_ids: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    notes: Optional[str] = None

    @classmethod
    def from_idea(cls, idea: Idea, notes: Optional[str] = None) -> "Memory":
        return cls(
            id=uuid.uuid4().hex,
            date=_now_iso(),
            title=idea.title,
            description=idea.description,
            place_ids=list(idea.place_ids),
            notes=notes,
        )

    @classmethod
    def from_place(cls, place: Place, notes: Optional[str] = None) -> "Memory":
        return cls(
            id=uuid.uuid4().hex,
            date=_now_iso(),
            title=place.name,
            description=place.vicinity or "",
            place_ids=[place.id],
            notes=notes,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Memory":
        rating = data.get("rating")
        return cls(
            id=str(data["id"]),
            date=str(data.get("date") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            place_ids=[str(i) for i in (data.get("placeIds") or [])],
            rating=float(rating) if isinstance(rating, (int, float)) else None,
            notes=data.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "title": self.title,
            "description": self.description,
            "placeIds": list(self.place_ids),
        }
        if self.rating is not None:
            out["rating"] = self.rating
        if self.notes:
            out["notes"] = self.notes
        return out


@dataclass
class Favorite:
    id: str
    title: str
    idea: Optional[Idea] = None
    place: Optional[Place] = None

    @classmethod
    def from_idea(cls, idea: Idea) -> "Favorite":
        return cls(id=uuid.uuid4().hex, title=idea.title, idea=idea)

    @classmethod
    def from_place(cls, place: Place) -> "Favorite":
        return cls(id=place.id, title=place.name, place=place)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Favorite":
        idea = data.get("idea")
        place = data.get("place")
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            idea=Idea.from_payload(idea) if isinstance(idea, dict) else None,
            place=Place.from_payload(place) if isinstance(place, dict) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "title": self.title}
        if self.idea is not None:
            out["idea"] = self.idea.to_payload()
        if self.place is not None:
            out["place"] = self.place.to_payload()
        return out


@dataclass
class UserPreferences:
    radius: float = 5.0  # km
    default_mood: Optional[Mood] = None
    default_budget: Optional[Budget] = None
    use_miles: bool = False
    weather_enabled: bool = True
    default_categories: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferences":
        radius = data.get("radius")
        weather = data.get("weatherEnabled")
        return cls(
            radius=float(radius) if isinstance(radius, (int, float)) and radius > 0 else 5.0,
            default_mood=parse_enum(Mood, data.get("defaultMood")),
            default_budget=parse_enum(Budget, data.get("defaultBudget")),
            use_miles=bool(data.get("useMiles")),
            weather_enabled=True if weather is None else bool(weather),
            default_categories=[str(c) for c in (data.get("defaultCategories") or [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius": self.radius,
            "defaultMood": self.default_mood.value if self.default_mood else None,
            "defaultBudget": self.default_budget.value if self.default_budget else None,
            "useMiles": self.use_miles,
            "weatherEnabled": self.weather_enabled,
            "defaultCategories": list(self.default_categories),
        }
