from __future__ import annotations

import json
import threading
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

import requests
from loguru import logger

from config import Configuration
from errors import MalformedResponseError, NetworkError, UpstreamProviderError
from models import Budget, FilterState, Idea, Mode, Place
from services.cache import TTLCache, idea_cache_key
from services.config_resolver import ConfigResolver
from utils import strip_code_fences


MAX_PLACES_TO_SEND = 8
MAX_IDEAS = 5
MIN_MOCK_IDEAS = 3
MAX_PLACES_PER_IDEA = 3


class Theme(str, Enum):
    FOOD = "food"
    WALK = "walk"
    CULTURE = "culture"
    ACTIVITY = "activity"


TAG_THEMES: Dict[str, Theme] = {
    "restaurant": Theme.FOOD,
    "cafe": Theme.FOOD,
    "bakery": Theme.FOOD,
    "food": Theme.FOOD,
    "dessert": Theme.FOOD,
    "ice_cream": Theme.FOOD,
    "meal_takeaway": Theme.FOOD,
    "park": Theme.WALK,
    "natural_feature": Theme.WALK,
    "campground": Theme.WALK,
    "museum": Theme.CULTURE,
    "art_gallery": Theme.CULTURE,
    "library": Theme.CULTURE,
    "bowling_alley": Theme.ACTIVITY,
    "movie_theater": Theme.ACTIVITY,
    "amusement_park": Theme.ACTIVITY,
    "bar": Theme.ACTIVITY,
    "night_club": Theme.ACTIVITY,
}

PRICE_TO_BUDGET: Dict[int, Budget] = {0: Budget.LOW, 1: Budget.LOW, 2: Budget.MEDIUM, 3: Budget.HIGH}


def place_themes(place: Place) -> FrozenSet[Theme]:
    return frozenset(TAG_THEMES[t.lower()] for t in place.types if t.lower() in TAG_THEMES)


def parse_ideas_text(raw: str) -> List[Any]:
    """Recover a JSON array from model output that may carry extra text.

    Raises MalformedResponseError (with ``raw`` attached) when nothing
    parseable is found or the result is not an array.
    """
    text = strip_code_fences(raw or "").strip()
    if not text.startswith("["):
        first, last = text.find("["), text.rfind("]")
        if first != -1 and last > first:
            text = text[first : last + 1]
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError("malformed AI response", raw=raw or "") from exc
    if not isinstance(data, list):
        raise MalformedResponseError("unexpected response shape", raw=raw or "")
    return data


def to_ideas(items: Sequence[Any], places: Sequence[Place]) -> Tuple[Idea, ...]:
    """Keep ideas that reference at least one candidate place.

    Unknown place ids are dropped; an idea left with none is discarded.
    """
    known = {p.id for p in places}
    ideas: list[Idea] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            idea = Idea.from_payload(item)
        except (TypeError, ValueError) as exc:
            logger.warning("dropping unreadable idea: {}", exc)
            continue
        ids = tuple(dict.fromkeys(i for i in idea.place_ids if i in known))[:MAX_PLACES_PER_IDEA]
        if not idea.title or not ids:
            logger.warning("dropping idea {!r}: no usable place ids", idea.title)
            continue
        ideas.append(
            Idea(
                title=idea.title,
                description=idea.description,
                place_ids=ids,
                estimated_cost=idea.estimated_cost,
                estimated_duration=idea.estimated_duration,
            )
        )
    return tuple(ideas[:MAX_IDEAS])


def _estimate_cost(chosen: Sequence[Place], filters: FilterState) -> Optional[Budget]:
    levels = [p.price_level for p in chosen if p.price_level is not None]
    if levels:
        return PRICE_TO_BUDGET.get(max(levels), Budget.HIGH)
    return filters.budget


def _duration(filters: FilterState, default: str) -> str:
    return filters.duration.value if filters.duration else default


def build_mock_ideas(places: Sequence[Place], filters: FilterState) -> Tuple[Idea, ...]:
    """Deterministic offline suggestions built from the candidate places."""
    used: set[str] = set()

    def pick(theme: Theme) -> Optional[Place]:
        for p in places:
            if p.id not in used and theme in place_themes(p):
                return p
        return None

    ideas: list[Idea] = []

    food = pick(Theme.FOOD)
    if food is not None:
        used.add(food.id)
        walk = pick(Theme.WALK)
        if walk is not None:
            used.add(walk.id)
            ideas.append(
                Idea(
                    title="Dessert & Stroll",
                    description=f"Grab something sweet at {food.name}, then take a slow walk through {walk.name}.",
                    place_ids=(food.id, walk.id),
                    estimated_cost=_estimate_cost((food, walk), filters),
                    estimated_duration=_duration(filters, "2-3 hours"),
                )
            )
        else:
            used.discard(food.id)

    culture = pick(Theme.CULTURE)
    if culture is not None:
        used.add(culture.id)
        ideas.append(
            Idea(
                title=f"Explore {culture.name}",
                description=f"Wander {culture.name} together and each pick a favourite piece.",
                place_ids=(culture.id,),
                estimated_cost=_estimate_cost((culture,), filters),
                estimated_duration=_duration(filters, "2 hours"),
            )
        )

    activity = pick(Theme.ACTIVITY)
    if activity is not None:
        used.add(activity.id)
        ideas.append(
            Idea(
                title=f"Night Out at {activity.name}",
                description=f"Keep it playful with an evening at {activity.name}.",
                place_ids=(activity.id,),
                estimated_cost=_estimate_cost((activity,), filters),
                estimated_duration=_duration(filters, "2-3 hours"),
            )
        )

    for p in places:
        if len(ideas) >= MIN_MOCK_IDEAS:
            break
        if p.id in used:
            continue
        used.add(p.id)
        ideas.append(
            Idea(
                title=f"Visit {p.name}",
                description=f"A simple outing to {p.name}" + (f" on {p.vicinity}." if p.vicinity else "."),
                place_ids=(p.id,),
                estimated_cost=_estimate_cost((p,), filters),
                estimated_duration=_duration(filters, "1-2 hours"),
            )
        )

    return tuple(ideas[:MAX_IDEAS])


class IdeaGenerator:
    def __init__(
        self,
        cfg: Configuration,
        *,
        resolver: Optional[ConfigResolver] = None,
        cache: Optional[TTLCache[Tuple[Idea, ...]]] = None,
    ) -> None:
        self.cfg = cfg
        self.resolver = resolver or ConfigResolver(cfg)
        self.cache: TTLCache[Tuple[Idea, ...]] = cache if cache is not None else TTLCache(cfg.cache_ttl_sec)
        self.session = requests.Session()
        self._http_lock = threading.Lock()

    def generate_ideas(self, places: Sequence[Place], filters: FilterState) -> Tuple[Idea, ...]:
        key = idea_cache_key(places, filters)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("idea cache hit")
            return cached

        if self.resolver.mode() is Mode.MOCK:
            ideas = self._mock_ideas(places, filters)
        else:
            ideas = self._live_ideas(places, filters)

        self.cache.put(key, ideas)
        return ideas

    def _mock_ideas(self, places: Sequence[Place], filters: FilterState) -> Tuple[Idea, ...]:
        try:
            return build_mock_ideas(places, filters)
        except Exception:
            # offline generation degrades to "no ideas"
            logger.exception("mock idea generation failed")
            return ()

    def _live_ideas(self, places: Sequence[Place], filters: FilterState) -> Tuple[Idea, ...]:
        if not places:
            logger.info("no candidate places; skipping idea request")
            return ()

        base = self.resolver.require_live()
        body = {
            "places": [p.to_payload() for p in list(places)[:MAX_PLACES_TO_SEND]],
            "filters": filters.to_dict(),
        }
        try:
            with self._http_lock:
                resp = self.session.post(f"{base}/ideas", json=body, timeout=self.cfg.request_timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"ideas request failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            if resp.ok:
                raise MalformedResponseError("malformed AI response", raw=resp.text)
            raise UpstreamProviderError(f"ideas proxy {resp.status_code}: {resp.text[:300]}", status_code=resp.status_code)

        if resp.status_code == 502 and isinstance(payload, dict) and "details" in payload:
            details = payload.get("details")
            raw = details if isinstance(details, str) else json.dumps(details)
            raise MalformedResponseError(str(payload.get("error") or "malformed AI response"), raw=raw)
        if not resp.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise UpstreamProviderError(
                f"ideas proxy {resp.status_code}: {message or resp.text[:300]}",
                status_code=resp.status_code,
            )

        items = payload.get("ideas") if isinstance(payload, dict) else None
        if isinstance(items, str):
            items = parse_ideas_text(items)
        if not isinstance(items, list):
            raise MalformedResponseError("unexpected response shape", raw=resp.text)

        ideas = to_ideas(items, places)
        if items and not ideas:
            raise MalformedResponseError("AI response referenced no candidate places", raw=resp.text)
        logger.info("generated {} ideas from {} places", len(ideas), len(places))
        return ideas
