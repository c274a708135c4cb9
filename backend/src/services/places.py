from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import requests
from loguru import logger

from config import Configuration
from errors import NetworkError, UpstreamProviderError
from models import Mode, Place
from services.cache import TTLCache, place_cache_key
from services.config_resolver import ConfigResolver
from services.mock_data import SEED_PLACES
from utils import haversine_km


POINT_OF_INTEREST = "point_of_interest"
MAX_RESULTS = 40
MAX_PHOTOS = 1

# UI category chip -> provider search type
CATEGORY_TYPES: Dict[str, str] = {
    "food": "restaurant",
    "culture": "museum",
    "walk": "park",
    "activity": "bowling_alley",
    "nightlife": "bar",
    "random": POINT_OF_INTEREST,
}

# provider search type -> tags that satisfy it in the local dataset
TYPE_FAMILIES: Dict[str, FrozenSet[str]] = {
    "restaurant": frozenset({"restaurant", "cafe", "bakery", "food", "dessert", "meal_takeaway", "ice_cream"}),
    "cafe": frozenset({"cafe", "bakery", "dessert"}),
    "museum": frozenset({"museum", "art_gallery"}),
    "art_gallery": frozenset({"art_gallery", "museum"}),
    "park": frozenset({"park", "natural_feature", "campground"}),
    "bowling_alley": frozenset({"bowling_alley", "amusement_park", "movie_theater"}),
    "bar": frozenset({"bar", "night_club"}),
    "tourist_attraction": frozenset({"tourist_attraction"}),
}


def resolve_place_type(category: Optional[str]) -> str:
    """Map a category chip (or a raw provider type) to a provider type token."""
    if not category:
        return POINT_OF_INTEREST
    key = category.strip().lower()
    if not key:
        return POINT_OF_INTEREST
    return CATEGORY_TYPES.get(key, key)


def type_matches(place_type: str, tags: Iterable[str]) -> bool:
    if place_type == POINT_OF_INTEREST:
        return True
    family = TYPE_FAMILIES.get(place_type, frozenset({place_type}))
    return any(t.lower() in family for t in tags)


def _bounded(places: Sequence[Place]) -> Tuple[Place, ...]:
    out: list[Place] = []
    for p in list(places)[:MAX_RESULTS]:
        if len(p.photos) > MAX_PHOTOS:
            p = replace(p, photos=p.photos[:MAX_PHOTOS])
        out.append(p)
    return tuple(out)


class PlaceFetcher:
    def __init__(
        self,
        cfg: Configuration,
        *,
        resolver: Optional[ConfigResolver] = None,
        cache: Optional[TTLCache[Tuple[Place, ...]]] = None,
        seed: Sequence[Place] = SEED_PLACES,
    ) -> None:
        self.cfg = cfg
        self.resolver = resolver or ConfigResolver(cfg)
        self.cache: TTLCache[Tuple[Place, ...]] = cache if cache is not None else TTLCache(cfg.cache_ttl_sec)
        self.seed = tuple(seed)
        self.session = requests.Session()
        # requests.Session is shared across to_thread workers; one call at a time
        self._http_lock = threading.Lock()

    def fetch_places(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        category: Optional[str] = None,
    ) -> Tuple[Place, ...]:
        place_type = resolve_place_type(category)
        key = place_cache_key(lat, lng, radius_m, place_type)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("place cache hit {}", key)
            return cached

        if self.resolver.mode() is Mode.MOCK:
            results = self._mock_places(lat, lng, radius_m, place_type)
        else:
            results = self._live_places(lat, lng, radius_m, place_type)

        # empty answers are cached too
        self.cache.put(key, results)
        logger.info("fetched {} places type={} radius_m={:.0f}", len(results), place_type, radius_m)
        return results

    def _mock_places(self, lat: float, lng: float, radius_m: float, place_type: str) -> Tuple[Place, ...]:
        radius_km = radius_m / 1000.0
        return tuple(
            p
            for p in self.seed
            if haversine_km(lat, lng, p.lat, p.lng) <= radius_km and type_matches(place_type, p.types)
        )

    def _live_places(self, lat: float, lng: float, radius_m: float, place_type: str) -> Tuple[Place, ...]:
        base = self.resolver.require_live()
        params = {"lat": lat, "lng": lng, "radius": int(round(radius_m)), "type": place_type}
        try:
            with self._http_lock:
                resp = self.session.get(
                    f"{base}/places",
                    params=params,
                    headers={"Accept": "application/json"},
                    timeout=self.cfg.request_timeout,
                )
        except requests.RequestException as exc:
            raise NetworkError(f"places request failed: {exc}") from exc

        if not resp.ok:
            raise UpstreamProviderError(
                f"places proxy {resp.status_code}: {_error_message(resp)}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamProviderError("places proxy returned invalid json", status_code=resp.status_code) from exc

        raw_places = payload.get("places") if isinstance(payload, dict) else None
        if not isinstance(raw_places, list):
            raise UpstreamProviderError("places proxy returned no places list", status_code=resp.status_code)
        return _bounded(_parse_places(raw_places))


def _parse_places(items: List[Any]) -> List[Place]:
    results: list[Place] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            place = Place.from_payload(item)
        except (TypeError, ValueError) as exc:
            logger.warning("skipping unusable place {}: {}", item.get("id"), exc)
            continue
        if not place.id:
            continue
        results.append(place)
    return results


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:300]
    if isinstance(body, dict):
        parts = [str(body[k]) for k in ("error", "details") if body.get(k)]
        if parts:
            return " - ".join(parts)
    return resp.text[:300]
