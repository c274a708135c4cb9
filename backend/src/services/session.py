from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Generic, Optional, Tuple, TypeVar

from loguru import logger

from config import Configuration
from errors import DateIdeasError, PermissionDenied
from models import Coordinate, Favorite, FilterState, Idea, Memory, Place
from services.config_resolver import ConfigResolver
from services.filters import apply_filters
from services.ideas import IdeaGenerator
from services.location import LocationProvider
from services.mock_data import FALLBACK_IDEAS
from services.places import PlaceFetcher
from services.storage import StorageService


T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Result of one user action: a value, a typed failure, or both when
    fallback data replaced a failed call."""

    value: Optional[T] = None
    error: Optional[DateIdeasError] = None
    fallback: bool = False
    seq: int = 0
    stale: bool = False  # a newer request of the same action was issued meanwhile

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None


class RequestSequencer:
    """Monotonic request numbers per action; only the latest result applies."""

    def __init__(self) -> None:
        self._latest: Dict[str, int] = {}

    def issue(self, action: str) -> int:
        seq = self._latest.get(action, 0) + 1
        self._latest[action] = seq
        return seq

    def is_latest(self, action: str, seq: int) -> bool:
        return self._latest.get(action) == seq


class DiscoverySession:
    """Location -> fetch -> filter -> ideas, plus the save actions.

    Owns one PlaceFetcher and one IdeaGenerator so their caches live for
    the session and nowhere else.
    """

    def __init__(
        self,
        cfg: Configuration,
        location: LocationProvider,
        storage: StorageService,
        *,
        fetcher: Optional[PlaceFetcher] = None,
        generator: Optional[IdeaGenerator] = None,
    ) -> None:
        self.cfg = cfg
        self.resolver = ConfigResolver(cfg)
        self.location = location
        self.storage = storage
        self.fetcher = fetcher or PlaceFetcher(cfg, resolver=self.resolver)
        self.generator = generator or IdeaGenerator(cfg, resolver=self.resolver)
        self.sequencer = RequestSequencer()
        self.places: Tuple[Place, ...] = ()
        self.ideas: Tuple[Idea, ...] = ()
        # set on the first denial; actions fail fast until permission_resolved()
        self.permission_denied: Optional[PermissionDenied] = None

    async def default_filters(self) -> FilterState:
        prefs = await asyncio.to_thread(self.storage.get_preferences)
        return FilterState.from_preferences(prefs)

    def permission_resolved(self) -> None:
        """Allow the next action to ask the location provider again."""
        self.permission_denied = None

    async def _position(self) -> Coordinate:
        if self.permission_denied is not None:
            raise PermissionDenied(str(self.permission_denied))
        try:
            return await self.location.current_position()
        except PermissionDenied as exc:
            self.permission_denied = exc
            raise

    async def _candidates(self, category: Optional[str], filters: FilterState) -> Tuple[Place, ...]:
        coord = await self._position()
        places = await asyncio.to_thread(
            self.fetcher.fetch_places, coord.latitude, coord.longitude, filters.radius_meters, category
        )
        return apply_filters(places, filters)

    async def search(self, category: Optional[str] = None, filters: Optional[FilterState] = None) -> Outcome[Tuple[Place, ...]]:
        seq = self.sequencer.issue("search")
        filters = filters or await self.default_filters()
        try:
            places = await self._candidates(category, filters)
        except DateIdeasError as exc:
            logger.warning("search failed ({}): {}", exc.kind, exc)
            return Outcome(error=exc, seq=seq, stale=not self.sequencer.is_latest("search", seq))

        if not self.sequencer.is_latest("search", seq):
            logger.debug("discarding stale search result seq={}", seq)
            return Outcome(value=places, seq=seq, stale=True)
        self.places = places
        return Outcome(value=places, seq=seq)

    async def generate(self, filters: Optional[FilterState] = None, category: Optional[str] = None) -> Outcome[Tuple[Idea, ...]]:
        seq = self.sequencer.issue("ideas")
        filters = filters or await self.default_filters()
        try:
            places = await self._candidates(category, filters)
        except DateIdeasError as exc:
            logger.warning("idea search failed ({}): {}", exc.kind, exc)
            return Outcome(error=exc, seq=seq, stale=not self.sequencer.is_latest("ideas", seq))

        try:
            ideas = await asyncio.to_thread(self.generator.generate_ideas, places, filters)
            outcome: Outcome[Tuple[Idea, ...]] = Outcome(value=ideas, seq=seq)
        except DateIdeasError as exc:
            logger.warning("idea generation failed ({}); showing fallback suggestions: {}", exc.kind, exc)
            outcome = Outcome(value=FALLBACK_IDEAS, error=exc, fallback=True, seq=seq)

        if not self.sequencer.is_latest("ideas", seq):
            outcome.stale = True
            return outcome
        self.ideas = outcome.value or ()
        return outcome

    async def save_favorite(self, item: Idea | Place) -> Favorite:
        favorite = Favorite.from_idea(item) if isinstance(item, Idea) else Favorite.from_place(item)
        await asyncio.to_thread(self.storage.add_favorite, favorite)
        return favorite

    async def mark_done(self, item: Idea | Place, notes: Optional[str] = None) -> Memory:
        if isinstance(item, Idea):
            return await asyncio.to_thread(self.storage.record_idea, item, notes)
        return await asyncio.to_thread(self.storage.record_place, item, notes)
