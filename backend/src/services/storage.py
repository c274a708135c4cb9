"""Local persisted state: memories, favorites and preferences.

Each family lives under one constant key as a JSON string. Reads fall
back to the family default and writes are best-effort: failures are
logged, never raised to the caller.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from loguru import logger

from models import Favorite, Idea, Memory, Place, UserPreferences


T = TypeVar("T")


KEYS = {
    "memories": "@date_app_memories",
    "preferences": "@date_app_preferences",
    "favorites": "@date_app_favorites",
}


class KeyValueStore(ABC):
    @abstractmethod
    def get_item(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None: ...


class InMemoryStore(KeyValueStore):
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """All keys in one JSON object on disk, rewritten atomically."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class StorageService:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _read_list(self, key: str) -> list:
        raw = self.store.get_item(key)
        if raw is None:
            return []
        data = json.loads(raw)
        return data if isinstance(data, list) else []

    def _read_records(self, key: str, convert: Callable[[Dict[str, Any]], T]) -> List[T]:
        try:
            entries = self._read_list(key)
        except Exception:
            logger.exception("error reading {}", key)
            return []
        records: List[T] = []
        for entry in entries:
            try:
                records.append(convert(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("skipping unreadable record in {}: {!r}", key, exc)
        return records

    # Memories
    def get_memories(self) -> List[Memory]:
        return self._read_records(KEYS["memories"], Memory.from_dict)

    def add_memory(self, memory: Memory) -> None:
        try:
            existing = self._read_list(KEYS["memories"])
            self.store.set_item(KEYS["memories"], json.dumps([memory.to_dict(), *existing], ensure_ascii=False))
        except Exception:
            logger.exception("error saving memory {}", memory.id)

    def record_idea(self, idea: Idea, notes: Optional[str] = None) -> Memory:
        memory = Memory.from_idea(idea, notes=notes)
        self.add_memory(memory)
        return memory

    def record_place(self, place: Place, notes: Optional[str] = None) -> Memory:
        memory = Memory.from_place(place, notes=notes)
        self.add_memory(memory)
        return memory

    # Favorites
    def get_favorites(self) -> List[Favorite]:
        return self._read_records(KEYS["favorites"], Favorite.from_dict)

    def add_favorite(self, favorite: Favorite) -> None:
        try:
            # saving the same id again moves it to the front
            existing = [f for f in self._read_list(KEYS["favorites"]) if not (isinstance(f, dict) and f.get("id") == favorite.id)]
            self.store.set_item(KEYS["favorites"], json.dumps([favorite.to_dict(), *existing], ensure_ascii=False))
        except Exception:
            logger.exception("error saving favorite {}", favorite.id)

    # Preferences
    def get_preferences(self) -> Optional[UserPreferences]:
        try:
            raw = self.store.get_item(KEYS["preferences"])
            if raw is None:
                return None
            return UserPreferences.from_dict(json.loads(raw))
        except Exception:
            logger.exception("error reading preferences")
            return None

    def save_preferences(self, prefs: UserPreferences) -> None:
        try:
            self.store.set_item(KEYS["preferences"], json.dumps(prefs.to_dict(), ensure_ascii=False))
        except Exception:
            logger.exception("error saving preferences")
