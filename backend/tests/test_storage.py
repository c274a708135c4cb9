from __future__ import annotations

import json

from models import Budget, Favorite, Idea, Memory, Mood, UserPreferences
from services.mock_data import SEED_PLACES
from services.storage import KEYS, InMemoryStore, JsonFileStore, KeyValueStore, StorageService


class BrokenStore(KeyValueStore):
    def get_item(self, key):
        raise OSError("disk gone")

    def set_item(self, key, value):
        raise OSError("disk gone")


def _memory(mid: str) -> Memory:
    return Memory(id=mid, date="2026-01-01T00:00:00+00:00", title=mid, description="", place_ids=["ber-1"])


def test_memories_are_newest_first_and_order_preserved() -> None:
    storage = StorageService(InMemoryStore())
    for mid in ("a", "b", "c"):
        storage.add_memory(_memory(mid))
    assert [m.id for m in storage.get_memories()] == ["c", "b", "a"]


def test_memory_survives_reload_from_disk(tmp_path) -> None:
    path = tmp_path / "state" / "storage.json"
    StorageService(JsonFileStore(path)).add_memory(_memory("old"))
    idea = Idea(title="Dessert & Stroll", description="sweet", place_ids=("ber-7", "ber-6"))
    saved = StorageService(JsonFileStore(path)).record_idea(idea)

    memories = StorageService(JsonFileStore(path)).get_memories()
    assert [m.id for m in memories] == [saved.id, "old"]
    assert memories[0].place_ids == ["ber-7", "ber-6"]
    assert json.loads(path.read_text(encoding="utf-8"))[KEYS["memories"]]


def test_record_place_uses_vicinity() -> None:
    storage = StorageService(InMemoryStore())
    memory = storage.record_place(SEED_PLACES[0], notes="lovely")
    assert memory.title == "Café Himmel"
    assert memory.description == SEED_PLACES[0].vicinity
    assert storage.get_memories()[0].notes == "lovely"


def test_favorites_hold_ideas_and_places() -> None:
    storage = StorageService(InMemoryStore())
    idea = Idea(title="A", description="d", place_ids=("ber-1",), estimated_cost=Budget.LOW)
    storage.add_favorite(Favorite.from_idea(idea))
    storage.add_favorite(Favorite.from_place(SEED_PLACES[2]))
    favorites = storage.get_favorites()
    assert favorites[0].place == SEED_PLACES[2]
    assert favorites[1].idea == idea


def test_preferences_overwritten_wholesale() -> None:
    storage = StorageService(InMemoryStore())
    assert storage.get_preferences() is None
    storage.save_preferences(UserPreferences(radius=10, default_mood=Mood.COZY, default_budget=Budget.MEDIUM))
    storage.save_preferences(UserPreferences(radius=20, use_miles=True))
    prefs = storage.get_preferences()
    assert prefs == UserPreferences(radius=20, use_miles=True)


def test_preferences_defaults_for_missing_fields() -> None:
    store = InMemoryStore()
    store.set_item(KEYS["preferences"], json.dumps({"radius": 5, "defaultMood": "Nope"}))
    prefs = StorageService(store).get_preferences()
    assert prefs.weather_enabled is True
    assert prefs.default_mood is None


def test_storage_failures_are_swallowed() -> None:
    storage = StorageService(BrokenStore())
    storage.add_memory(_memory("x"))
    storage.save_preferences(UserPreferences())
    assert storage.get_memories() == []
    assert storage.get_favorites() == []
    assert storage.get_preferences() is None


def test_corrupt_json_reads_as_empty() -> None:
    store = InMemoryStore()
    store.set_item(KEYS["memories"], "{not json")
    assert StorageService(store).get_memories() == []


def test_one_corrupt_memory_does_not_hide_the_rest() -> None:
    store = InMemoryStore()
    good = _memory("good").to_dict()
    store.set_item(KEYS["memories"], json.dumps([{"title": "no id"}, good, "junk"]))
    assert [m.id for m in StorageService(store).get_memories()] == ["good"]


def test_favorite_place_without_location_is_skipped() -> None:
    store = InMemoryStore()
    broken = {"id": "x", "title": "Nowhere", "place": {"id": "x", "name": "Nowhere"}}
    kept = Favorite.from_place(SEED_PLACES[0]).to_dict()
    store.set_item(KEYS["favorites"], json.dumps([broken, kept]))
    assert [f.id for f in StorageService(store).get_favorites()] == [SEED_PLACES[0].id]


def test_favoriting_a_place_twice_keeps_one_entry() -> None:
    storage = StorageService(InMemoryStore())
    storage.add_favorite(Favorite.from_place(SEED_PLACES[0]))
    storage.add_favorite(Favorite.from_place(SEED_PLACES[1]))
    storage.add_favorite(Favorite.from_place(SEED_PLACES[0]))
    assert [f.id for f in storage.get_favorites()] == [SEED_PLACES[0].id, SEED_PLACES[1].id]
