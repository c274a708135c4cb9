from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from config import Configuration
from errors import MalformedResponseError, NetworkError, UpstreamProviderError
from models import Budget, Duration, FilterState, Place
from services.ideas import IdeaGenerator, build_mock_ideas, parse_ideas_text, to_ideas
from services.mock_data import SEED_PLACES


LIVE_URL = "https://dates.example.test/api"


def _response(status: int = 200, payload=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = payload
    resp.text = text or json.dumps(payload)
    return resp


def _live_generator(resp: MagicMock | None = None, exc: Exception | None = None) -> IdeaGenerator:
    gen = IdeaGenerator(Configuration(api_url=LIVE_URL))
    gen.session = MagicMock()
    if exc is not None:
        gen.session.post.side_effect = exc
    else:
        gen.session.post.return_value = resp
    return gen


def _seed(*ids: str) -> list[Place]:
    by_id = {p.id: p for p in SEED_PLACES}
    return [by_id[i] for i in ids]


# --- text recovery ---------------------------------------------------------

def test_extracts_array_from_surrounding_commentary() -> None:
    assert parse_ideas_text('Sure! [{"title":"A"}] Hope that helps!') == [{"title": "A"}]


def test_strips_code_fences() -> None:
    raw = '```json\n[{"title": "A", "placeIds": ["x"]}]\n```'
    assert parse_ideas_text(raw) == [{"title": "A", "placeIds": ["x"]}]


def test_unrecoverable_text_raises_with_raw_attached() -> None:
    with pytest.raises(MalformedResponseError) as info:
        parse_ideas_text("I cannot help with that.")
    assert info.value.raw == "I cannot help with that."


def test_non_array_json_is_unexpected_shape() -> None:
    with pytest.raises(MalformedResponseError, match="unexpected response shape"):
        parse_ideas_text('{"ideas": []}')


def test_to_ideas_keeps_only_known_place_ids() -> None:
    places = _seed("ber-1", "ber-6")
    items = [
        {"title": "Good", "description": "d", "placeIds": ["ber-1", "nope", "ber-6"], "estimatedCost": "$$", "duration": "2h"},
        {"title": "Ghost", "placeIds": ["nope"]},
        "not a dict",
    ]
    ideas = to_ideas(items, places)
    assert len(ideas) == 1
    assert ideas[0].place_ids == ("ber-1", "ber-6")
    assert ideas[0].estimated_cost is Budget.MEDIUM
    assert ideas[0].estimated_duration == "2h"


# --- offline heuristic -----------------------------------------------------

def test_mock_ideas_cover_stroll_culture_and_outing() -> None:
    places = _seed("ber-1", "ber-2", "ber-3", "ber-5", "ber-7")
    ideas = build_mock_ideas(places, FilterState())
    titles = [i.title for i in ideas]
    assert titles[0] == "Dessert & Stroll"
    assert ideas[0].place_ids == ("ber-1", "ber-2")
    assert titles[1] == "Explore Neues Museum"
    assert titles[2] == "Night Out at Lucky Strike Lanes"


def test_mock_ideas_pad_with_visits_in_input_order() -> None:
    places = _seed("ber-4", "ber-9", "ber-7")
    ideas = build_mock_ideas(places, FilterState())
    assert [i.place_ids for i in ideas] == [("ber-4",), ("ber-9",), ("ber-7",)]
    assert all(i.title.startswith("Visit ") for i in ideas)


def test_mock_ideas_reference_only_input_ids() -> None:
    for n in range(1, len(SEED_PLACES) + 1):
        places = list(SEED_PLACES[:n])
        ids = {p.id for p in places}
        ideas = build_mock_ideas(places, FilterState())
        assert 1 <= len(ideas) <= 5
        for idea in ideas:
            assert set(idea.place_ids) <= ids


def test_mock_ideas_use_filters_for_cost_and_duration() -> None:
    places = _seed("ber-4")  # no price level
    ideas = build_mock_ideas(places, FilterState(budget=Budget.HIGH, duration=Duration.FULL_DAY))
    assert ideas[0].estimated_cost is Budget.HIGH
    assert ideas[0].estimated_duration == "Full Day"


def test_mock_mode_never_raises() -> None:
    gen = IdeaGenerator(Configuration(offline_mode=True))
    with patch("services.ideas.build_mock_ideas", side_effect=RuntimeError("boom")):
        assert gen.generate_ideas(_seed("ber-1"), FilterState()) == ()


def test_empty_input_gives_no_ideas() -> None:
    gen = IdeaGenerator(Configuration(offline_mode=True))
    assert gen.generate_ideas([], FilterState()) == ()


# --- live ------------------------------------------------------------------

def test_live_ideas_posts_first_eight_places() -> None:
    places = list(SEED_PLACES)
    payload = {"ideas": [{"title": "A", "description": "d", "placeIds": ["ber-1"], "estimatedCost": "$", "duration": "1h"}]}
    gen = _live_generator(_response(payload=payload))
    ideas = gen.generate_ideas(places, FilterState(budget=Budget.LOW))
    assert [i.title for i in ideas] == ["A"]

    args, kwargs = gen.session.post.call_args
    assert args[0] == f"{LIVE_URL}/ideas"
    assert len(kwargs["json"]["places"]) == 8
    assert kwargs["json"]["filters"]["budget"] == "$"


def test_live_cache_hit_returns_same_result() -> None:
    payload = {"ideas": [{"title": "A", "placeIds": ["ber-1"]}]}
    gen = _live_generator(_response(payload=payload))
    places = _seed("ber-1", "ber-2")
    first = gen.generate_ideas(places, FilterState())
    second = gen.generate_ideas(places, FilterState())
    assert second is first
    assert gen.session.post.call_count == 1


def test_live_text_payload_is_recovered() -> None:
    payload = {"ideas": 'Sure! [{"title":"A","placeIds":["ber-1"]}] Hope that helps!'}
    gen = _live_generator(_response(payload=payload))
    ideas = gen.generate_ideas(_seed("ber-1"), FilterState())
    assert ideas[0].title == "A"


def test_live_502_becomes_malformed_response_with_raw() -> None:
    payload = {"error": "Failed to parse AI response", "details": "I cannot help with that."}
    gen = _live_generator(_response(502, payload=payload))
    with pytest.raises(MalformedResponseError) as info:
        gen.generate_ideas(_seed("ber-1"), FilterState())
    assert info.value.raw == "I cannot help with that."


def test_live_unexpected_shape() -> None:
    gen = _live_generator(_response(payload={"ideas": {"title": "A"}}))
    with pytest.raises(MalformedResponseError, match="unexpected response shape"):
        gen.generate_ideas(_seed("ber-1"), FilterState())


def test_live_network_and_upstream_failures() -> None:
    gen = _live_generator(exc=requests.Timeout("slow"))
    with pytest.raises(NetworkError):
        gen.generate_ideas(_seed("ber-1"), FilterState())

    gen = _live_generator(_response(500, payload={"error": "Server configuration error"}))
    with pytest.raises(UpstreamProviderError) as info:
        gen.generate_ideas(_seed("ber-1"), FilterState())
    assert info.value.status_code == 500


def test_live_failures_are_not_cached() -> None:
    gen = _live_generator(exc=requests.ConnectionError("down"))
    for _ in range(2):
        with pytest.raises(NetworkError):
            gen.generate_ideas(_seed("ber-1"), FilterState())
    assert gen.session.post.call_count == 2


def test_non_list_place_ids_are_treated_as_missing() -> None:
    items = [
        {"title": "Number", "placeIds": 5},
        {"title": "Flag", "placeIds": True},
        {"title": "Map", "placeIds": {"id": "ber-1"}},
        {"title": "Good", "placeIds": "ber-1"},
    ]
    ideas = to_ideas(items, _seed("ber-1"))
    assert [i.title for i in ideas] == ["Good"]


def test_live_non_list_place_ids_raise_typed_error() -> None:
    gen = _live_generator(_response(payload={"ideas": [{"title": "A", "placeIds": 5}]}))
    with pytest.raises(MalformedResponseError):
        gen.generate_ideas(_seed("ber-1"), FilterState())
