"""Upstream calls made by the proxies: Google Places and the idea LLM."""

from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional, Union

import requests
from google import genai
from google.genai import types
from hello_agents import HelloAgentsLLM, ToolAwareSimpleAgent
from loguru import logger

from config import Configuration
from errors import NetworkError, UpstreamProviderError
from utils import strip_thinking_tokens


MIN_RADIUS_M = 500
MAX_RADIUS_M = 50000
DEFAULT_RADIUS_M = 5000
MAX_RESULTS = 40
MAX_PHOTOS = 1
MAX_PLACES_TO_SEND = 8

IDEAS_SYSTEM_PROMPT = (
    "You are a helpful assistant that returns a small JSON array (3-5 items) of creative, concise date ideas. "
    "Each item must be a JSON object with: title, description (1-2 sentences), placeIds (array of place ids), "
    "estimatedCost ($/$$/$$$), duration (short text). Return ONLY valid JSON (no markdown, no explanation)."
)


def clamp_radius(value: Any) -> int:
    try:
        r = float(value)
    except (TypeError, ValueError):
        return DEFAULT_RADIUS_M
    if not math.isfinite(r) or r <= 0:
        return DEFAULT_RADIUS_M
    return min(max(MIN_RADIUS_M, int(round(r))), MAX_RADIUS_M)


def places_for_prompt(places: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    subset: list[dict] = []
    for p in places[:MAX_PLACES_TO_SEND]:
        price = p.get("price_level")
        rating = p.get("rating")
        subset.append(
            {
                "id": p.get("place_id") or p.get("id"),
                "name": p.get("name"),
                "types": p.get("types") or [],
                "price_level": price if isinstance(price, (int, float)) else None,
                "rating": rating if isinstance(rating, (int, float)) else None,
            }
        )
    return subset


class GooglePlacesClient:
    def __init__(self, cfg: Configuration) -> None:
        self.cfg = cfg
        self.base = cfg.google_places_base_url.rstrip("/")
        self.session = requests.Session()

    def nearby_search(
        self,
        lat: float,
        lng: float,
        *,
        radius: int,
        place_type: str = "restaurant",
        keyword: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "location": f"{lat},{lng}",
            "radius": radius,
            "type": place_type,
            "key": self.cfg.google_places_api_key,
        }
        if keyword:
            params["keyword"] = keyword
        try:
            resp = self.session.get(
                f"{self.base}/nearbysearch/json", params=params, timeout=self.cfg.request_timeout
            )
        except requests.RequestException as exc:
            raise NetworkError(f"request error: {exc}") from exc

        if not resp.ok:
            raise UpstreamProviderError(f"upstream {resp.status_code}: {resp.text[:300]}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamProviderError("invalid json response") from exc

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.error("Google Places error status={} message={}", status, data.get("error_message"))
            raise UpstreamProviderError(data.get("error_message") or f"Google Places API error ({status})")
        return [self._slim(p) for p in (data.get("results") or [])[:MAX_RESULTS]]

    @staticmethod
    def _slim(place: Dict[str, Any]) -> Dict[str, Any]:
        photos = place.get("photos") or []
        return {
            "id": place.get("place_id"),
            "name": place.get("name"),
            "rating": place.get("rating"),
            "user_ratings_total": place.get("user_ratings_total"),
            "price_level": place.get("price_level"),
            "vicinity": place.get("vicinity"),
            "geometry": place.get("geometry"),
            "photos": [p.get("photo_reference") for p in photos[:MAX_PHOTOS] if isinstance(p, dict)],
            "types": place.get("types") or [],
            "opening_hours": place.get("opening_hours"),
        }


def _init_llm(cfg: Configuration) -> tuple[Union[genai.Client, HelloAgentsLLM], str]:
    """Gemini when LLM_PROVIDER=google, otherwise an OpenAI-compatible client."""
    provider = (cfg.llm_provider or "").lower()
    if provider == "google":
        model_id = cfg.llm_model_id or "gemini-2.0-flash"
        logger.debug("idea writer using Gemini model: {}", model_id)
        return genai.Client(api_key=cfg.llm_api_key), "gemini"

    kw: Dict[str, Any] = {"temperature": cfg.llm_temperature, "model": cfg.llm_model_id or "gpt-3.5-turbo"}
    if cfg.llm_provider:
        kw["provider"] = cfg.llm_provider
    if cfg.llm_base_url:
        kw["base_url"] = cfg.llm_base_url
    if cfg.llm_api_key:
        kw["api_key"] = cfg.llm_api_key
    return HelloAgentsLLM(**kw), "openai"


def write_ideas_text(cfg: Configuration, places: List[Dict[str, Any]], filters: Dict[str, Any]) -> str:
    """Ask the model for ideas and return its raw text output."""
    prompt = (
        f"Filters: {json.dumps(filters or {}, ensure_ascii=False)}\n"
        f"Available Places: {json.dumps(places_for_prompt(places), ensure_ascii=False)}"
    )
    client, kind = _init_llm(cfg)
    try:
        if kind == "gemini":
            response = client.models.generate_content(
                model=cfg.llm_model_id or "gemini-2.0-flash",
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=IDEAS_SYSTEM_PROMPT,
                    temperature=cfg.llm_temperature,
                ),
            )
            raw = response.text or ""
        else:
            agent = ToolAwareSimpleAgent(
                name="IdeaWriter",
                llm=client,
                system_prompt=IDEAS_SYSTEM_PROMPT,
                enable_tool_calling=False,
            )
            raw = agent.run(prompt)
            agent.clear_history()
    except Exception as exc:
        raise UpstreamProviderError(f"LLM call failed: {exc}") from exc
    return strip_thinking_tokens(raw or "")
