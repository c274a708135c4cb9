from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from config import Configuration
from errors import ConfigurationError, DateIdeasError, MalformedResponseError
from services.ideas import parse_ideas_text
from services.providers import GooglePlacesClient, clamp_radius, write_ideas_text


PLACES_CACHE_CONTROL = "s-maxage=60, stale-while-revalidate=120"
IDEAS_CACHE_CONTROL = "s-maxage=30, stale-while-revalidate=60"


app = FastAPI(title="Date Ideas Proxy")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def _error(status: int, error: str, details: Any = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


@app.get("/healthz")
def healthz() -> dict:
    cfg = Configuration.from_env()
    logger.info("cfg: {}", cfg.log_summary())
    return {"status": "ok"}


@app.options("/places")
@app.options("/ideas")
def preflight() -> PlainTextResponse:
    return PlainTextResponse("OK")


@app.get("/places")
def places(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    type: str = "restaurant",
    keyword: Optional[str] = None,
):
    if not lat or not lng:
        return _error(400, "Missing lat/lng parameters")
    try:
        lat_f, lng_f = float(lat), float(lng)
    except ValueError:
        return _error(400, "Invalid lat/lng parameters")

    cfg = Configuration.from_env()
    try:
        cfg.require_google_places()
    except ConfigurationError as exc:
        logger.error("places proxy misconfigured: {}", exc)
        return _error(500, "Server configuration error")

    try:
        results = GooglePlacesClient(cfg).nearby_search(
            lat_f,
            lng_f,
            radius=clamp_radius(radius if radius is not None else 5000),
            place_type=type,
            keyword=keyword,
        )
    except DateIdeasError as exc:
        logger.error("places proxy error: {}", exc)
        return _error(500, "Failed to fetch places", str(exc))

    return JSONResponse(content={"places": results}, headers={"Cache-Control": PLACES_CACHE_CONTROL})


@app.post("/ideas")
async def ideas(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = {}
    body = body if isinstance(body, dict) else {}
    candidates: List[Dict[str, Any]] = body.get("places") or []
    filters = body.get("filters") or {}

    if not isinstance(candidates, list) or not candidates:
        return _error(400, "Missing places data")
    if not all(isinstance(p, dict) for p in candidates):
        return _error(400, "Invalid places data", "each place must be an object")
    if not isinstance(filters, dict):
        return _error(400, "Invalid filters data")

    cfg = Configuration.from_env()
    try:
        cfg.require_llm()
    except ConfigurationError as exc:
        logger.error("ideas proxy misconfigured: {}", exc)
        return _error(500, "Server configuration error")

    try:
        raw = await asyncio.to_thread(write_ideas_text, cfg, candidates, filters)
    except DateIdeasError as exc:
        logger.error("ideas proxy error: {}", exc)
        return _error(500, "Failed to generate ideas", str(exc))

    try:
        parsed = parse_ideas_text(raw)
    except MalformedResponseError as exc:
        logger.error("failed to parse AI response ({}); raw: {}", exc, raw)
        return _error(502, f"Failed to parse AI response: {exc}", raw)

    return JSONResponse(content={"ideas": parsed}, headers={"Cache-Control": IDEAS_CACHE_CONTROL})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8010, reload=True)
