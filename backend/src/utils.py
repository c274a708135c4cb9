"""Utility helpers for the date ideas pipeline."""

from __future__ import annotations

import math
import re
import urllib.parse
from typing import Optional


KM_TO_MILES = 0.621371

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?|\n?```", re.IGNORECASE)


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    if not value:
        return "unset"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"


def strip_thinking_tokens(text: str) -> str:
    """Remove <think>...</think> blocks if present."""
    if not text:
        return text
    while True:
        start = text.find("<think>")
        if start == -1:
            break
        end = text.find("</think>", start)
        if end == -1:
            break
        text = text[:start] + text[end + len("</think>") :]
    return text


def strip_code_fences(text: str) -> str:
    """Drop ``` / ```json markers, keeping what was inside them."""
    if not text:
        return ""
    return _FENCE_RE.sub("", text)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers."""
    R = 6371.0
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return R * c


def format_distance(km: float, use_miles: bool = False) -> str:
    if use_miles:
        return f"{km * KM_TO_MILES:.1f} mi"
    return f"{km:.1f} km"


def price_label(level: Optional[int]) -> str:
    if level is None:
        return "—"
    return "$" * max(1, level)


def maps_url(name: str, vicinity: Optional[str] = None) -> str:
    q = urllib.parse.quote(f"{name} {vicinity or ''}".strip())
    return f"https://www.google.com/maps/search/?api=1&query={q}"
