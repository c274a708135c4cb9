from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from errors import ConfigurationError
from utils import mask_secret


PLACEHOLDER_API_URL = "https://your-vercel-project.vercel.app/api"


class Configuration(BaseModel):
    # Client side: where the proxies live
    api_url: Optional[str] = Field(default=PLACEHOLDER_API_URL)
    offline_mode: bool = Field(default=False)
    request_timeout: int = Field(default=15)
    cache_ttl_sec: float = Field(default=60.0)
    storage_path: str = Field(default=str(Path.home() / ".date_ideas" / "storage.json"))

    # Server side: held by the proxies only
    google_places_api_key: Optional[str] = Field(default=None)
    google_places_base_url: str = Field(default="https://maps.googleapis.com/maps/api/place")

    # LLM for the ideas proxy
    llm_provider: Optional[str] = Field(default=None)
    llm_api_key: Optional[str] = Field(default=None)
    llm_base_url: Optional[str] = Field(default=None)
    llm_model_id: Optional[str] = Field(default=None)
    llm_temperature: float = Field(default=0.7)

    @classmethod
    def from_env(cls, overrides: Optional[dict[str, Any]] = None) -> "Configuration":
        raw: dict[str, Any] = {}

        env_map = {
            "api_url": os.getenv("DATE_IDEAS_API_URL"),
            "offline_mode": os.getenv("DATE_IDEAS_OFFLINE"),
            "request_timeout": os.getenv("DATE_IDEAS_TIMEOUT"),
            "cache_ttl_sec": os.getenv("DATE_IDEAS_CACHE_TTL"),
            "storage_path": os.getenv("DATE_IDEAS_STORAGE_PATH"),
            "google_places_api_key": os.getenv("GOOGLE_PLACES_API_KEY"),
            "google_places_base_url": os.getenv("GOOGLE_PLACES_BASE_URL"),
            # LLM
            "llm_provider": os.getenv("LLM_PROVIDER"),
            "llm_api_key": os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
            "llm_base_url": os.getenv("LLM_BASE_URL"),
            "llm_model_id": os.getenv("LLM_MODEL_ID"),
            "llm_temperature": os.getenv("LLM_TEMPERATURE"),
        }

        bool_fields = {"offline_mode"}

        for k, v in env_map.items():
            if v is None:
                continue
            if k in bool_fields:
                raw[k] = str(v).lower() in {"1", "true", "yes", "on"}
            else:
                raw[k] = v

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**raw)

    def resolved_api_url(self) -> str:
        return (self.api_url or "").strip().rstrip("/")

    def uses_placeholder_url(self) -> bool:
        return self.resolved_api_url() == PLACEHOLDER_API_URL

    def require_google_places(self) -> None:
        if not self.google_places_api_key:
            raise ConfigurationError("GOOGLE_PLACES_API_KEY is required")

    def require_llm(self) -> None:
        # local ollama runs without a key
        if not self.llm_api_key and (self.llm_provider or "").lower() != "ollama":
            raise ConfigurationError("LLM_API_KEY (or OPENAI_API_KEY) is required")

    def log_summary(self) -> str:
        return (
            "api_url=%s offline=%s timeout=%s cache_ttl=%s places_key=%s llm_provider=%s llm_key=%s"
            % (
                self.resolved_api_url() or "unset",
                self.offline_mode,
                self.request_timeout,
                self.cache_ttl_sec,
                mask_secret(self.google_places_api_key),
                self.llm_provider or "openai",
                mask_secret(self.llm_api_key),
            )
        )
