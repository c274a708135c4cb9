from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from loguru import logger

from config import Configuration
from errors import ConfigurationError
from models import Mode


SECRETS_NOTE = "Server-held API keys cannot be verified from the client; check the backend deployment."


@dataclass
class ConfigStatus:
    ok: bool
    message: str
    issues: List[str] = field(default_factory=list)


class ConfigResolver:
    """Decides between the offline mock pipeline and the live proxies."""

    def __init__(self, cfg: Configuration) -> None:
        self.cfg = cfg

    def mode(self) -> Mode:
        if self.cfg.offline_mode:
            return Mode.MOCK
        if not self.cfg.resolved_api_url() or self.cfg.uses_placeholder_url():
            return Mode.MOCK
        return Mode.LIVE

    def is_mock(self) -> bool:
        return self.mode() is Mode.MOCK

    def config_status(self) -> ConfigStatus:
        if self.is_mock():
            return ConfigStatus(ok=True, message="Running in offline mode with local sample data.")

        url = self.cfg.resolved_api_url()
        issues: list[str] = []
        if not url:
            issues.append("Backend URL is not set (DATE_IDEAS_API_URL).")
        elif self.cfg.uses_placeholder_url():
            issues.append("Backend URL still uses the placeholder value.")
        elif not url.startswith(("http://", "https://")):
            issues.append(f"Backend URL must be an http(s) URL, got {url!r}.")

        if issues:
            return ConfigStatus(ok=False, message=f"Backend configuration is incomplete. {SECRETS_NOTE}", issues=issues)
        return ConfigStatus(ok=True, message=f"Backend URL configured. {SECRETS_NOTE}")

    def require_live(self) -> str:
        """Return the backend URL, or raise when live mode is misconfigured."""
        status = self.config_status()
        if not status.ok:
            logger.warning("backend configuration issues: {}", status.issues)
            raise ConfigurationError("; ".join(status.issues))
        return self.cfg.resolved_api_url()
