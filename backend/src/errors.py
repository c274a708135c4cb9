"""Error types shared by the date ideas pipeline and its proxies.

Mock mode never raises NetworkError, UpstreamProviderError or
MalformedResponseError; those belong to calls that leave the process.
"""

from __future__ import annotations

from typing import Optional


class DateIdeasError(Exception):
    """Base error for the pipeline."""

    kind = "error"


class ConfigurationError(DateIdeasError):
    """Backend URL or server key missing/invalid. Not retried."""

    kind = "configuration"


class NetworkError(DateIdeasError):
    """Transport failure talking to a proxy or upstream API."""

    kind = "network"


class UpstreamProviderError(DateIdeasError):
    """Third-party API (or a proxy) answered with a non-success status."""

    kind = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(DateIdeasError):
    """Text-generation output could not be turned into an idea list."""

    kind = "malformed_response"

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class PermissionDenied(DateIdeasError):
    """Location access refused by the user."""

    kind = "permission_denied"
