from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from errors import PermissionDenied
from models import Coordinate


DENIED_MESSAGE = "We need your location to show date ideas near you. Please enable it in settings."


class LocationProvider(ABC):
    """One-shot source of the device position."""

    @abstractmethod
    async def current_position(self) -> Coordinate: ...


class StaticLocationProvider(LocationProvider):
    def __init__(self, coordinate: Optional[Coordinate], granted: bool = True) -> None:
        self.coordinate = coordinate
        self.granted = granted

    async def current_position(self) -> Coordinate:
        if not self.granted or self.coordinate is None:
            raise PermissionDenied(DENIED_MESSAGE)
        return self.coordinate
