"""Contract for reverse geocoding."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Geocoder(Protocol):
    async def reverse(self, latitude: float, longitude: float) -> str:
        """Return the city/town/village at the coordinates or raise `GeocodingError`."""

        ...
