"""Reverse geocoding (Nominatim compatible).

Responsibility:
- Map latitude/longitude to a city, town or village name.
- Translate transport failures and unusable payloads into `GeocodingError`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import GeocodingError

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"

_PLACE_KEYS = ("city", "town", "village")


def city_from_payload(payload: Any) -> str:
    """Pick the most specific settlement name from a Nominatim `reverse` payload."""

    address = payload.get("address") if isinstance(payload, dict) else None
    if not isinstance(address, dict):
        raise GeocodingError("Could not resolve city from coordinates.", step="reverseGeocode")
    for key in _PLACE_KEYS:
        value = address.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return UNKNOWN_LOCATION


class NominatimGeocoder:
    """`core.interfaces.Geocoder` backed by an HTTP reverse-geocoding endpoint."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    async def reverse(self, latitude: float, longitude: float) -> str:
        params = {"format": "json", "lat": latitude, "lon": longitude}
        try:
            async with build_async_client(self._settings, transport=self._transport) as client:
                response = await client.get(self._settings.geocoding_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Geocoding API error: HTTP %s", exc.response.status_code)
            raise GeocodingError("Failed to fetch city from coordinates.", step="reverseGeocode") from exc
        except httpx.HTTPError as exc:
            logger.error("Geocoding error: %s", exc)
            raise GeocodingError("Failed to fetch city from coordinates.", step="reverseGeocode") from exc
        except ValueError as exc:
            logger.error("Geocoding API returned invalid JSON")
            raise GeocodingError("Failed to fetch city from coordinates.", step="reverseGeocode") from exc

        return city_from_payload(payload)
