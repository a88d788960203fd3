"""
Geocoding Service.

Resolves hospital addresses to [longitude, latitude] through the Mapbox
forward geocoding API. Geocoding is best effort: every failure is logged
and reported as ``None`` so the hospital save can fall back to [0, 0].
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from urllib.parse import quote

import httpx

from ..core.config import get_settings

logger = logging.getLogger(__name__)


def build_query(parts: Iterable[str | None]) -> str:
    """Join the non-empty address parts with ', '."""
    return ", ".join(part.strip() for part in parts if part and part.strip())


class GeocodingService:
    """
    Mapbox forward geocoding.

    Usage:
        geocoder = get_geocoding_service()
        point = await geocoder.geocode("221B Baker Street, London")
    """

    def __init__(self) -> None:
        self.settings = get_settings()
        self._client: httpx.AsyncClient | None = None

    @property
    def is_enabled(self) -> bool:
        return bool(self.settings.MAPBOX_ACCESS_TOKEN)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.MAPBOX_TIMEOUT_SECONDS)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def geocode(self, query: str) -> tuple[float, float] | None:
        """Return (longitude, latitude) of the best match, or None."""
        if not self.is_enabled or not query:
            return None

        url = f"{self.settings.MAPBOX_BASE_URL}/{quote(query, safe='')}.json"
        try:
            response = await self.client.get(
                url,
                params={"access_token": self.settings.MAPBOX_ACCESS_TOKEN, "limit": 1},
            )
            response.raise_for_status()
            features = response.json().get("features") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Mapbox geocoding error: {e}")
            return None

        if not features:
            logger.info("Mapbox returned no match for address")
            return None

        center = features[0].get("center")
        if not isinstance(center, list) or len(center) != 2:
            logger.warning(f"Unexpected Mapbox center payload: {center!r}")
            return None
        return float(center[0]), float(center[1])


_geocoding_service: GeocodingService | None = None


def get_geocoding_service() -> GeocodingService:
    global _geocoding_service
    if _geocoding_service is None:
        _geocoding_service = GeocodingService()
    return _geocoding_service
