import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from ..errors import MapsProviderError
from ..settings import get_settings

logger = logging.getLogger(__name__)

API_KEY_ENV = "GOOGLE_MAPS_API_KEY"

_OK_STATUSES = ("OK", "ZERO_RESULTS")


def read_api_key() -> str | None:
    """Return the maps credential from the process environment (never cached)."""
    return os.environ.get(API_KEY_ENV)


class GoogleMapsClient:
    """Async wrapper around the Geocoding and Places Nearby Search web services."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.get(f"{self._base_url}{path}", params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("Maps request %s failed: %s", path, e)
            raise MapsProviderError(str(e) or e.__class__.__name__) from e
        except ValueError as e:
            logger.warning("Maps response for %s is not JSON: %s", path, e)
            raise MapsProviderError("Invalid response from maps provider") from e

        status = payload.get("status", "OK")
        if status not in _OK_STATUSES:
            message = payload.get("error_message") or f"Maps request failed with status {status}"
            logger.warning("Maps request %s returned %s: %s", path, status, message)
            raise MapsProviderError(message)
        return payload

    async def geocode(self, address: str, key: str | None) -> List[Dict[str, Any]]:
        """Geocode a free-form address. Returns the provider result list (possibly empty)."""
        params: Dict[str, Any] = {"address": address}
        if key:
            params["key"] = key
        payload = await self._get("/geocode/json", params)
        return payload.get("results") or []

    async def places_nearby(
        self,
        *,
        location: Dict[str, float],
        radius: float,
        keyword: str,
        key: Optional[str],
    ) -> List[Dict[str, Any]]:
        """Nearby search around a lat/lng pair."""
        params: Dict[str, Any] = {
            "location": f"{location['lat']},{location['lng']}",
            "radius": int(radius) if float(radius).is_integer() else radius,
            "keyword": keyword,
        }
        if key:
            params["key"] = key
        payload = await self._get("/place/nearbysearch/json", params)
        return payload.get("results") or []

    async def close(self) -> None:
        await self._client.aclose()


def get_maps_client() -> GoogleMapsClient:
    """Build a maps client from settings."""
    settings = get_settings()
    return GoogleMapsClient(
        base_url=settings.maps_base_url,
        timeout=settings.maps_request_timeout_seconds,
    )
