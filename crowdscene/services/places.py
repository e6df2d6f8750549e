# crowdscene/services/places.py
"""
Google Places Nearby Search adapter (external venue source)
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import ConfigurationError, UpstreamError
from ..models.enums import VenueCategory, VenueSource
from ..utils.geo import is_finite_number
from .ranking import MAX_EXTERNAL_RADIUS_METERS, VenueCandidate

logger = logging.getLogger(__name__)

OK_STATUSES = ("OK", "ZERO_RESULTS")


def candidate_from_place(place: Dict[str, Any]) -> Optional[VenueCandidate]:
    """Map one Nearby Search result; None when it has no id or usable coordinates"""
    if not isinstance(place, dict):
        return None
    place_id = place.get("place_id")
    location = (place.get("geometry") or {}).get("location") or {}
    lat, lng = location.get("lat"), location.get("lng")

    if not place_id or not is_finite_number(lat) or not is_finite_number(lng):
        return None

    types = place.get("types") or []
    category = VenueCategory.NIGHT_CLUB if "night_club" in types else VenueCategory.BAR

    return VenueCandidate(
        id=place_id,
        name=place.get("name") or "",
        category=category,
        lat=float(lat),
        lng=float(lng),
        source=VenueSource.EXTERNAL,
        url=place.get("website") or "",
    )


class GooglePlacesClient:
    """Client for the Places Nearby Search JSON endpoint"""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://maps.googleapis.com/maps/api/place/nearbysearch/json",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise UpstreamError(f"Places request timed out after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise UpstreamError(f"Places HTTP error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise UpstreamError(f"Places request failed: {e}") from e
            except ValueError as e:
                raise UpstreamError("Places returned invalid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamError("Places returned an unexpected payload")
        return data

    async def nearby(self, lat: float, lng: float, radius_meters: float) -> List[VenueCandidate]:
        """Bars and night clubs around a point"""
        if not self.configured:
            raise ConfigurationError("Set GOOGLE_PLACES_API_KEY")

        params = {
            "location": f"{lat},{lng}",
            "radius": int(min(MAX_EXTERNAL_RADIUS_METERS, round(radius_meters))),
            "type": "bar",
            "keyword": "bar OR nightclub",
            "key": self.api_key,
        }
        try:
            # httpx timeouts are per phase; this bounds the whole call
            data = await asyncio.wait_for(self._fetch(params), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Places request timed out after {self.timeout}s") from e

        status = data.get("status", "OK")
        if status not in OK_STATUSES:
            message = data.get("error_message", "")
            raise UpstreamError(f"Places status {status}: {message}".strip())

        candidates = []
        for place in data.get("results") or []:
            candidate = candidate_from_place(place)
            if candidate is None:
                logger.warning(f"Skipping place without id or coordinates: {place!r:.120}")
                continue
            candidates.append(candidate)

        logger.info(f"Places returned {len(candidates)} venues near ({lat}, {lng})")
        return candidates
