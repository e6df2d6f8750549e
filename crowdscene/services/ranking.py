# crowdscene/services/ranking.py
"""
Distance-filtered, crowd-ranked venue listings.

Stored venues and external candidates are both normalized into
``VenueCandidate`` and then enriched into ``RankedVenue``, so distance and
crowd are computed the same way whatever the source.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from ..database import Venue
from ..exceptions import ConfigurationError, UpstreamError
from ..models.enums import VenueCategory, VenueSource
from ..utils.geo import distance_miles, miles_to_meters, validate_coordinates, validate_radius
from .scoring import DecayScorer
from .store import EventStore

logger = logging.getLogger(__name__)

MAX_EXTERNAL_RADIUS_METERS = 40000
# Slack on the radius filter, well under consumer GPS accuracy (~16 m)
RADIUS_TOLERANCE_MILES = 0.01


@dataclass
class VenueCandidate:
    """A venue from either source, before distance and crowd are attached"""
    id: str
    name: str
    category: VenueCategory
    lat: float
    lng: float
    source: VenueSource
    cover: float = 0
    url: str = ""
    event: str = ""


@dataclass
class RankedVenue:
    id: str
    name: str
    category: VenueCategory
    lat: float
    lng: float
    source: VenueSource
    cover: float
    url: str
    event: str
    distance: float
    crowd: float


class ExternalVenueSource(Protocol):
    async def nearby(self, lat: float, lng: float, radius_meters: float) -> List[VenueCandidate]:
        ...


def candidate_from_venue(venue: Venue) -> VenueCandidate:
    try:
        category = VenueCategory(venue.category)
    except ValueError:
        category = VenueCategory.OTHER
    return VenueCandidate(
        id=venue.id,
        name=venue.name,
        category=category,
        lat=venue.lat,
        lng=venue.lng,
        source=VenueSource.LOCAL,
        cover=venue.cover or 0,
        url=venue.url or "",
        event=venue.event or "",
    )


def rank_venues(venues: Iterable[RankedVenue]) -> List[RankedVenue]:
    """Busiest first; among equal crowds the closer venue wins"""
    return sorted(venues, key=lambda v: (-v.crowd, v.distance))


class RankedQueryEngine:
    """Nearby queries over stored venues and an optional external source"""

    def __init__(
        self,
        store: EventStore,
        scorer: DecayScorer,
        external_source: Optional[ExternalVenueSource] = None
    ):
        self.store = store
        self.scorer = scorer
        self.external_source = external_source

    async def _enrich(
        self,
        candidates: Iterable[VenueCandidate],
        lat: float,
        lng: float,
        as_of: int
    ) -> List[RankedVenue]:
        ranked = []
        for c in candidates:
            ranked.append(RankedVenue(
                id=c.id,
                name=c.name,
                category=c.category,
                lat=c.lat,
                lng=c.lng,
                source=c.source,
                cover=c.cover,
                url=c.url,
                event=c.event,
                distance=distance_miles(lat, lng, c.lat, c.lng),
                crowd=await self.scorer.score(c.id, as_of),
            ))
        return ranked

    async def _local(self, lat: float, lng: float, radius: float, as_of: int) -> List[RankedVenue]:
        venues = await self.store.all_venues()
        enriched = await self._enrich((candidate_from_venue(v) for v in venues), lat, lng, as_of)
        return [v for v in enriched if v.distance <= radius + RADIUS_TOLERANCE_MILES]

    async def _external(self, lat: float, lng: float, radius: float, as_of: int) -> List[RankedVenue]:
        if self.external_source is None:
            raise ConfigurationError("External venue source is not configured")
        radius_meters = min(MAX_EXTERNAL_RADIUS_METERS, round(miles_to_meters(radius)))
        candidates = await self.external_source.nearby(lat, lng, radius_meters)
        return await self._enrich(candidates, lat, lng, as_of)

    async def nearby_local(self, lat, lng, radius_miles=5.0) -> List[RankedVenue]:
        """Stored venues within ``radius_miles``, ranked"""
        lat, lng = validate_coordinates(lat, lng)
        radius = validate_radius(radius_miles)
        as_of = self.scorer.now()
        return rank_venues(await self._local(lat, lng, radius, as_of))

    async def nearby_external(self, lat, lng, radius_miles=5.0) -> List[RankedVenue]:
        """External-source venues, ranked.

        A failing source yields an empty list; a missing credential is a
        ConfigurationError.
        """
        lat, lng = validate_coordinates(lat, lng)
        radius = validate_radius(radius_miles)
        as_of = self.scorer.now()
        try:
            venues = await self._external(lat, lng, radius, as_of)
        except UpstreamError as e:
            logger.warning(f"External nearby degraded to empty result: {e.detail}")
            return []
        return rank_venues(venues)

    async def nearby_all(self, lat, lng, radius_miles=5.0) -> List[RankedVenue]:
        """Stored and external venues ranked together.

        The external source is best-effort here: if it fails or is not
        configured, the stored venues are still returned. Venues that exist
        in both sources are not reconciled.
        """
        lat, lng = validate_coordinates(lat, lng)
        radius = validate_radius(radius_miles)
        as_of = self.scorer.now()

        venues = await self._local(lat, lng, radius, as_of)
        try:
            venues.extend(await self._external(lat, lng, radius, as_of))
        except (UpstreamError, ConfigurationError) as e:
            logger.warning(f"External venues left out of combined nearby: {e.detail}")
        return rank_venues(venues)
