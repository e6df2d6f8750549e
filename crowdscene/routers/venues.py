# crowdscene/routers/venues.py
"""
Router for stored venues
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_query_engine, get_scorer, get_store
from ..schemas.checkin import CrowdResponse
from ..schemas.venue import RankedVenueResponse, VenueCreate, VenueCreated
from ..services import DecayScorer, EventStore, RankedQueryEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/venues", tags=["Venues"])


@router.post("", response_model=VenueCreated, status_code=status.HTTP_201_CREATED)
async def create_venue(
    venue_data: VenueCreate,
    store: EventStore = Depends(get_store)
):
    """Register a venue manually"""
    venue = await store.create_venue(
        name=venue_data.name,
        category=venue_data.category,
        lat=venue_data.lat,
        lng=venue_data.lng,
        cover=venue_data.cover,
        url=venue_data.url,
        event=venue_data.event,
    )
    return VenueCreated(id=venue.id)


@router.get("/nearby", response_model=List[RankedVenueResponse])
async def nearby_venues(
    lat: float = Query(...),
    lng: float = Query(...),
    radius: float = Query(5.0, description="Radius in miles"),
    engine: RankedQueryEngine = Depends(get_query_engine)
):
    """Stored venues within the radius, busiest first"""
    venues = await engine.nearby_local(lat, lng, radius)
    return [RankedVenueResponse.model_validate(v) for v in venues]


@router.get("/{venue_id}/crowd", response_model=CrowdResponse)
async def venue_crowd(
    venue_id: str,
    scorer: DecayScorer = Depends(get_scorer)
):
    """Current crowd score of any venue id, stored or external"""
    return CrowdResponse(venue_id=venue_id, crowd=await scorer.score(venue_id))
