# crowdscene/routers/places.py
"""
Router for external (Google Places) and combined nearby listings
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_query_engine
from ..schemas.venue import RankedVenueResponse
from ..services import RankedQueryEngine

router = APIRouter(tags=["Places"])


@router.get("/places/nearby", response_model=List[RankedVenueResponse])
async def nearby_places(
    lat: float = Query(...),
    lng: float = Query(...),
    radius: float = Query(5.0, description="Radius in miles, capped at ~24.85"),
    engine: RankedQueryEngine = Depends(get_query_engine)
):
    """Live bars and clubs from Google Places with crowd scores"""
    venues = await engine.nearby_external(lat, lng, radius)
    return [RankedVenueResponse.model_validate(v) for v in venues]


@router.get("/nearby", response_model=List[RankedVenueResponse])
async def nearby_all(
    lat: float = Query(...),
    lng: float = Query(...),
    radius: float = Query(5.0, description="Radius in miles"),
    engine: RankedQueryEngine = Depends(get_query_engine)
):
    """Stored and Google Places venues ranked together"""
    venues = await engine.nearby_all(lat, lng, radius)
    return [RankedVenueResponse.model_validate(v) for v in venues]
