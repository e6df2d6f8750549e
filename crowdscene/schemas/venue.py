from typing import Optional

from pydantic import Field

from .base import BaseSchema
from ..models.enums import VenueCategory, VenueSource


class VenueCreate(BaseSchema):
    """Manual venue registration"""
    name: str = Field(..., min_length=1, max_length=200)
    category: VenueCategory = Field(default=VenueCategory.OTHER, alias="type")
    lat: float = Field(..., strict=True, ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., strict=True, ge=-180, le=180, allow_inf_nan=False)
    cover: float = Field(default=0, strict=True, ge=0, allow_inf_nan=False)
    url: Optional[str] = ""
    event: Optional[str] = ""


class VenueCreated(BaseSchema):
    id: str


class RankedVenueResponse(BaseSchema):
    """Venue enriched with distance (miles) and crowd score"""
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
