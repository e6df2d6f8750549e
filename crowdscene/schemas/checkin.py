from pydantic import Field

from .base import BaseSchema


class CheckinCreate(BaseSchema):
    user_id: str = Field(..., alias="userId", min_length=1)
    venue_id: str = Field(..., alias="venueId", min_length=1)


class CheckinResponse(BaseSchema):
    id: str
    crowd: float


class CrowdResponse(BaseSchema):
    venue_id: str = Field(..., serialization_alias="venueId")
    crowd: float
