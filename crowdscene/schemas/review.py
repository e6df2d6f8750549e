from pydantic import Field

from .base import BaseSchema


class ReviewCreate(BaseSchema):
    """Review payload; the store rejects 0 stars and clamps other values into 1-5"""
    user_id: str = Field(..., alias="userId", min_length=1)
    venue_id: str = Field(..., alias="venueId", min_length=1)
    stars: int = Field(..., strict=True)
    text: str = Field(default="", max_length=2000)


class ReviewResponse(BaseSchema):
    id: str
