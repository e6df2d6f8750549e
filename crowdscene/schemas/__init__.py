"""
Pydantic schemas for the API
"""

from .user import UserCreate, UserResponse
from .venue import VenueCreate, VenueCreated, RankedVenueResponse
from .checkin import CheckinCreate, CheckinResponse, CrowdResponse
from .review import ReviewCreate, ReviewResponse

__all__ = [
    'UserCreate', 'UserResponse',
    'VenueCreate', 'VenueCreated', 'RankedVenueResponse',
    'CheckinCreate', 'CheckinResponse', 'CrowdResponse',
    'ReviewCreate', 'ReviewResponse',
]
