# Re-export table models and enums
from ..database import Base, User, Venue, CheckinEvent, Review
from .enums import VenueCategory, VenueSource

__all__ = [
    'Base',
    'User',
    'Venue',
    'CheckinEvent',
    'Review',
    'VenueCategory',
    'VenueSource',
]
