from enum import Enum


class VenueCategory(str, Enum):
    """Venue categories"""
    BAR = "Bar"
    NIGHT_CLUB = "Night Club"
    OTHER = "Other"


class VenueSource(str, Enum):
    """Where a ranked venue came from"""
    LOCAL = "local"
    EXTERNAL = "external"
