"""
Services with the business logic
"""

from .broadcaster import CrowdUpdate, LiveBroadcaster
from .checkins import CheckinResult, CheckinService
from .places import GooglePlacesClient
from .ranking import RankedQueryEngine, RankedVenue, VenueCandidate
from .rate_gate import RateGate, SlidingWindowCounter
from .scoring import DecayScorer
from .store import EventStore

__all__ = [
    'CrowdUpdate',
    'LiveBroadcaster',
    'CheckinResult',
    'CheckinService',
    'GooglePlacesClient',
    'RankedQueryEngine',
    'RankedVenue',
    'VenueCandidate',
    'RateGate',
    'SlidingWindowCounter',
    'DecayScorer',
    'EventStore',
]
