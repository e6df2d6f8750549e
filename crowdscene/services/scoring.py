# crowdscene/services/scoring.py
"""
Crowd score: exponentially decayed count of recent check-ins
"""

import math
from typing import Callable, Iterable, Optional

from ..exceptions import ConfigurationError
from .store import EventStore, now_ms

# Weights older than 8 * TAU are below e^-8 (~0.0003) and are not queried
CUTOFF_FACTOR = 8


def decayed_sum(timestamps: Iterable[int], as_of: int, tau_ms: float) -> float:
    """Sum of exp(-(as_of - ts) / tau) over events inside the lookback window.

    Events stamped after ``as_of`` did not exist yet at that instant and are
    skipped.
    """
    window_start = as_of - CUTOFF_FACTOR * tau_ms
    score = 0.0
    for ts in timestamps:
        if window_start < ts <= as_of:
            score += math.exp(-(as_of - ts) / tau_ms)
    return score


class DecayScorer:
    """Computes venue crowd scores from the check-in log.

    Nothing is cached: every call reads the store, so the score always
    reflects the check-ins committed so far.
    """

    def __init__(self, store: EventStore, tau_ms: float, clock: Optional[Callable[[], int]] = None):
        if not tau_ms or tau_ms <= 0:
            raise ConfigurationError("Decay time-constant must be positive")
        self.store = store
        self.tau_ms = float(tau_ms)
        self.clock = clock or now_ms

    @property
    def window_ms(self) -> float:
        return CUTOFF_FACTOR * self.tau_ms

    def now(self) -> int:
        return self.clock()

    async def score(self, venue_id: str, as_of: Optional[int] = None) -> float:
        """Crowd score of a venue as of ``as_of`` (defaults to now)"""
        if as_of is None:
            as_of = self.now()
        timestamps = await self.store.checkins_since(venue_id, math.floor(as_of - self.window_ms))
        return decayed_sum(timestamps, as_of, self.tau_ms)
