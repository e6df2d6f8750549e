# crowdscene/services/rate_gate.py
"""
Per-key sliding-window admission control.

Counters live in process memory and reset on restart. Expired entries are
dropped lazily when a key is touched; there are no background timers.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple

from ..exceptions import AdmissionError

logger = logging.getLogger(__name__)


class SlidingWindowCounter:
    """At most ``limit`` admissions per key within any ``window_sec`` span"""

    def __init__(
        self,
        *,
        limit: int,
        window_sec: float,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = 10_000
    ) -> None:
        self.limit = limit
        self.window = window_sec
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._events: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def _expire(self, q: Deque[float], now: float) -> None:
        while q and now - q[0] >= self.window:
            q.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._events):
            q = self._events[key]
            self._expire(q, now)
            if not q:
                del self._events[key]

    def hit(self, key: str) -> Tuple[bool, float]:
        """Record an attempt for ``key``.

        Returns ``(admitted, retry_after_seconds)``; a rejected attempt is
        not recorded.
        """
        with self._lock:
            now = self._clock()
            if len(self._events) > self._sweep_threshold:
                self._sweep(now)

            q = self._events.setdefault(key, deque())
            self._expire(q, now)

            if len(q) >= self.limit:
                return False, self.window - (now - q[0])

            q.append(now)
            return True, 0.0

    def remaining(self, key: str) -> int:
        with self._lock:
            q = self._events.get(key)
            if not q:
                return self.limit
            self._expire(q, self._clock())
            return max(0, self.limit - len(q))

    def __len__(self) -> int:
        return len(self._events)


class RateGate:
    """Two admission policies: per source IP and per (user, venue) check-in"""

    def __init__(self, request_counter: SlidingWindowCounter, checkin_counter: SlidingWindowCounter):
        self.request_counter = request_counter
        self.checkin_counter = checkin_counter

    @classmethod
    def from_limits(
        cls,
        ip_limit: int = 100,
        ip_window: float = 60,
        checkin_limit: int = 3,
        checkin_window: float = 60 * 30,
        clock: Optional[Callable[[], float]] = None
    ) -> "RateGate":
        clock = clock or time.monotonic
        return cls(
            SlidingWindowCounter(limit=ip_limit, window_sec=ip_window, clock=clock),
            SlidingWindowCounter(limit=checkin_limit, window_sec=checkin_window, clock=clock),
        )

    def admit_request(self, client_ip: str) -> None:
        admitted, retry_after = self.request_counter.hit(client_ip)
        if not admitted:
            logger.warning(f"Request rate limit hit for {client_ip}")
            raise AdmissionError("Too many requests", retry_after=retry_after)

    def admit_checkin(self, user_id: str, venue_id: str) -> None:
        admitted, retry_after = self.checkin_counter.hit(f"{user_id}:{venue_id}")
        if not admitted:
            logger.info(f"Check-in limit hit: user={user_id} venue={venue_id}")
            raise AdmissionError("Too many check-ins. Try later.", retry_after=retry_after)
