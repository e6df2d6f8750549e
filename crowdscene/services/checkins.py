import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Tuple

from .broadcaster import CrowdUpdate, LiveBroadcaster
from .rate_gate import RateGate
from .scoring import DecayScorer
from .store import EventStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckinResult:
    id: str
    venue_id: str
    crowd: float


class CheckinService:
    """Admit, record, rescore and broadcast a check-in"""

    def __init__(
        self,
        store: EventStore,
        scorer: DecayScorer,
        rate_gate: RateGate,
        broadcaster: LiveBroadcaster
    ):
        self.store = store
        self.scorer = scorer
        self.rate_gate = rate_gate
        self.broadcaster = broadcaster
        # venue_id -> (lock, tasks holding or waiting on it); entries go away when unused
        self._venue_locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _venue_lock(self, venue_id: str) -> AsyncIterator[None]:
        """Serialize append -> score -> publish per venue so broadcasts keep acceptance order"""
        lock, users = self._venue_locks.get(venue_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._venue_locks[venue_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._venue_locks[venue_id]
            if users <= 1:
                del self._venue_locks[venue_id]
            else:
                self._venue_locks[venue_id] = (lock, users - 1)

    async def check_in(self, user_id: str, venue_id: str) -> CheckinResult:
        # Raises AdmissionError before anything is written
        self.rate_gate.admit_checkin(user_id, venue_id)

        async with self._venue_lock(venue_id):
            checkin = await self.store.append_checkin(user_id, venue_id)
            crowd = await self.scorer.score(venue_id)
            self.broadcaster.publish(CrowdUpdate(venue_id=venue_id, crowd=crowd))

        logger.info(f"Check-in {checkin.id}: user={user_id} venue={venue_id} crowd={crowd:.3f}")
        return CheckinResult(id=checkin.id, venue_id=venue_id, crowd=crowd)
