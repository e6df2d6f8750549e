# crowdscene/services/broadcaster.py
"""
Fan-out of crowd updates to live subscribers.

Delivery is best-effort and at most once: no replay, no acknowledgement,
and nothing is kept for subscribers that are gone or too slow.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set

logger = logging.getLogger(__name__)

CROWD_UPDATE_EVENT = "crowd:update"


@dataclass(frozen=True)
class CrowdUpdate:
    venue_id: str
    crowd: float

    def to_message(self) -> Dict[str, Any]:
        return {
            "event": CROWD_UPDATE_EVENT,
            "data": {"venueId": self.venue_id, "crowd": self.crowd},
        }


class Subscription:
    """One subscriber's bounded inbox. ``None`` in the queue means the broadcaster closed."""

    def __init__(self, maxsize: int):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    async def get(self) -> Optional[Dict[str, Any]]:
        return await self.queue.get()

    def offer(self, message: Optional[Dict[str, Any]]) -> bool:
        try:
            self.queue.put_nowait(message)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            return False


class LiveBroadcaster:
    """Registry of active subscribers; publishing never waits on any of them"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Set[Subscription] = set()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self.queue_size)
        if self._closed:
            subscription.offer(None)
        else:
            self._subscribers.add(subscription)
            logger.debug(f"Subscriber added ({self.subscriber_count} active)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.discard(subscription)
        logger.debug(f"Subscriber removed ({self.subscriber_count} active)")

    def publish(self, update: CrowdUpdate) -> int:
        """Queue ``update`` for every subscriber; returns how many accepted it"""
        message = update.to_message()
        delivered = 0
        for subscription in list(self._subscribers):
            if subscription.offer(message):
                delivered += 1
            else:
                logger.warning(f"Subscriber queue full, dropped update for venue {update.venue_id}")
        return delivered

    def close(self) -> None:
        """Wake every subscriber with the end-of-stream marker"""
        self._closed = True
        for subscription in list(self._subscribers):
            try:
                subscription.queue.put_nowait(None)
            except asyncio.QueueFull:
                # Make room for the marker; the subscriber is going away anyway
                subscription.queue.get_nowait()
                subscription.queue.put_nowait(None)
        self._subscribers.clear()
        logger.info("Live broadcaster closed")
