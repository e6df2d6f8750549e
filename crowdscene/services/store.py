# crowdscene/services/store.py
"""
EventStore: the only component that reads or writes persisted records
"""

import logging
import math
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database import CheckinEvent, Review, User, Venue
from ..exceptions import StorageError, ValidationError
from ..models.enums import VenueCategory
from ..utils.geo import is_finite_number, validate_coordinates

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def clamp_stars(stars: int) -> int:
    return max(MIN_STARS, min(MAX_STARS, int(stars)))


class EventStore:
    """Append-only check-in/review log plus user and venue records.

    Every method opens its own session and commits before returning, so
    each call is atomic on its own; nothing spans calls.
    """

    def __init__(self, session_factory: async_sessionmaker, clock: Optional[Callable[[], int]] = None):
        self._session_factory = session_factory
        self.clock = clock or now_ms

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Storage error: {e}")
                raise StorageError(str(e)) from e

    # ---------- users ----------

    async def create_user(self, name: Optional[str] = None) -> User:
        user = User(
            id=str(uuid4()),
            name=(name or "").strip() or "Guest",
            created_at=self.clock()
        )
        async with self._session() as session:
            session.add(user)
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        async with self._session() as session:
            return await session.get(User, user_id)

    # ---------- venues ----------

    async def create_venue(
        self,
        name: str,
        lat: float,
        lng: float,
        category: VenueCategory = VenueCategory.OTHER,
        cover: float = 0,
        url: str = "",
        event: str = ""
    ) -> Venue:
        """Register a venue; lat/lng must be present numeric values in range"""
        if not name or not str(name).strip():
            raise ValidationError("Missing fields")
        lat, lng = validate_coordinates(lat, lng)
        if cover is None:
            cover = 0
        if not is_finite_number(cover) or cover < 0:
            raise ValidationError("Cover charge must be a non-negative number")
        try:
            category = VenueCategory(category or VenueCategory.OTHER)
        except ValueError:
            raise ValidationError(f"Unknown category: {category}")

        venue = Venue(
            id=str(uuid4()),
            name=str(name).strip(),
            category=category.value,
            lat=lat,
            lng=lng,
            cover=float(cover),
            url=url or "",
            event=event or "",
            created_at=self.clock()
        )
        async with self._session() as session:
            session.add(venue)
        logger.info(f"Venue registered: {venue.id} ({venue.name})")
        return venue

    async def get_venue(self, venue_id: str) -> Optional[Venue]:
        async with self._session() as session:
            return await session.get(Venue, venue_id)

    async def all_venues(self) -> List[Venue]:
        async with self._session() as session:
            result = await session.execute(select(Venue))
            return list(result.scalars().all())

    # ---------- check-ins ----------

    async def append_checkin(self, user_id: str, venue_id: str) -> CheckinEvent:
        if not user_id or not venue_id:
            raise ValidationError("Missing fields")
        checkin = CheckinEvent(
            id=str(uuid4()),
            user_id=user_id,
            venue_id=venue_id,
            ts=self.clock()
        )
        async with self._session() as session:
            session.add(checkin)
        return checkin

    async def checkins_since(self, venue_id: str, since_ts: int) -> List[int]:
        """Timestamps of a venue's check-ins strictly after ``since_ts``"""
        async with self._session() as session:
            result = await session.execute(
                select(CheckinEvent.ts).where(
                    CheckinEvent.venue_id == venue_id,
                    CheckinEvent.ts > since_ts
                )
            )
            return list(result.scalars().all())

    # ---------- reviews ----------

    async def append_review(self, user_id: str, venue_id: str, stars: int, text: str = "") -> Review:
        """Store a review. Not deduplicated.

        Zero stars counts as missing; any other value is clamped into [1, 5].
        """
        if not user_id or not venue_id or not is_finite_number(stars) or stars == 0:
            raise ValidationError("Missing fields")
        review = Review(
            id=str(uuid4()),
            user_id=user_id,
            venue_id=venue_id,
            stars=clamp_stars(math.floor(stars)),
            text=text or "",
            ts=self.clock()
        )
        async with self._session() as session:
            session.add(review)
        return review

    # ---------- health ----------

    async def ping(self) -> bool:
        async with self._session() as session:
            await session.execute(select(1))
        return True
