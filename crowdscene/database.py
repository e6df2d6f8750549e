# crowdscene/database.py
"""
Database module: tables, engine and session factory
"""

import logging

from sqlalchemy import BigInteger, Column, Float, Index, Integer, String, Text
from sqlalchemy import event as sa_event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base


logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

# ========== SQLALCHEMY MODELS ==========
# All timestamps are epoch milliseconds.


class User(Base):
    """Anonymous user"""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False, default="Guest")
    created_at = Column(BigInteger, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, name={self.name})>"


class Venue(Base):
    """Manually registered venue"""
    __tablename__ = "venues"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, default="Other")
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    cover = Column(Float, nullable=False, default=0)
    url = Column(Text, nullable=False, default="")
    event = Column(Text, nullable=False, default="")
    created_at = Column(BigInteger, nullable=False)

    def __repr__(self):
        return f"<Venue(id={self.id}, name={self.name[:30]}, category={self.category})>"


class CheckinEvent(Base):
    """One accepted check-in. venue_id may name an external venue, so no foreign keys."""
    __tablename__ = "checkins"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False)
    venue_id = Column(String(255), nullable=False)
    ts = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index('idx_checkins_venue_ts', 'venue_id', 'ts'),
    )

    def __repr__(self):
        return f"<CheckinEvent(id={self.id}, venue_id={self.venue_id}, ts={self.ts})>"


class Review(Base):
    """Venue review"""
    __tablename__ = "reviews"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False)
    venue_id = Column(String(255), nullable=False)
    stars = Column(Integer, nullable=False)  # 1-5
    text = Column(Text, nullable=False, default="")
    ts = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index('idx_reviews_venue_ts', 'venue_id', 'ts'),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, stars={self.stars})>"


# ========== DATABASE CONNECTION ==========

def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine; SQLite files run in WAL mode"""
    engine = create_async_engine(database_url, echo=echo)

    if engine.dialect.name == "sqlite":
        @sa_event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory; objects stay readable after commit"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create tables and indexes if they do not exist"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


__all__ = [
    'Base',
    'User',
    'Venue',
    'CheckinEvent',
    'Review',
    'create_engine',
    'create_session_factory',
    'init_models',
]
