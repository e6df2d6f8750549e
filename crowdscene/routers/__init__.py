"""
FastAPI routers
"""

from .checkins import router as checkins_router
from .health import router as health_router
from .live import router as live_router
from .places import router as places_router
from .reviews import router as reviews_router
from .users import router as users_router
from .venues import router as venues_router

__all__ = [
    'checkins_router',
    'health_router',
    'live_router',
    'places_router',
    'reviews_router',
    'users_router',
    'venues_router',
]
