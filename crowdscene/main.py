# crowdscene/main.py
"""
FastAPI application: wiring, lifecycle, error mapping
"""

import logging
import math
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings as default_settings
from .database import create_engine, create_session_factory, init_models
from .exceptions import AdmissionError, CrowdSceneError
from .routers import (
    checkins_router,
    health_router,
    live_router,
    places_router,
    reviews_router,
    users_router,
    venues_router,
)
from .services import (
    CheckinService,
    DecayScorer,
    EventStore,
    GooglePlacesClient,
    LiveBroadcaster,
    RankedQueryEngine,
    RateGate,
)
from .services.ranking import ExternalVenueSource
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def error_response(exc: CrowdSceneError) -> JSONResponse:
    headers = None
    if isinstance(exc, AdmissionError):
        headers = {"Retry-After": str(max(1, math.ceil(exc.retry_after)))}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


async def crowdscene_error_handler(request: Request, exc: CrowdSceneError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.detail}")
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed client input is a 400, like every other ValidationError"""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(
    settings: Optional[Settings] = None,
    *,
    clock: Optional[Callable[[], int]] = None,
    rate_clock: Optional[Callable[[], float]] = None,
    external_source: Optional[ExternalVenueSource] = None
) -> FastAPI:
    """Build the application.

    Components are created once in the lifespan and stored on ``app.state``;
    ``clock``/``rate_clock``/``external_source`` replace the real ones in tests.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle"""
        # Startup
        setup_logging(settings.LOG_LEVEL)
        logger.info(f"Starting CrowdScene ({settings.describe()})")

        engine = create_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        try:
            await init_models(engine)
        except Exception as e:
            logger.error(f"❌ Database initialization failed: {e}")
            await engine.dispose()
            raise

        store = EventStore(create_session_factory(engine), clock=clock)
        scorer = DecayScorer(store, settings.decay_tau_ms, clock=clock)
        rate_gate = RateGate.from_limits(
            ip_limit=settings.IP_RATE_LIMIT,
            ip_window=settings.IP_RATE_WINDOW,
            checkin_limit=settings.CHECKIN_RATE_LIMIT,
            checkin_window=settings.CHECKIN_RATE_WINDOW,
            clock=rate_clock,
        )
        broadcaster = LiveBroadcaster(queue_size=settings.SUBSCRIBER_QUEUE_SIZE)

        source = external_source
        if source is None and settings.places_api_key:
            source = GooglePlacesClient(
                api_key=settings.places_api_key,
                base_url=settings.GOOGLE_PLACES_URL,
                timeout=settings.PLACES_TIMEOUT,
            )
        if source is None:
            logger.warning("⚠️  GOOGLE_PLACES_API_KEY not set: external nearby disabled")

        app.state.engine = engine
        app.state.store = store
        app.state.scorer = scorer
        app.state.rate_gate = rate_gate
        app.state.broadcaster = broadcaster
        app.state.query_engine = RankedQueryEngine(store, scorer, source)
        app.state.checkin_service = CheckinService(store, scorer, rate_gate, broadcaster)
        logger.info(f"✅ CrowdScene ready (decay TAU = {settings.DECAY_HOURS}h)")

        yield

        # Shutdown
        logger.info("Stopping CrowdScene...")
        broadcaster.close()
        await engine.dispose()

    app = FastAPI(
        title="CrowdScene API",
        description="Live venue crowd levels from anonymous check-ins",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    @app.middleware("http")
    async def limit_requests_per_ip(request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        try:
            request.app.state.rate_gate.admit_request(client_ip)
        except AdmissionError as e:
            return error_response(e)
        return await call_next(request)

    # Outermost middleware: limiter 429s must carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CrowdSceneError, crowdscene_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health_router)
    app.include_router(users_router, prefix="/api")
    app.include_router(venues_router, prefix="/api")
    app.include_router(places_router, prefix="/api")
    app.include_router(checkins_router, prefix="/api")
    app.include_router(reviews_router, prefix="/api")
    app.include_router(live_router)

    return app


app = create_app()
