# crowdscene/dependencies.py
"""
FastAPI dependencies: hand out the components wired at startup
"""

from fastapi import Request

from .services import (
    CheckinService,
    DecayScorer,
    EventStore,
    LiveBroadcaster,
    RankedQueryEngine,
    RateGate,
)


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def get_scorer(request: Request) -> DecayScorer:
    return request.app.state.scorer


def get_query_engine(request: Request) -> RankedQueryEngine:
    return request.app.state.query_engine


def get_checkin_service(request: Request) -> CheckinService:
    return request.app.state.checkin_service


def get_rate_gate(request: Request) -> RateGate:
    return request.app.state.rate_gate


def get_broadcaster(request: Request) -> LiveBroadcaster:
    return request.app.state.broadcaster
