# crowdscene/routers/health.py
from fastapi import APIRouter, Depends

from ..dependencies import get_broadcaster, get_store
from ..exceptions import StorageError
from ..services import EventStore, LiveBroadcaster
from ..services.store import now_ms

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    store: EventStore = Depends(get_store),
    broadcaster: LiveBroadcaster = Depends(get_broadcaster)
):
    """Service liveness and database reachability"""
    db_ok = False
    try:
        db_ok = await store.ping()
    except StorageError:
        pass  # already logged by the store; reported below

    return {
        "ok": db_ok,
        "time": now_ms(),
        "database": "connected" if db_ok else "disconnected",
        "subscribers": broadcaster.subscriber_count,
    }
