# crowdscene/routers/live.py
"""
Live channel: pushes ``crowd:update`` messages over a WebSocket.

Clients get only updates published after they connect; current state
comes from the nearby endpoints.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket

from ..services.broadcaster import LiveBroadcaster, Subscription

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Live"])


async def _forward_updates(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        message = await subscription.get()
        if message is None:
            return
        await websocket.send_json(message)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Client messages are ignored; we only care about the close frame
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws")
async def crowd_updates(websocket: WebSocket):
    broadcaster: LiveBroadcaster = websocket.app.state.broadcaster
    # Register before accepting so nothing published after the handshake is missed
    subscription = broadcaster.subscribe()
    try:
        await websocket.accept()
        sender = asyncio.create_task(_forward_updates(websocket, subscription))
        receiver = asyncio.create_task(_wait_for_disconnect(websocket))
        done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.info(f"Live connection ended: {task.exception()!r}")

        if sender in done and sender.exception() is None and receiver not in done:
            # Broadcaster shut down; close our side
            await websocket.close()
    finally:
        broadcaster.unsubscribe(subscription)
