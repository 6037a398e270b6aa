# src/quorum/api/v1/endpoints/changes.py
"""WebSocket stream of "data changed" events per topic."""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from quorum.services.changes import Subscription

from ..dependencies import ChangeFeedDep

router = APIRouter(prefix="/changes", tags=["changes"])
logger = logging.getLogger(__name__)


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    async for event in subscription:
        await websocket.send_json(event.as_dict())


async def _drain(websocket: WebSocket) -> None:
    # Client messages are read only to notice the disconnect.
    while True:
        await websocket.receive_text()


@router.websocket("/{topic}")
async def watch_topic(websocket: WebSocket, topic: str, feed: ChangeFeedDep) -> None:
    """Push ``{topic, kind}`` events until either side stops.

    The stream ends when the client disconnects or when sending fails.
    """
    subscription = feed.subscribe(topic)
    try:
        await websocket.accept()
        await websocket.send_json({"topic": topic, "kind": "subscribed"})
        tasks = {
            asyncio.create_task(_forward(websocket, subscription)),
            asyncio.create_task(_drain(websocket)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            error = task.exception()
            if isinstance(error, WebSocketDisconnect):
                logger.debug("Change stream for %s closed by client", topic)
            elif error is not None:
                logger.warning("Change stream for %s stopped: %s", topic, error)
    finally:
        subscription.close()
