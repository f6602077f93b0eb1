"""
Data-change websocket.

WS /ws/data-changes - pushes {"type", "timestamp", "data"} after every mutation
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ferrocash.core.events import ChangeEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Changes"])


async def _forward(websocket: WebSocket, queue: asyncio.Queue[ChangeEvent]) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event.to_dict())


@router.websocket("/ws/data-changes")
async def data_changes(websocket: WebSocket) -> None:
    """Stream change events until the client disconnects. Client messages are ignored."""
    cash = websocket.app.state.cash
    # Subscribe before accepting so no event after the handshake is missed
    async with cash.hub.subscription() as queue:
        await websocket.accept()
        forward = asyncio.create_task(_forward(websocket, queue))
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug("Data-change subscriber disconnected")
        finally:
            forward.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await forward
