import logging
from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from ....core.events import SWAP_REQUESTS, RATINGS, ChangeEvent
from ..deps import authenticate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])

@router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, token: str = Query(...)):
    """
    Push change signals for the authenticated user.

    Messages look like ``{"event": "swap_requests_changed", ...}`` and carry no
    row data; clients re-fetch the collection named in the event.
    """
    state = websocket.app.state

    try:
        user = authenticate(state.settings, token)
    except HTTPException:
        await websocket.close(code=4401, reason="Invalid authentication token")
        return

    await websocket.accept()

    async def forward(event: ChangeEvent) -> None:
        await websocket.send_json(event.to_message())

    bus = state.bus
    subscriptions = [
        await bus.subscribe(SWAP_REQUESTS, user.id, forward),
        await bus.subscribe(RATINGS, user.id, forward),
    ]
    logger.info(f"Notification socket opened for {user.id}")

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Notification socket closed for {user.id}")
    finally:
        for subscription in subscriptions:
            await bus.unsubscribe(subscription)
