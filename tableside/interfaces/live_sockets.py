import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from tableside.infrastructure.event_relay import ADMIN_TOPIC, guest_topic
from tableside.interfaces.dependencies import token_is_valid

router = APIRouter()
logger = logging.getLogger(__name__)


async def _listen(websocket: WebSocket, topic: str):
    """Holds the socket open on a topic. "ping" gets {"event": "pong"} back as a keepalive."""
    relay = websocket.app.state.relay
    await relay.connect(websocket, topic)
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        relay.disconnect(websocket, topic)


@router.websocket("/ws/admin")
async def admin_feed(websocket: WebSocket, token: Optional[str] = None):
    """Topic "admin": emits {"event": "new_order", "payload": Notification}."""
    if not token_is_valid(websocket.app.state.settings.ADMIN_API_TOKEN, token):
        logger.warning("🚨 Admin websocket rejected: bad token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await _listen(websocket, ADMIN_TOPIC)


@router.websocket("/ws/guest/{guest_id}")
async def guest_feed(websocket: WebSocket, guest_id: str):
    """
    Topic "guest:{id}": emits "order_status_updated" and "order_completed"
    with the full Order as payload whenever staff move one of the guest's orders.
    """
    await _listen(websocket, guest_topic(guest_id))
