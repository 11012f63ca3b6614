import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)

ADMIN_TOPIC = "admin"


def guest_topic(guest_id: str) -> str:
    return f"guest:{guest_id}"


class EventRelay:
    """
    Push channel keyed by topic: "admin" for the console, "guest:{id}" for
    one guest's order progress.

    Best-effort, at-most-once per connection: a listener that is offline
    (or whose send fails) misses the event and is expected to poll the
    REST endpoints when it reconnects.
    """

    def __init__(self):
        self.topics: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket, topic: str = ADMIN_TOPIC):
        await websocket.accept()
        self.topics[topic].add(websocket)
        logger.info(f"✅ Listener joined '{topic}' ({len(self.topics[topic])} active)")

    def disconnect(self, websocket: WebSocket, topic: str = ADMIN_TOPIC):
        listeners = self.topics.get(topic)
        if listeners is None:
            return
        listeners.discard(websocket)
        if not listeners:
            del self.topics[topic]
        logger.info(f"Listener left '{topic}'")

    def listener_count(self, topic: str = ADMIN_TOPIC) -> int:
        return len(self.topics.get(topic, ()))

    async def broadcast(self, event: str, payload: dict, topic: str = ADMIN_TOPIC) -> int:
        """Returns how many listeners received the event."""
        message = {"event": event, "payload": payload}
        delivered = 0
        for websocket in list(self.topics.get(topic, ())):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"⚠️ Dropping '{topic}' listener after failed push: {e}")
                self.disconnect(websocket, topic)
        logger.info(f"🔔 '{event}' pushed to {delivered} '{topic}' listener(s)")
        return delivered
