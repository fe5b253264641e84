"""Live event delivery to open WebSocket connections.

Delivery is best-effort: events for users without an open connection are
dropped, and a socket that fails to send is disconnected.
"""

import asyncio
import logging
from collections import defaultdict
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self._connections: dict[int, list[WebSocket]] = defaultdict(list)
        self._pending: set[asyncio.Task] = set()

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections[user_id].append(websocket)
        logger.info("User %s connected (%s open)", user_id, len(self._connections[user_id]))

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        sockets = self._connections.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self._connections.pop(user_id, None)

    def is_online(self, user_id: int) -> bool:
        return bool(self._connections.get(user_id))

    async def send_to_user(self, user_id: int, event: str, data: dict) -> int:
        delivered = 0
        for websocket in list(self._connections.get(user_id, [])):
            try:
                await websocket.send_json({"event": event, "data": data})
                delivered += 1
            except Exception:
                logger.warning("Dropping dead connection for user %s", user_id)
                self.disconnect(user_id, websocket)
        return delivered

    def publish(self, user_id: int, event: str, data: dict) -> None:
        """Schedule delivery of an event without waiting for it."""
        if not self.is_online(user_id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, %s for user %s not delivered", event, user_id)
            return
        task = loop.create_task(self.send_to_user(user_id, event, data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


manager = ConnectionManager()
