"""
WebSocket connection manager for the live-update channel.
Tracks connected viewers and broadcasts mark events to all of them.
"""

import asyncio
import logging
from typing import Set

from fastapi import WebSocket

from markboard.models import Mark
from markboard.schemas import mark_to_json

logger = logging.getLogger(__name__)

MARK_CREATED = "mark.created"
MARK_EXPIRED = "mark.expired"


class ConnectionManager:
    """Fans out events to every connected WebSocket. No replay, no persistence."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket):
        """Accept WebSocket connection and add to active connections."""
        await websocket.accept()

        async with self._lock:
            self.active_connections.add(websocket)

        logger.info(f"WebSocket connected, total_connections={len(self.active_connections)}")

    async def disconnect(self, websocket: WebSocket):
        """Remove WebSocket connection from active connections."""
        async with self._lock:
            self.active_connections.discard(websocket)

        logger.info(f"WebSocket disconnected, total_connections={len(self.active_connections)}")

    async def broadcast(self, message: dict) -> int:
        """Send message to every connection; returns how many sends succeeded."""
        async with self._lock:
            connections = list(self.active_connections)

        disconnected = []
        sent = 0
        for websocket in connections:
            try:
                await websocket.send_json(message)
                sent += 1
            except Exception as e:
                logger.warning(f"Dropping WebSocket after failed send of {message.get('type')}: {e}")
                disconnected.append(websocket)

        # Clean up disconnected sockets
        if disconnected:
            async with self._lock:
                for ws in disconnected:
                    self.active_connections.discard(ws)

        logger.debug(f"Broadcast {message.get('type')} to {sent}/{len(connections)} connection(s)")
        return sent

    async def publish_created(self, mark: Mark) -> int:
        return await self.broadcast({"type": MARK_CREATED, "data": mark_to_json(mark)})

    async def publish_expired(self, mark_id: str) -> int:
        return await self.broadcast({"type": MARK_EXPIRED, "data": {"id": mark_id}})

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)


# Global instance
manager = ConnectionManager()
