"""Track which WebSocket readers are attached to which stream."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

_log = logging.getLogger(__name__)


class ConnectionManager:
    """Per-stream registry of attached WebSocket clients.

    Each client walks the chain with its own consumer; the manager only
    records attachment so idle-stream cleanup can skip watched streams.
    """

    def __init__(self) -> None:
        self._connections: dict[str, list[WebSocket]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def connect(self, stream_id: str, websocket: WebSocket) -> None:
        """Accept and register a WebSocket connection for a stream."""
        await websocket.accept()
        async with self._lock:
            self._connections[stream_id].append(websocket)
        _log.info(
            "Reader attached to stream %s (%d total)", stream_id, self.client_count(stream_id)
        )

    async def disconnect(self, stream_id: str, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from a stream."""
        async with self._lock:
            clients = self._connections.get(stream_id, [])
            if websocket in clients:
                clients.remove(websocket)
            if not clients:
                self._connections.pop(stream_id, None)
        _log.info("Reader detached from stream %s", stream_id)

    def client_count(self, stream_id: str) -> int:
        """Return number of connected clients for a stream."""
        return len(self._connections.get(stream_id, []))

    def active_streams(self) -> list[str]:
        """Return list of stream IDs with attached readers."""
        return list(self._connections.keys())
