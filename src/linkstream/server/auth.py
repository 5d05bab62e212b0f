"""Optional shared-secret check for stream endpoints.

Auth is disabled unless ``LINKSTREAM_API_KEY`` is set. Clients send the key
in the ``X-API-Key`` header on both HTTP requests and WebSocket upgrades.
"""

from __future__ import annotations

import os
import secrets

from fastapi import HTTPException, Request, WebSocket, status

API_KEY_HEADER = "X-API-Key"


def get_api_key() -> str | None:
    """Return the configured key, or None when auth is disabled."""
    return os.getenv("LINKSTREAM_API_KEY")


def _accepts(provided: str) -> bool:
    expected = get_api_key()
    if expected is None:
        return True
    return bool(provided) and secrets.compare_digest(provided, expected)


def verify_api_key(request: Request) -> None:
    """FastAPI dependency: reject requests without the configured key."""
    if not _accepts(request.headers.get(API_KEY_HEADER, "")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )


async def verify_ws_api_key(websocket: WebSocket) -> bool:
    """Return True if the WebSocket upgrade carries an acceptable key."""
    return _accepts(websocket.headers.get(API_KEY_HEADER, ""))
