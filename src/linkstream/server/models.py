"""Pydantic models for server API requests, responses, and WebSocket messages."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from linkstream import __version__

# --- REST models ---


class StreamInfo(BaseModel):
    """Stream metadata returned by create/list endpoints."""

    id: str
    words: int
    delay: int
    throw_error: bool
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class StreamSnapshot(BaseModel):
    """Accumulated state of a stream as seen from its settled links."""

    phase: str
    items: list[str]
    error: str | None = None


class StreamDetail(BaseModel):
    """GET /api/streams/{id} response."""

    info: StreamInfo
    state: StreamSnapshot


class HealthResponse(BaseModel):
    """GET /api/health response."""

    status: str = "ok"
    version: str = __version__


# --- WebSocket models ---


class WSIncoming(BaseModel):
    """Incoming WebSocket message from client."""

    op: str
    data: dict[str, Any] = Field(default_factory=dict)


class WSOutgoing(BaseModel):
    """Outgoing WebSocket message to client."""

    op: str
    data: dict[str, Any] = Field(default_factory=dict)
