"""Route handlers for the FastAPI server."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any
from urllib.parse import parse_qsl

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import ValidationError

from linkstream.options import StreamOptions
from linkstream.server.auth import verify_api_key, verify_ws_api_key
from linkstream.server.connections import ConnectionManager
from linkstream.server.models import (
    HealthResponse,
    StreamDetail,
    StreamInfo,
    StreamSnapshot,
    WSIncoming,
    WSOutgoing,
)
from linkstream.server.streams import StreamStore
from linkstream.stream import StreamConsumer

_log = logging.getLogger(__name__)

router = APIRouter()

WS_CLOSE_UNAUTHORIZED = 4001
WS_CLOSE_NOT_FOUND = 4004

# These are set by ``configure_routes`` before the app starts serving.
_streams: StreamStore
_manager: ConnectionManager


def configure_routes(streams: StreamStore, manager: ConnectionManager) -> None:
    """Bind the shared stores used by all route handlers."""
    global _streams, _manager
    _streams = streams
    _manager = manager


async def _read_fields(request: Request) -> dict[str, Any]:
    """Read request fields from a JSON object or a urlencoded form body."""
    body = await request.body()
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            parsed = json.loads(body or b"{}")
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    # A repeated form key keeps its first value.
    fields: dict[str, Any] = {}
    for key, value in parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True):
        fields.setdefault(key, value)
    return fields


# --- Health ---


@router.get("/api/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


# --- Streams ---


@router.post(
    "/api/streams",
    response_model=StreamInfo,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_api_key)],
)
async def create_stream(request: Request) -> StreamInfo:
    """Start a new word stream. Malformed options fall back to defaults."""
    options = StreamOptions.from_raw(await _read_fields(request))
    return _streams.start(options)


@router.get(
    "/api/streams",
    response_model=list[StreamInfo],
    dependencies=[Depends(verify_api_key)],
)
async def list_streams() -> list[StreamInfo]:
    """List all known streams."""
    return _streams.list_all()


@router.get(
    "/api/streams/{stream_id}",
    response_model=StreamDetail,
    dependencies=[Depends(verify_api_key)],
)
async def get_stream(stream_id: str) -> StreamDetail:
    """Return stream metadata and everything produced so far."""
    record = _streams.get(stream_id)
    state = _streams.state(stream_id)
    if record is None or state is None:
        raise HTTPException(status_code=404, detail="Stream not found")
    return StreamDetail(info=record.info, state=StreamSnapshot(**state.to_dict()))


@router.delete(
    "/api/streams/{stream_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(verify_api_key)],
)
async def delete_stream(stream_id: str) -> None:
    """Forget a stream. Production, if still running, is not interrupted."""
    if not _streams.delete(stream_id):
        raise HTTPException(status_code=404, detail="Stream not found")


# --- WebSocket ---


async def _send_snapshots(consumer: StreamConsumer[str], websocket: WebSocket) -> None:
    """Forward every snapshot of *consumer* to the client."""
    try:
        async for state in consumer.snapshots():
            await websocket.send_text(
                WSOutgoing(op="snapshot", data=state.to_dict()).model_dump_json()
            )
    except (WebSocketDisconnect, RuntimeError) as exc:
        _log.debug("Snapshot delivery stopped: %s", exc)


@router.websocket("/api/ws/{stream_id}")
async def websocket_endpoint(websocket: WebSocket, stream_id: str) -> None:
    """Attach a reader to a stream and push its snapshots.

    The client may send ``{"op": "abort"}`` to detach this reader; the
    stream keeps producing for everyone else.
    """
    if not await verify_ws_api_key(websocket):
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED, reason="Unauthorized")
        return

    head = _streams.attach(stream_id)
    if head is None:
        await websocket.close(code=WS_CLOSE_NOT_FOUND, reason="Stream not found")
        return

    await _manager.connect(stream_id, websocket)
    consumer: StreamConsumer[str] = StreamConsumer(head)
    sender = asyncio.create_task(_send_snapshots(consumer, websocket))
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = WSIncoming.model_validate_json(raw)
            except ValidationError:
                err = WSOutgoing(op="error", data={"message": "Invalid message format"})
                await websocket.send_text(err.model_dump_json())
                continue

            if msg.op == "abort":
                consumer.cancel()
                ack = WSOutgoing(op="aborted", data=consumer.state.to_dict())
                await websocket.send_text(ack.model_dump_json())
            else:
                err = WSOutgoing(op="error", data={"message": f"Unknown op: {msg.op}"})
                await websocket.send_text(err.model_dump_json())
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        _log.exception("WebSocket error for stream %s", stream_id)
        with contextlib.suppress(Exception):
            err = WSOutgoing(op="error", data={"message": str(exc)})
            await websocket.send_text(err.model_dump_json())
    finally:
        consumer.cancel()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
        await _manager.disconnect(stream_id, websocket)
