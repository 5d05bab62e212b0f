"""FastAPI application setup and route registration."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from linkstream import __version__
from linkstream.server.connections import ConnectionManager
from linkstream.server.routes import configure_routes, router
from linkstream.server.streams import StreamStore

_log = logging.getLogger(__name__)

_manager = ConnectionManager()
_streams = StreamStore()

_DEFAULT_STREAM_TTL_SECONDS: int = 30 * 60  # 30 minutes
_CLEANUP_INTERVAL_SECONDS: int = 5 * 60  # check every 5 minutes
_cleanup_task: asyncio.Task[None] | None = None  # set during lifespan


def install_stores(
    streams: StreamStore, manager: ConnectionManager
) -> tuple[StreamStore, ConnectionManager]:
    """Route requests to ``streams`` and ``manager``; returns the pair they replace."""
    global _streams, _manager
    previous = (_streams, _manager)
    _streams, _manager = streams, manager
    configure_routes(streams, manager)
    return previous


def stream_ttl_seconds() -> int:
    """Idle time after which finished streams are dropped from the store."""
    raw = os.getenv("LINKSTREAM_STREAM_TTL_SECONDS")
    try:
        return int(raw) if raw else _DEFAULT_STREAM_TTL_SECONDS
    except ValueError:
        _log.warning("Ignoring invalid LINKSTREAM_STREAM_TTL_SECONDS=%r", raw)
        return _DEFAULT_STREAM_TTL_SECONDS


def cleanup_stale_streams() -> list[str]:
    """Drop finished, unwatched streams older than the TTL."""
    removed = _streams.remove_stale(
        ttl_seconds=stream_ttl_seconds(),
        active_streams=set(_manager.active_streams()),
    )
    if removed:
        _log.info("Cleaned up %d stale stream(s): %s", len(removed), removed)
    return removed


async def _cleanup_loop() -> None:
    while True:
        await asyncio.sleep(_CLEANUP_INTERVAL_SECONDS)
        try:
            cleanup_stale_streams()
        except Exception:
            _log.exception("Error during stream cleanup")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup/shutdown hooks."""
    global _cleanup_task
    _log.info("linkstream server starting")
    _cleanup_task = asyncio.create_task(_cleanup_loop())
    yield
    _log.info("linkstream server shutting down")
    _cleanup_task.cancel()


app = FastAPI(
    title="linkstream",
    version=__version__,
    lifespan=lifespan,
)

configure_routes(_streams, _manager)
app.include_router(router)
