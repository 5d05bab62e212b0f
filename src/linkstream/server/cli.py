"""Server CLI entry point: ``linkstream serve``."""

from __future__ import annotations

import os


def run_server(host: str | None = None, port: int | None = None, log_level: str = "info") -> None:
    """Start the FastAPI server with uvicorn."""
    import uvicorn

    resolved_host = host or os.getenv("LINKSTREAM_HOST", "127.0.0.1")
    resolved_port = port or int(os.getenv("LINKSTREAM_PORT", "8420"))

    uvicorn.run(
        "linkstream.server.app:app",
        host=resolved_host,
        port=resolved_port,
        log_level=log_level.lower(),
    )
