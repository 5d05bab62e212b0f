"""CLI argument and version helpers for the linkstream entrypoint."""

from __future__ import annotations

import argparse
import os

from linkstream import __version__
from linkstream.options import DEFAULT_DELAY_MS, DEFAULT_WORDS


def build_parser() -> argparse.ArgumentParser:
    """Build the ``linkstream`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="linkstream",
        description="Produce a word stream and watch it accumulate",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--log-level",
        default=os.getenv("LINKSTREAM_LOG_LEVEL", "INFO"),
        help="Logging level (default: $LINKSTREAM_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Run one stream locally and render it")
    # Raw strings: malformed values fall back to defaults instead of erroring.
    demo.add_argument("--words", default=str(DEFAULT_WORDS), help="Number of words")
    demo.add_argument("--delay", default=str(DEFAULT_DELAY_MS), help="Delay per word (ms)")
    demo.add_argument(
        "--throw-error",
        action="store_true",
        help="Fail when about to produce the 5th word",
    )

    serve = sub.add_parser("serve", help="Run the HTTP/WebSocket server")
    serve.add_argument("--host", default=None, help="Bind host (default: $LINKSTREAM_HOST)")
    serve.add_argument(
        "--port", type=int, default=None, help="Bind port (default: $LINKSTREAM_PORT)"
    )
    return parser


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    return build_parser().parse_args(argv)
