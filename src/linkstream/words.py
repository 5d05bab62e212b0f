"""Timed word counter used as the item source for demo streams.

Dependencies: options.py, stream/producer.py
Wired in: server/streams.py → StreamStore.start(), cli.py → run_demo()
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from linkstream.options import StreamOptions
from linkstream.stream import Link, Settlement, create_link_stream

FAILURE_INDEX = 4


class ProductionFailure(Exception):
    """Raised by an item source to terminate its stream abnormally."""


async def count_words(options: StreamOptions) -> AsyncIterator[str]:
    """Yield ``"1"`` .. ``str(words)``, sleeping ``delay`` before each one."""
    for i in range(options.words):
        await asyncio.sleep(options.delay_seconds)
        if options.throw_error and i == FAILURE_INDEX:
            raise ProductionFailure("Error at 5th word")
        yield str(i + 1)


def start_word_stream(options: StreamOptions, *, name: str = "words") -> Settlement[Link[str]]:
    """Start counting into a new chain; returns its head immediately."""
    return create_link_stream(lambda: count_words(options), name=name)
