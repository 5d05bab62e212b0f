"""Production driver: walk an async item source and write it into a chain.

``create_link_stream`` returns the head settlement immediately and spawns a
detached task that settles one link per produced item. The task is never
throttled by readers and keeps running when every reader has detached.

Dependencies: stream/links.py, stream/settlement.py
Wired in: words.py → start_word_stream()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import TypeVar

from linkstream.stream.links import End, Failure, Link, Value
from linkstream.stream.settlement import Settlement

_log = logging.getLogger(__name__)

T = TypeVar("T")

ItemSourceFactory = Callable[[], AsyncIterator[T]]

# The event loop only keeps weak references to tasks.
_producer_tasks: set[asyncio.Task[None]] = set()


async def _drive(
    factory: ItemSourceFactory[T],
    head: Settlement[Link[T]],
    name: str,
) -> None:
    """Settle ``head`` and its successors from the items of ``factory()``."""
    current = head
    produced = 0
    try:
        async for item in factory():
            nxt: Settlement[Link[T]] = Settlement()
            current.settle(Value(item, nxt))
            current = nxt
            produced += 1
    except asyncio.CancelledError as exc:
        _log.warning("Stream %s cancelled after %d item(s)", name, produced)
        current.settle(Failure(exc))
        raise
    except Exception as exc:
        _log.warning("Stream %s failed after %d item(s): %s", name, produced, exc)
        current.settle(Failure(exc))
        return
    current.settle(End())
    _log.info("Stream %s finished with %d item(s)", name, produced)


def create_link_stream(
    factory: ItemSourceFactory[T],
    *,
    name: str = "stream",
) -> Settlement[Link[T]]:
    """Start producing ``factory()`` into a new chain and return its head.

    Must be called with a running event loop. Failures raised by the source,
    including by ``factory`` itself, become a terminal ``Failure`` link and
    are never raised to the caller. Cancelling the producer task settles a
    ``Failure`` carrying the ``CancelledError`` so waiting readers still finish.
    """
    head: Settlement[Link[T]] = Settlement()
    task = asyncio.create_task(_drive(factory, head, name), name=f"linkstream-producer-{name}")
    _producer_tasks.add(task)
    task.add_done_callback(_producer_tasks.discard)
    _log.debug("Stream %s production started", name)
    return head
