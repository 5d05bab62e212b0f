"""Consumer state machine: fold a chain into observable snapshots.

A ``StreamConsumer`` walks a chain from its head, accumulating items into a
private ``StreamState`` and emitting a snapshot on every transition. Walks are
read-only, so any number of consumers may follow the same chain, at any time,
without affecting each other or the producer.

Dependencies: stream/links.py, stream/settlement.py
Wired in: server/routes.py → websocket_endpoint(), cli.py → run_demo()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

from linkstream.stream.links import End, Failure, Link, Value
from linkstream.stream.settlement import Settlement

_log = logging.getLogger(__name__)

T = TypeVar("T")


class StreamPhase(StrEnum):
    IDLE = "idle"
    STREAMING = "streaming"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class StreamState(Generic[T]):
    """Immutable snapshot of what a consumer has observed so far."""

    phase: StreamPhase = StreamPhase.IDLE
    items: tuple[T, ...] = field(default_factory=tuple)
    error: BaseException | None = None

    @property
    def terminal(self) -> bool:
        return self.phase in (StreamPhase.DONE, StreamPhase.ERROR)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form; the error is rendered as its message."""
        return {
            "phase": self.phase.value,
            "items": list(self.items),
            "error": str(self.error) if self.error is not None else None,
        }


SnapshotCallback = Callable[[StreamState[T]], None]


def _ends_here(nxt: Settlement[Link[T]]) -> bool:
    """True when ``nxt`` is already settled with ``End``."""
    return nxt.settled() and isinstance(nxt.outcome(), End)


def peek_state(head: Settlement[Link[T]]) -> StreamState[T]:
    """Reconstruct the state visible right now from already-settled links."""
    items: list[T] = []
    current = head
    while current.settled():
        match current.outcome():
            case Value(item=item, next=nxt):
                items.append(item)
                current = nxt
            case End():
                return StreamState(StreamPhase.DONE, tuple(items))
            case Failure(cause=cause):
                return StreamState(StreamPhase.ERROR, tuple(items), cause)
            case invalid:
                _log.error("Invalid stream link %r", invalid)
                break
    phase = StreamPhase.STREAMING if items else StreamPhase.IDLE
    return StreamState(phase, tuple(items))


class StreamConsumer(Generic[T]):
    """Walk one chain into snapshots, with cooperative cancellation.

    Cancellation is checked after every settlement observation. Once set, the
    walk stops and no further snapshots are emitted. It only detaches this
    reader: the chain and its producer are untouched.
    """

    def __init__(
        self,
        head: Settlement[Link[T]],
        on_snapshot: SnapshotCallback[T] | None = None,
    ) -> None:
        self._head = head
        self._on_snapshot = on_snapshot
        self._state: StreamState[T] = StreamState()
        self._cancelled = False

    @property
    def state(self) -> StreamState[T]:
        """The most recently emitted snapshot."""
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Detach this consumer. Takes effect at the next settlement."""
        self._cancelled = True

    def _emit(self, state: StreamState[T]) -> StreamState[T]:
        self._state = state
        return state

    async def snapshots(self) -> AsyncIterator[StreamState[T]]:
        """Walk the chain, yielding a snapshot per state transition.

        The first snapshot is ``idle``; the last is ``done`` or ``error``
        unless the consumer is cancelled first.
        """
        if self._cancelled:
            return
        state: StreamState[T] = StreamState()
        yield self._emit(state)

        current = self._head
        while True:
            link = await current
            if self._cancelled:
                _log.debug("Consumer detached after %d item(s)", len(state.items))
                return
            match link:
                case Value(item=item, next=nxt):
                    items = (*state.items, item)
                    if _ends_here(nxt):
                        yield self._emit(StreamState(StreamPhase.DONE, items))
                        return
                    state = StreamState(StreamPhase.STREAMING, items)
                    yield self._emit(state)
                    current = nxt
                case End():
                    yield self._emit(StreamState(StreamPhase.DONE, state.items))
                    return
                case Failure(cause=cause):
                    yield self._emit(StreamState(StreamPhase.ERROR, state.items, cause))
                    return
                case _:
                    _log.error("Invalid stream link %r", link)
                    return

    async def run(self) -> StreamState[T]:
        """Walk to the end (or until cancelled) and return the last snapshot."""
        async for state in self.snapshots():
            if self._on_snapshot is not None:
                self._on_snapshot(state)
        return self._state

    def start(self) -> asyncio.Task[StreamState[T]]:
        """Run the walk as a background task."""
        return asyncio.create_task(self.run(), name="linkstream-consumer")
