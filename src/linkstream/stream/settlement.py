"""Single-assignment future shared by one writer and many readers.

Dependencies: (stdlib only)
Wired in: stream/producer.py → create_link_stream(), stream/consumer.py
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SettlementError(RuntimeError):
    """Raised when a settlement is settled more than once."""


class Settlement(Generic[T]):
    """A one-shot cell: settled exactly once, awaited any number of times.

    Readers await through :func:`asyncio.shield`, so cancelling a waiting
    task detaches that reader without cancelling the underlying future.
    """

    __slots__ = ("_future",)

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    def settle(self, outcome: T) -> None:
        """Assign the outcome. A second call raises :class:`SettlementError`."""
        if self._future.done():
            raise SettlementError("settlement already settled")
        self._future.set_result(outcome)

    def settled(self) -> bool:
        """Return True once an outcome has been assigned."""
        return self._future.done()

    def outcome(self) -> T:
        """Return the outcome without waiting.

        Raises :class:`asyncio.InvalidStateError` if not yet settled.
        """
        return self._future.result()

    async def wait(self) -> T:
        """Wait for the outcome; returns immediately once settled."""
        if self._future.done():
            return self._future.result()
        return await asyncio.shield(self._future)

    def __await__(self) -> Generator[Any, None, T]:
        return self.wait().__await__()

    def __repr__(self) -> str:
        state = "settled" if self._future.done() else "pending"
        return f"<Settlement {state}>"
