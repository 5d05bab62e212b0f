"""Tests for stream/settlement.py: the one-shot future."""

from __future__ import annotations

import asyncio
import contextlib

import pytest

from linkstream.stream import Settlement, SettlementError


def test_requires_running_loop() -> None:
    with pytest.raises(RuntimeError):
        Settlement()


@pytest.mark.asyncio()
async def test_settle_then_await_repeatedly() -> None:
    s: Settlement[int] = Settlement()
    s.settle(3)
    assert s.settled()
    assert await s == 3
    assert await s.wait() == 3
    assert s.outcome() == 3


@pytest.mark.asyncio()
async def test_readers_waiting_before_settlement_all_see_outcome() -> None:
    s: Settlement[str] = Settlement()
    waiters = [asyncio.create_task(s.wait()) for _ in range(3)]
    await asyncio.sleep(0)
    assert not any(w.done() for w in waiters)
    s.settle("x")
    assert await asyncio.gather(*waiters) == ["x", "x", "x"]


@pytest.mark.asyncio()
async def test_second_settle_raises() -> None:
    s: Settlement[int] = Settlement()
    s.settle(1)
    with pytest.raises(SettlementError):
        s.settle(2)
    assert s.outcome() == 1


@pytest.mark.asyncio()
async def test_outcome_before_settlement_raises() -> None:
    s: Settlement[int] = Settlement()
    with pytest.raises(asyncio.InvalidStateError):
        s.outcome()


@pytest.mark.asyncio()
async def test_cancelled_reader_does_not_cancel_settlement() -> None:
    s: Settlement[int] = Settlement()
    reader = asyncio.create_task(s.wait())
    await asyncio.sleep(0)
    reader.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await reader
    assert reader.cancelled()
    assert not s.settled()
    s.settle(7)
    assert await s == 7


@pytest.mark.asyncio()
async def test_repr_reflects_state() -> None:
    s: Settlement[int] = Settlement()
    assert "pending" in repr(s)
    s.settle(0)
    assert "settled" in repr(s)


@pytest.mark.asyncio()
async def test_bound_to_running_loop_only() -> None:
    with pytest.raises(TypeError):
        Settlement(asyncio.get_running_loop())  # type: ignore[call-arg]
    s: Settlement[int] = Settlement()
    assert s._future.get_loop() is asyncio.get_running_loop()
