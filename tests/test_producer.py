"""Tests for stream/producer.py and words.py: writing items into a chain."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import pytest

from linkstream.options import StreamOptions
from linkstream.stream import End, Failure, Link, Settlement, Value, create_link_stream, peek_state
from linkstream.stream.producer import _producer_tasks
from linkstream.words import ProductionFailure, count_words, start_word_stream


async def _drain(head: Settlement[Link[str]]) -> list[Link[str]]:
    """Await every link of a chain, in order."""
    links: list[Link[str]] = []
    current = head
    while True:
        link = await current
        links.append(link)
        if not isinstance(link, Value):
            return links
        current = link.next


async def _letters() -> AsyncIterator[str]:
    for letter in "abc":
        await asyncio.sleep(0)
        yield letter


async def _fails_after_one() -> AsyncIterator[str]:
    yield "a"
    await asyncio.sleep(0)
    raise ValueError("boom")


def _broken_factory() -> AsyncIterator[str]:
    raise ProductionFailure("cannot start")


@pytest.mark.asyncio()
async def test_head_returned_before_any_item() -> None:
    head = create_link_stream(_letters)
    assert not head.settled()
    links = await _drain(head)
    assert [link.item for link in links if isinstance(link, Value)] == ["a", "b", "c"]
    assert isinstance(links[-1], End)


@pytest.mark.asyncio()
async def test_failure_mid_stream_terminates_chain() -> None:
    links = await _drain(create_link_stream(_fails_after_one))
    assert len(links) == 2
    first, last = links
    assert isinstance(first, Value) and first.item == "a"
    assert isinstance(last, Failure)
    assert isinstance(last.cause, ValueError)


@pytest.mark.asyncio()
async def test_factory_failure_becomes_head_failure() -> None:
    links = await _drain(create_link_stream(_broken_factory))
    assert len(links) == 1
    assert isinstance(links[0], Failure)
    assert str(links[0].cause) == "cannot start"


@pytest.mark.asyncio()
async def test_production_runs_without_readers() -> None:
    head = start_word_stream(StreamOptions(words=3, delay_ms=1))
    for _ in range(100):
        if peek_state(head).terminal:
            break
        await asyncio.sleep(0.01)
    state = peek_state(head)
    assert state.phase == "done"
    assert state.items == ("1", "2", "3")


@pytest.mark.asyncio()
async def test_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="linkstream.stream.producer"):
        await _drain(create_link_stream(_fails_after_one, name="flaky"))
    assert "Stream flaky failed after 1 item(s)" in caplog.text


@pytest.mark.asyncio()
async def test_count_words_yields_decimal_strings() -> None:
    words = [w async for w in count_words(StreamOptions(words=4, delay_ms=1))]
    assert words == ["1", "2", "3", "4"]


@pytest.mark.asyncio()
async def test_count_words_fails_at_fifth_word() -> None:
    seen: list[str] = []
    with pytest.raises(ProductionFailure, match="Error at 5th word"):
        async for word in count_words(StreamOptions(words=10, delay_ms=1, throw_error=True)):
            seen.append(word)
    assert seen == ["1", "2", "3", "4"]


@pytest.mark.asyncio()
async def test_count_words_failure_flag_ignored_below_five() -> None:
    options = StreamOptions(words=4, delay_ms=1, throw_error=True)
    assert [w async for w in count_words(options)] == ["1", "2", "3", "4"]


@pytest.mark.asyncio()
async def test_cancelled_producer_settles_failure_for_readers() -> None:
    release = asyncio.Event()

    async def _stalls_after_one() -> AsyncIterator[str]:
        yield "a"
        await release.wait()
        yield "b"

    head = create_link_stream(_stalls_after_one, name="stalled")
    reader = asyncio.create_task(_drain(head))
    await asyncio.sleep(0.01)
    (task,) = [t for t in _producer_tasks if t.get_name() == "linkstream-producer-stalled"]
    task.cancel()

    links = await asyncio.wait_for(reader, 1)
    assert task.cancelled()
    assert [link.item for link in links if isinstance(link, Value)] == ["a"]
    assert isinstance(links[-1], Failure)
    assert isinstance(links[-1].cause, asyncio.CancelledError)
    assert peek_state(head).phase == "error"
