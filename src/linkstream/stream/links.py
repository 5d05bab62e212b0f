"""Chain positions: an item with a handle to the next position, or a sentinel.

A chain is a singly-linked, write-once list. Each ``Value`` holds the
settlement for the position after it; ``End`` and ``Failure`` terminate it.

Dependencies: stream/settlement.py
Wired in: stream/producer.py, stream/consumer.py
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

from linkstream.stream.settlement import Settlement

T = TypeVar("T")


@dataclass(frozen=True)
class Value(Generic[T]):
    """One produced item and the settlement for the following position."""

    item: T
    next: Settlement[Link[T]]


@dataclass(frozen=True)
class End:
    """The sequence finished normally."""


@dataclass(frozen=True)
class Failure:
    """The sequence terminated abnormally. No links follow."""

    cause: BaseException


Link: TypeAlias = Value[T] | End | Failure
