"""Lazy streams as chains of one-shot settlements.

Public API: End, Failure, Link, Settlement, SettlementError, StreamConsumer,
    StreamPhase, StreamState, Value, create_link_stream, peek_state
Internal: consumer, links, producer, settlement
"""

from linkstream.stream.consumer import StreamConsumer, StreamPhase, StreamState, peek_state
from linkstream.stream.links import End, Failure, Link, Value
from linkstream.stream.producer import create_link_stream
from linkstream.stream.settlement import Settlement, SettlementError

__all__ = [
    "End",
    "Failure",
    "Link",
    "Settlement",
    "SettlementError",
    "StreamConsumer",
    "StreamPhase",
    "StreamState",
    "Value",
    "create_link_stream",
    "peek_state",
]
