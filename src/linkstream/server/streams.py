"""In-memory registry of running and finished streams for the server.

The store only holds references to chain heads. Dropping a stream from the
store never stops its producer; the chain lives as long as something
references it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from linkstream.options import StreamOptions
from linkstream.server.models import StreamInfo
from linkstream.stream import Link, Settlement, StreamState, peek_state
from linkstream.words import start_word_stream

_log = logging.getLogger(__name__)


@dataclass
class StreamRecord:
    """Metadata and head of one production run."""

    info: StreamInfo
    head: Settlement[Link[str]]
    last_active: datetime


class StreamStore:
    """Thread-safe map from stream id to its chain head."""

    def __init__(self) -> None:
        self._records: dict[str, StreamRecord] = {}
        self._lock = threading.Lock()

    def start(self, options: StreamOptions) -> StreamInfo:
        """Start a word stream and register it. Needs a running event loop."""
        sid = uuid4().hex
        head = start_word_stream(options, name=sid)
        info = StreamInfo(
            id=sid,
            words=options.words,
            delay=options.delay_ms,
            throw_error=options.throw_error,
        )
        with self._lock:
            self._records[sid] = StreamRecord(info=info, head=head, last_active=info.created_at)
        _log.info(
            "Started stream %s (words=%d delay=%dms throw_error=%s)",
            sid,
            options.words,
            options.delay_ms,
            options.throw_error,
        )
        return info

    def get(self, stream_id: str) -> StreamRecord | None:
        """Return the record for a stream or None if not found."""
        with self._lock:
            return self._records.get(stream_id)

    def attach(self, stream_id: str) -> Settlement[Link[str]] | None:
        """Return the head for a new reader and mark the stream active."""
        with self._lock:
            record = self._records.get(stream_id)
            if record is None:
                return None
            record.last_active = datetime.now(UTC)
            return record.head

    def list_all(self) -> list[StreamInfo]:
        with self._lock:
            return [record.info for record in self._records.values()]

    def delete(self, stream_id: str) -> bool:
        """Forget a stream. Returns True if it existed."""
        with self._lock:
            return self._records.pop(stream_id, None) is not None

    def state(self, stream_id: str) -> StreamState[str] | None:
        """Return what the stream has produced so far, or None if unknown."""
        record = self.get(stream_id)
        if record is None:
            return None
        return peek_state(record.head)

    def backdate_last_active(self, stream_id: str, timestamp: datetime) -> None:
        """Set last-active to *timestamp* (for testing)."""
        with self._lock:
            self._records[stream_id].last_active = timestamp

    def remove_stale(
        self,
        ttl_seconds: int,
        active_streams: set[str],
    ) -> list[str]:
        """Remove finished streams with no attached readers that haven't been
        touched within *ttl_seconds*.

        Returns the list of removed stream IDs.
        """
        now = datetime.now(UTC)
        removed: list[str] = []
        with self._lock:
            for sid, record in list(self._records.items()):
                if sid in active_streams or not peek_state(record.head).terminal:
                    continue
                if (now - record.last_active).total_seconds() > ttl_seconds:
                    del self._records[sid]
                    removed.append(sid)
        return removed
