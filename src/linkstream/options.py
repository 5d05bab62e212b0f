"""Production options parsed from raw request fields.

Malformed values never raise: they fall back to the defaults.

Dependencies: (none: leaf module)
Wired in: server/routes.py → create_stream(), cli.py → main()
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_WORDS = 10
DEFAULT_DELAY_MS = 400

# Largest integer a browser form can round-trip exactly.
MAX_SAFE_INTEGER = 2**53 - 1

_INT_RE = re.compile(r"[+-]?\d+")
_TRUTHY = frozenset({"on", "true", "1", "yes"})


@dataclass(frozen=True)
class StreamOptions:
    """Normalized parameters for one production run."""

    words: int = DEFAULT_WORDS
    """Number of items to produce."""

    delay_ms: int = DEFAULT_DELAY_MS
    """Suspension before each item, in milliseconds."""

    throw_error: bool = False
    """Fail when about to produce the 5th item."""

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @classmethod
    def from_raw(cls, raw: Mapping[str, object]) -> StreamOptions:
        """Build options from form/JSON fields (``words``, ``delay``, ``throwError``)."""
        return cls(
            words=positive_int(raw.get("words"), DEFAULT_WORDS),
            delay_ms=positive_int(raw.get("delay"), DEFAULT_DELAY_MS),
            throw_error=flag(raw.get("throwError")),
        )


def positive_int(value: object, default: int) -> int:
    """Return ``value`` as a positive safe integer, or ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        parsed = int(value.strip())
    else:
        return default
    return parsed if 0 < parsed <= MAX_SAFE_INTEGER else default


def flag(value: object) -> bool:
    """Interpret a checkbox-style field."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False
