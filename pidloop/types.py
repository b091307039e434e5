"""Static typing helpers for timestamps and durations.

Timestamps are instants on a caller-owned monotonic clock, expressed in
seconds (``time.monotonic()`` is the usual source). Durations are elapsed
seconds between two such instants. The package never reads a clock itself.
"""

from __future__ import annotations

import math
from typing import NewType, Optional

from .errors import InvalidInputError

# NewType aliases for time-like scalars
Timestamp = NewType("Timestamp", float)
Seconds = NewType("Seconds", float)


def to_timestamp(value: float) -> Timestamp:
    """Convert a float to a Timestamp.

    Args:
        value: Instant in seconds on the caller's clock

    Returns:
        Timestamp wrapping the value

    Raises:
        InvalidInputError: If value is NaN or infinite
    """
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInputError(f"Timestamp must be finite, got {value}")
    return Timestamp(value)


def to_seconds(value: float) -> Seconds:
    """Convert a float to a Seconds duration.

    Args:
        value: Elapsed time in seconds

    Returns:
        Seconds wrapping the value

    Raises:
        InvalidInputError: If value is negative or not finite
    """
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInputError(f"Duration must be finite, got {value}")
    if value < 0:
        raise InvalidInputError(f"Duration must be non-negative, got {value}")
    return Seconds(value)


def elapsed(earlier: Timestamp, later: Timestamp) -> Seconds:
    """Duration from ``earlier`` to ``later``.

    The caller guarantees ``later > earlier``; the engine checks this before
    differencing.
    """
    return to_seconds(later - earlier)


def is_after(candidate: Timestamp, previous: Optional[Timestamp]) -> bool:
    """Check that ``candidate`` strictly follows ``previous`` (if any)."""
    return previous is None or candidate > previous
