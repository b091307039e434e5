"""Error types raised by servos and the engine."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a measurement or servo input cannot be processed.

    This is the only error kind the control core reports. It covers a
    measurement without a timestamp, a timestamp that does not advance past
    the previous one, and a zero elapsed time handed to the discrete PID
    recurrence. Callers decide whether to log, skip or abort.

    Attributes:
        message: Human-readable description of what was rejected
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"InvalidInputError({self.message!r})"
