"""The servo capability: inputs, outputs and the abstract control law.

Any control law the engine can drive subclasses :class:`Servo` and
implements ``read`` and ``name``. The engine only ever talks to this
interface, never to a concrete controller type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .types import Seconds, to_seconds


__all__ = [
    'ControlValue',
    'ServoInput',
    'Servo',
]


@dataclass(frozen=True)
class ControlValue:
    """Scalar control output returned by a servo.

    Attributes:
        value: Control output in the process's own units
    """
    value: float

    def __float__(self) -> float:
        return float(self.value)


@dataclass(frozen=True)
class ServoInput:
    """Per-call input handed to :meth:`Servo.read`.

    Attributes:
        process_value: Current reading of the controlled process
        delta_t: Seconds since the previous accepted sample, or None for the
            first sample of a stream
    """
    process_value: float
    delta_t: Optional[Seconds] = None

    def __post_init__(self):
        """Normalize and validate the fields."""
        object.__setattr__(self, 'process_value', float(self.process_value))
        if self.delta_t is not None:
            object.__setattr__(self, 'delta_t', to_seconds(self.delta_t))

    @property
    def is_bootstrap(self) -> bool:
        """True when no elapsed time is available."""
        return self.delta_t is None


class Servo(ABC):
    """Base class for control laws driven by an :class:`~pidloop.engine.Engine`.

    ``read`` must depend only on the servo's own state and the given input.
    Failures are reported by raising :class:`~pidloop.errors.InvalidInputError`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Descriptive label for diagnostics and logging"""
        pass

    @abstractmethod
    def read(self, servo_input: ServoInput) -> ControlValue:
        """Compute the control output for one sample"""
        pass

    def __str__(self) -> str:
        return self.name
