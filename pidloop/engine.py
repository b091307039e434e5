"""Engine that drives a servo from timestamped measurements.

The engine owns exactly one servo. It checks that every measurement carries
a timestamp that strictly follows the previous accepted one, derives the
elapsed time, and hands a :class:`~pidloop.servo.ServoInput` to the servo.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import InvalidInputError
from .servo import ControlValue, Servo, ServoInput
from .types import Timestamp, elapsed, is_after, to_timestamp


__all__ = [
    'Measurement',
    'Engine',
    'MISSING_TIMESTAMP_MESSAGE',
    'STALE_MEASUREMENT_MESSAGE',
]

logger = logging.getLogger(__name__)

MISSING_TIMESTAMP_MESSAGE = "Measurement needs a timestamp"
STALE_MEASUREMENT_MESSAGE = (
    "Failed to execute engine on new measurement that is older than the previous measurement."
)


class Measurement:
    """A process reading and the instant it was taken.

    Owned by the caller and usually reused across iterations of the control
    loop through :meth:`set_value`.

    Attributes:
        value: Process reading
        timestamp: Instant of the reading in seconds, or None if not yet set
    """

    def __init__(self, value: float = 0.0, timestamp: Optional[float] = None):
        self.value = float(value)
        self.timestamp = None if timestamp is None else to_timestamp(timestamp)

    def set_value(self, value: float, timestamp: float):
        """Record a new reading together with its timestamp."""
        self.value = float(value)
        self.timestamp = to_timestamp(timestamp)

    def __repr__(self) -> str:
        return f"Measurement(value={self.value}, timestamp={self.timestamp})"


class Engine:
    """Runs one servo over a strictly monotonic stream of measurements.

    Example:
        >>> engine = Engine(PidController.builder().set_point(200.0).proportional(0.1).build())
        >>> measurement = Measurement()
        >>> measurement.set_value(50.0, time.monotonic())
        >>> output = engine.next(measurement)

    Args:
        servo: Control law to drive; the engine takes sole ownership of it

    Attributes:
        servo: The owned servo
        last_read_timestamp: Timestamp of the last accepted measurement
        num_reads: Number of accepted measurements since creation or reset
    """

    def __init__(self, servo: Servo):
        if not isinstance(servo, Servo):
            raise TypeError(
                f"servo must be a Servo, got {type(servo).__name__}"
            )
        self.servo = servo
        self.last_read_timestamp: Optional[Timestamp] = None
        self.num_reads = 0

    def __str__(self) -> str:
        return f"Engine runner [{self.servo}] has {self.num_reads} total read(s)"

    def reset(self):
        """Clear the engine's timing bookkeeping.

        The servo is left alone: its set point, gains and history survive.
        The next measurement starts a fresh monotonic run and reaches the
        servo without a ``delta_t``.
        """
        self.last_read_timestamp = None
        self.num_reads = 0
        logger.info("%s: reset", self.servo)

    def next(self, measurement: Measurement) -> ControlValue:
        """Feed one measurement to the servo.

        A measurement that passes the timestamp checks counts as a read even
        if the servo then raises.

        Args:
            measurement: Current reading with its timestamp

        Returns:
            The servo's ControlValue, unchanged

        Raises:
            InvalidInputError: If the timestamp is missing or does not strictly
                follow the previous one, or if the servo rejects the input
        """
        timestamp = measurement.timestamp
        if timestamp is None:
            logger.debug("%s: rejected measurement without timestamp", self.servo)
            raise InvalidInputError(MISSING_TIMESTAMP_MESSAGE)

        previous = self.last_read_timestamp
        if not is_after(timestamp, previous):
            logger.debug(
                "%s: rejected measurement at %s, previous was %s",
                self.servo, timestamp, previous
            )
            raise InvalidInputError(STALE_MEASUREMENT_MESSAGE)

        try:
            delta_t = None if previous is None else elapsed(previous, timestamp)
            servo_input = ServoInput(process_value=measurement.value, delta_t=delta_t)
            return self.servo.read(servo_input)
        except InvalidInputError as e:
            logger.warning("%s: servo rejected %s: %s", self.servo, measurement, e)
            raise
        finally:
            self.num_reads += 1
            self.last_read_timestamp = timestamp
