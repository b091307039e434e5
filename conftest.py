"""Pytest configuration and shared test utilities."""

import pytest
import numpy as np
import jax.numpy as jnp
from typing import Union

from pidloop import Servo, ServoInput, ControlValue, InvalidInputError


# Default tolerances for float comparisons
# Runtime values are float64; these only absorb rounding in the recurrence
RTOL_DEFAULT = 1e-9  # Relative tolerance
ATOL_DEFAULT = 1e-9  # Absolute tolerance


def assert_close(
    actual: Union[float, jnp.ndarray, np.ndarray],
    expected: Union[float, jnp.ndarray, np.ndarray],
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two values are close within tolerance.

    Handles JAX arrays, NumPy arrays, ControlValues and Python floats
    uniformly.

    Args:
        actual: Actual value
        expected: Expected value
        rtol: Relative tolerance (default: 1e-9)
        atol: Absolute tolerance (default: 1e-9)
        msg: Optional message for assertion failure
    """
    actual_val = float(actual) if hasattr(actual, '__float__') else actual
    expected_val = float(expected) if hasattr(expected, '__float__') else expected

    # Use pytest.approx for nice error messages
    assert actual_val == pytest.approx(expected_val, rel=rtol, abs=atol), (
        f"{msg}\nExpected: {expected_val}\nActual: {actual_val}\n"
        f"Diff: {abs(actual_val - expected_val)}"
    )


def assert_array_close(
    actual: Union[jnp.ndarray, np.ndarray],
    expected: Union[jnp.ndarray, np.ndarray],
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two arrays are close within tolerance.

    Uses numpy.testing.assert_allclose for detailed error messages.
    """
    np.testing.assert_allclose(
        np.asarray(actual), np.asarray(expected),
        rtol=rtol, atol=atol,
        err_msg=msg
    )


class RecordingServo(Servo):
    """Servo that records its inputs and returns a fixed output.

    Set ``fail_with`` to make the next reads raise that error instead.
    """

    def __init__(self, output: float = 0.0):
        self.output = output
        self.inputs = []
        self.fail_with = None

    @property
    def name(self) -> str:
        return "RecordingServo"

    def read(self, servo_input: ServoInput) -> ControlValue:
        self.inputs.append(servo_input)
        if self.fail_with is not None:
            raise self.fail_with
        return ControlValue(value=self.output)


@pytest.fixture
def close():
    """Fixture providing assert_close function.

    Usage:
        def test_something(close):
            close(actual, expected)
    """
    return assert_close


@pytest.fixture
def array_close():
    """Fixture providing assert_array_close function."""
    return assert_array_close


@pytest.fixture
def recording_servo():
    """Fresh RecordingServo returning 0.0."""
    return RecordingServo()


@pytest.fixture
def failing_servo():
    """RecordingServo that always raises InvalidInputError."""
    servo = RecordingServo()
    servo.fail_with = InvalidInputError("servo refused input")
    return servo
