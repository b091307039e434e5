"""Stateful discrete PID controller implementing the servo capability.

Wraps the pure kernel with the history and gains of one control loop.
For JAX power users, ``.runtime`` and ``.state`` are exposed so the kernel
functions can be driven directly (for example with ``pid_scan``).
"""

from __future__ import annotations

import logging
from typing import Union, Tuple, Optional

import jax.numpy as jnp

from ..errors import InvalidInputError
from ..servo import ControlValue, Servo, ServoInput
from ..runtime import PidState
from .config import PidConfig, PidBuilder
from .kernel import pid_bootstrap_step, pid_step, pid_step_with_diagnostics


logger = logging.getLogger(__name__)

ZERO_DELTA_T_MESSAGE = "Delta t cannot be zero for discrete PID approximation."


class PidController(Servo):
    """Discrete PID controller in recurrence form.

    The first sample of a stream (no ``delta_t``) gets a proportional-only
    response. Every later sample applies the backward-difference recurrence
    over the previous output and the last two errors. Gains can be changed
    between reads; the new value is used on the next read and history is
    kept as is.

    Example:
        >>> controller = PidController.builder().set_point(15.0).proportional(10.0).build()
        >>> controller.read(ServoInput(process_value=10.0)).value
        50.0

    Args:
        params: Either a PidConfig or a bare set point (all gains 0.0)
        dtype: JAX dtype used for runtime values and history

    Attributes:
        config: The PidConfig currently in effect
        runtime: JAX-ready PidRuntime built from ``config``
        state: Current PidState history
    """

    def __init__(
        self,
        params: Union[PidConfig, float] = 0.0,
        *,
        dtype: jnp.dtype = jnp.float64
    ):
        if isinstance(params, PidConfig):
            self.config = params
        else:
            self.config = PidConfig(set_point=params)

        self.dtype = dtype
        self.runtime = self.config.to_runtime(dtype=dtype)
        self.state = PidState.zero(dtype=dtype)

    @classmethod
    def builder(cls) -> PidBuilder:
        """Start a fluent PidBuilder."""
        return PidBuilder()

    @classmethod
    def from_config(cls, config: PidConfig, *, dtype: jnp.dtype = jnp.float64) -> PidController:
        return cls(config, dtype=dtype)

    @property
    def name(self) -> str:
        return f"{type(self).__module__}.{type(self).__qualname__}"

    def __repr__(self) -> str:
        return (
            f"PidController(set_point={self.set_point}, proportional={self.proportional}, "
            f"integral={self.integral}, derivative={self.derivative})"
        )

    # Parameters

    @property
    def set_point(self) -> float:
        return self.config.set_point

    @property
    def proportional(self) -> float:
        return self.config.proportional

    @property
    def integral(self) -> float:
        return self.config.integral

    @property
    def derivative(self) -> float:
        return self.config.derivative

    def set_proportional_term(self, value: float):
        """Replace Kp; history is untouched."""
        self._set_gain("proportional", "kp", value)

    def set_integral_term(self, value: float):
        """Replace Ki; history is untouched."""
        self._set_gain("integral", "ki", value)

    def set_derivative_term(self, value: float):
        """Replace Kd; history is untouched."""
        self._set_gain("derivative", "kd", value)

    def _set_gain(self, field: str, runtime_field: str, value: float):
        self.config = self.config.with_updates(**{field: value})
        self.runtime = self.runtime.replace_gain(runtime_field, getattr(self.config, field))
        logger.debug("%s: %s set to %s", self.name, field, value)

    # History

    @property
    def last_control_value(self) -> Optional[float]:
        return self.state.optional_last_control_value()

    @property
    def last_error_term(self) -> Optional[float]:
        return self.state.optional_last_error()

    @property
    def last_last_error_term(self) -> Optional[float]:
        return self.state.optional_last_last_error()

    def clear_history(self):
        """Forget previous outputs and errors. Gains and set point are kept."""
        self.state = PidState.zero(dtype=self.dtype)

    def get_state(self) -> dict:
        """Get current history as a dictionary of Python floats (or None).

        Returns:
            Dictionary with history values
        """
        return {
            'last_control_value': self.last_control_value,
            'last_error_term': self.last_error_term,
            'last_last_error_term': self.last_last_error_term,
        }

    # Servo capability

    def read(self, servo_input: ServoInput) -> ControlValue:
        """Compute the control output for one sample.

        Args:
            servo_input: Process reading and elapsed time since the previous one

        Returns:
            ControlValue with the new output

        Raises:
            InvalidInputError: If ``delta_t`` is zero
        """
        process_value = jnp.array(servo_input.process_value, dtype=self.dtype)

        if servo_input.is_bootstrap:
            self.state, output = pid_bootstrap_step(self.runtime, self.state, process_value)
        else:
            dt = self._checked_dt(servo_input.delta_t)
            self.state, output = pid_step(self.runtime, self.state, process_value, dt)

        return ControlValue(value=float(output))

    def read_with_diagnostics(self, servo_input: ServoInput) -> Tuple[ControlValue, dict]:
        """Like read() but also return intermediate recurrence values.

        Bootstrap samples report only the error and the proportional output.

        Returns:
            Tuple of (control_value, diagnostics_dict)

        Raises:
            InvalidInputError: If ``delta_t`` is zero
        """
        process_value = jnp.array(servo_input.process_value, dtype=self.dtype)

        if servo_input.is_bootstrap:
            self.state, output = pid_bootstrap_step(self.runtime, self.state, process_value)
            diag_dict = {
                'bootstrap': True,
                'error': float(self.state.last_error),
                'output': float(output),
            }
            return ControlValue(value=float(output)), diag_dict

        dt = self._checked_dt(servo_input.delta_t)
        self.state, output, diagnostics = pid_step_with_diagnostics(
            self.runtime, self.state, process_value, dt
        )

        # Convert diagnostics to Python floats
        diag_dict = {k: float(v) for k, v in diagnostics.items()}
        diag_dict['bootstrap'] = False
        return ControlValue(value=float(output)), diag_dict

    def _checked_dt(self, delta_t: float):
        if delta_t == 0:
            raise InvalidInputError(ZERO_DELTA_T_MESSAGE)
        return jnp.array(delta_t, dtype=self.dtype)
