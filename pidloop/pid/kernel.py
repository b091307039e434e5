"""JAX-compatible discrete PID kernel.

The controller output is a fixed-window recurrence over the last output and
the last two errors (backward-difference discretization of the continuous
PID transfer function):

    u[k] = u[k-1]
         + e[k]   * (Kp + Ki*dt + Kd/dt)
         + e[k-1] * (-Kp - 2*Kd/dt)
         + e[k-2] * (Kd/dt)

No integral is accumulated, so gains can change between samples without
rescaling any stored state. All functions here are pure; the zero-``dt``
guard lives in the stateful controller.
"""

from typing import Tuple
import jax
import jax.numpy as jnp

from ..runtime import PidRuntime, PidState


def recurrence_coefficients(
    runtime: PidRuntime,
    dt: jax.Array
) -> Tuple[jax.Array, jax.Array, jax.Array]:
    """Weights applied to e[k], e[k-1] and e[k-2].

    Args:
        runtime: Controller parameters
        dt: Elapsed time in seconds (must be non-zero)

    Returns:
        Tuple of (c0, c1, c2)
    """
    kd_over_dt = runtime.kd / dt
    c0 = runtime.kp + runtime.ki * dt + kd_over_dt
    c1 = -runtime.kp - 2.0 * kd_over_dt
    c2 = kd_over_dt
    return c0, c1, c2


@jax.jit
def pid_bootstrap_step(
    runtime: PidRuntime,
    state: PidState,
    process_value: jax.Array
) -> Tuple[PidState, jax.Array]:
    """Proportional-only update for the first sample of a stream.

    Args:
        runtime: Controller parameters
        state: Current history
        process_value: Current process reading

    Returns:
        Tuple of (updated_state, control_output)
    """
    error = runtime.set_point - process_value
    output = runtime.kp * error
    return state.shift(error, output), output


@jax.jit
def pid_step(
    runtime: PidRuntime,
    state: PidState,
    process_value: jax.Array,
    dt: jax.Array
) -> Tuple[PidState, jax.Array]:
    """Execute one step of the discrete PID recurrence.

    Args:
        runtime: Controller parameters
        state: Current history (absent values are zero)
        process_value: Current process reading
        dt: Seconds since the previous sample

    Returns:
        Tuple of (updated_state, control_output)
    """
    error = runtime.set_point - process_value
    c0, c1, c2 = recurrence_coefficients(runtime, dt)
    output = (
        state.last_control_value
        + error * c0
        + state.last_error * c1
        + state.last_last_error * c2
    )
    return state.shift(error, output), output


def pid_step_with_diagnostics(
    runtime: PidRuntime,
    state: PidState,
    process_value: jax.Array,
    dt: jax.Array
) -> Tuple[PidState, jax.Array, dict]:
    """Execute a recurrence step with diagnostic information.

    Like pid_step but also returns intermediate values for analysis.

    Args:
        runtime: Controller parameters
        state: Current history
        process_value: Current process reading
        dt: Seconds since the previous sample

    Returns:
        Tuple of (updated_state, control_output, diagnostics_dict)
    """
    error = runtime.set_point - process_value
    c0, c1, c2 = recurrence_coefficients(runtime, dt)

    current_term = error * c0
    previous_term = state.last_error * c1
    previous_previous_term = state.last_last_error * c2
    output = state.last_control_value + current_term + previous_term + previous_previous_term

    diagnostics = {
        "error": error,
        "c0": c0,
        "c1": c1,
        "c2": c2,
        "current_term": current_term,
        "previous_term": previous_term,
        "previous_previous_term": previous_previous_term,
        "last_control_value": state.last_control_value,
        "output": output,
    }

    return state.shift(error, output), output, diagnostics


@jax.jit
def pid_scan(
    runtime: PidRuntime,
    state: PidState,
    process_values: jax.Array,
    dts: jax.Array
) -> Tuple[PidState, jax.Array]:
    """Run the recurrence over a batch of samples with lax.scan.

    Every sample is treated as a steady-case update. Zero entries in ``dts``
    are not rejected here and produce non-finite outputs.

    Args:
        runtime: Controller parameters
        state: Initial history
        process_values: Process readings, shape (n,)
        dts: Elapsed seconds before each reading, shape (n,)

    Returns:
        Tuple of (final_state, outputs) with outputs of shape (n,)
    """
    def body(carry, sample):
        process_value, dt = sample
        return pid_step(runtime, carry, process_value, dt)

    return jax.lax.scan(body, state, (process_values, dts))
