"""Tests for the pure discrete PID kernel functions."""

import pytest
import jax
import jax.numpy as jnp
import numpy as np

from pidloop.pid import (
    PidConfig,
    PidController,
    recurrence_coefficients,
    pid_bootstrap_step,
    pid_step,
    pid_step_with_diagnostics,
    pid_scan,
)
from pidloop import PidState, ServoInput


@pytest.fixture
def runtime():
    return PidConfig(set_point=15.0, proportional=10.0, integral=1.0, derivative=2.0).to_runtime()


class TestRecurrenceCoefficients:
    """Tests for the e[k], e[k-1], e[k-2] weights."""

    def test_values(self, runtime, close):
        """Coefficients match the backward-difference formulas."""
        c0, c1, c2 = recurrence_coefficients(runtime, jnp.array(0.5))

        close(c0, 10.0 + 1.0 * 0.5 + 2.0 / 0.5)
        close(c1, -10.0 - 2.0 * 2.0 / 0.5)
        close(c2, 2.0 / 0.5)

    def test_pure_proportional(self, close):
        """Without Ki and Kd the weights reduce to (Kp, -Kp, 0)."""
        runtime = PidConfig(proportional=3.0).to_runtime()
        c0, c1, c2 = recurrence_coefficients(runtime, jnp.array(2.0))

        close(c0, 3.0)
        close(c1, -3.0)
        close(c2, 0.0)


class TestBootstrapStep:
    """Tests for pid_bootstrap_step."""

    def test_output_and_state(self, runtime, close):
        """Proportional output and a single shifted sample."""
        state, output = pid_bootstrap_step(runtime, PidState.zero(), jnp.array(10.0))

        close(output, 50.0)
        close(state.last_control_value, 50.0)
        close(state.last_error, 5.0)
        close(state.last_last_error, 0.0)
        assert int(state.samples) == 1

    def test_shifts_existing_history(self, runtime, close):
        """An earlier error moves into e[k-2]."""
        state, _ = pid_bootstrap_step(runtime, PidState.zero(), jnp.array(10.0))
        state, output = pid_bootstrap_step(runtime, state, jnp.array(12.0))

        close(output, 30.0)
        close(state.last_last_error, 5.0)
        close(state.last_error, 3.0)
        assert int(state.samples) == 2


class TestPidStep:
    """Tests for pid_step."""

    def test_recurrence(self, close):
        """The documented three-sample sequence."""
        runtime = PidConfig(set_point=15.0, proportional=10.0).to_runtime()
        state, output = pid_bootstrap_step(runtime, PidState.zero(), jnp.array(10.0))
        close(output, 50.0)

        runtime = runtime.replace_gain("ki", 1.0)
        state, output = pid_step(runtime, state, jnp.array(10.0), jnp.array(1.0))
        close(output, 55.0)

        runtime = runtime.replace_gain("kd", 2.0)
        state, output = pid_step(runtime, state, jnp.array(15.0), jnp.array(1.0))
        close(output, -5.0)
        assert int(state.samples) == 3

    def test_does_not_mutate_input_state(self, runtime, close):
        """Kernel functions return a new state."""
        state = PidState.zero()
        new_state, _ = pid_step(runtime, state, jnp.array(10.0), jnp.array(1.0))

        close(state.last_error, 0.0)
        assert int(state.samples) == 0
        assert int(new_state.samples) == 1

    def test_diagnostics_match(self, runtime, close):
        """pid_step_with_diagnostics agrees with pid_step."""
        state, _ = pid_bootstrap_step(runtime, PidState.zero(), jnp.array(10.0))

        plain_state, plain_output = pid_step(runtime, state, jnp.array(11.0), jnp.array(0.2))
        diag_state, diag_output, diagnostics = pid_step_with_diagnostics(
            runtime, state, jnp.array(11.0), jnp.array(0.2)
        )

        close(plain_output, diag_output)
        close(plain_state.last_control_value, diag_state.last_control_value)
        close(diagnostics["error"], 4.0)
        assert set(diagnostics) == {
            "error", "c0", "c1", "c2", "current_term", "previous_term",
            "previous_previous_term", "last_control_value", "output",
        }

    def test_vmap_over_process_values(self, runtime, array_close):
        """The kernel composes with jax.vmap."""
        state = PidState.zero()
        batched = jax.vmap(lambda pv: pid_step(runtime, state, pv, jnp.array(1.0))[1])

        outputs = batched(jnp.array([15.0, 14.0, 13.0]))

        # Empty history: output = e * (10 + 1 + 2)
        array_close(outputs, [0.0, 13.0, 26.0])


class TestPidScan:
    """Tests for the batched lax.scan recurrence."""

    def test_matches_stateful_controller(self, array_close):
        """Scanning gives the same outputs as repeated read() calls."""
        config = PidConfig(set_point=200.0, proportional=0.1, integral=0.1, derivative=0.19)
        process_values = np.array([50.0, 80.0, 110.0, 150.0, 170.0])
        dts = np.array([0.25, 0.25, 0.3, 0.25, 0.2])

        controller = PidController(config)
        expected = [
            controller.read(ServoInput(process_value=pv, delta_t=dt)).value
            for pv, dt in zip(process_values, dts)
        ]

        final_state, outputs = pid_scan(
            config.to_runtime(), PidState.zero(),
            jnp.asarray(process_values, dtype=jnp.float64),
            jnp.asarray(dts, dtype=jnp.float64),
        )

        array_close(outputs, expected, rtol=1e-12)
        assert int(final_state.samples) == len(process_values)

    def test_continues_from_bootstrap(self, close):
        """A scan can pick up after a bootstrap sample."""
        runtime = PidConfig(set_point=15.0, proportional=10.0, integral=1.0).to_runtime()
        state, _ = pid_bootstrap_step(runtime, PidState.zero(), jnp.array(10.0))

        _, outputs = pid_scan(runtime, state, jnp.array([10.0]), jnp.array([1.0]))

        close(outputs[0], 55.0)
