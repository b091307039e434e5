"""Runtime structures using Penzai for JAX-compatible controller computations.

This module provides Penzai structs that hold controller parameters and
history as JAX scalars, so the PID kernel can be used directly with jit,
vmap and lax.scan.
"""

from __future__ import annotations

from typing import Optional
import dataclasses
import jax
import jax.numpy as jnp
from penzai.core import struct


@struct.pytree_dataclass
class PidRuntime(struct.Struct):
    """Runtime structure for discrete PID parameters.

    All fields are JAX scalars. Gains are plain numbers; no unit metadata is
    carried because the controller never converts units.

    Attributes:
        set_point: Target process value
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
    """
    set_point: jax.Array
    kp: jax.Array
    ki: jax.Array
    kd: jax.Array

    @classmethod
    def from_floats(
        cls,
        set_point: float,
        kp: float,
        ki: float,
        kd: float,
        dtype: jnp.dtype = jnp.float64
    ) -> PidRuntime:
        """Create a runtime from Python floats.

        Args:
            set_point: Target process value
            kp: Proportional gain
            ki: Integral gain
            kd: Derivative gain
            dtype: JAX array dtype

        Returns:
            PidRuntime instance
        """
        return cls(
            set_point=jnp.array(set_point, dtype=dtype),
            kp=jnp.array(kp, dtype=dtype),
            ki=jnp.array(ki, dtype=dtype),
            kd=jnp.array(kd, dtype=dtype),
        )

    def replace_gain(self, name: str, value: float) -> PidRuntime:
        """Return a copy with one of ``kp``, ``ki``, ``kd`` replaced."""
        current = getattr(self, name)
        return dataclasses.replace(
            self, **{name: jnp.array(value, dtype=current.dtype)}
        )

    @property
    def dtype(self) -> jnp.dtype:
        return self.kp.dtype


@struct.pytree_dataclass
class PidState(struct.Struct):
    """History carried between discrete PID updates.

    Values that have not been written yet are stored as zero, which is what
    the recurrence substitutes for missing history. ``samples`` counts the
    updates applied so far, so callers can tell a stored zero from an
    absent value.

    Attributes:
        last_control_value: u[k-1]
        last_error: e[k-1]
        last_last_error: e[k-2]
        samples: Number of updates applied to this state
    """
    last_control_value: jax.Array
    last_error: jax.Array
    last_last_error: jax.Array
    samples: jax.Array

    @classmethod
    def zero(cls, dtype: jnp.dtype = jnp.float64) -> PidState:
        """Create an empty controller history.

        Args:
            dtype: JAX array dtype

        Returns:
            PidState with no samples recorded
        """
        return cls(
            last_control_value=jnp.array(0.0, dtype=dtype),
            last_error=jnp.array(0.0, dtype=dtype),
            last_last_error=jnp.array(0.0, dtype=dtype),
            samples=jnp.array(0, dtype=jnp.int32),
        )

    def shift(self, error: jax.Array, output: jax.Array) -> PidState:
        """Push a new error/output pair into the history window.

        Args:
            error: e[k]
            output: u[k]

        Returns:
            New PidState with e[k-1] moved to e[k-2]
        """
        return dataclasses.replace(
            self,
            last_control_value=output,
            last_last_error=self.last_error,
            last_error=error,
            samples=self.samples + 1,
        )

    def optional_last_control_value(self) -> Optional[float]:
        """u[k-1] as a float, or None before the first update."""
        return float(self.last_control_value) if int(self.samples) >= 1 else None

    def optional_last_error(self) -> Optional[float]:
        """e[k-1] as a float, or None before the first update."""
        return float(self.last_error) if int(self.samples) >= 1 else None

    def optional_last_last_error(self) -> Optional[float]:
        """e[k-2] as a float, or None before the second update."""
        return float(self.last_last_error) if int(self.samples) >= 2 else None


def tree_info(pytree) -> str:
    """Get information about a pytree structure.

    Useful for debugging and understanding the structure of runtime objects.

    Args:
        pytree: Any pytree structure

    Returns:
        String description of the pytree structure
    """
    flat, treedef = jax.tree_util.tree_flatten(pytree)
    return (
        f"PyTree with {len(flat)} leaves:\n"
        f"  Structure: {treedef}\n"
        f"  Leaf shapes: {[getattr(x, 'shape', type(x).__name__) for x in flat]}"
    )
