"""Pydantic configuration models for the discrete PID controller.

This module provides the validated configuration value and the fluent
builder that resolves into it.
"""

from __future__ import annotations

from typing import Optional, Union, Dict, TYPE_CHECKING
import math
import jax.numpy as jnp

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..runtime import PidRuntime

if TYPE_CHECKING:
    from .controller import PidController


class PidConfig(BaseModel):
    """Configuration for the discrete PID controller.

    Every field defaults to 0.0, so a config only needs the values the
    caller cares about. Values are validated once here; the runtime built
    from a config is never re-checked.

    Attributes:
        set_point: Target process value
        proportional: Proportional gain (Kp)
        integral: Integral gain (Ki)
        derivative: Derivative gain (Kd)
    """

    model_config = ConfigDict(frozen=True)

    set_point: float = Field(default=0.0, description="Target process value")
    proportional: float = Field(default=0.0, description="Proportional gain")
    integral: float = Field(default=0.0, description="Integral gain")
    derivative: float = Field(default=0.0, description="Derivative gain")

    @field_validator("set_point", "proportional", "integral", "derivative", mode="after")
    @classmethod
    def validate_finite(cls, v: float, info) -> float:
        """Reject NaN and infinite values."""
        if not math.isfinite(v):
            raise ValueError(f"{info.field_name} must be finite, got {v}")
        return v

    def with_updates(self, **updates: float) -> PidConfig:
        """Return a validated copy with some fields replaced."""
        return PidConfig(**{**self.model_dump(), **updates})

    def to_runtime(self, dtype: jnp.dtype = jnp.float64) -> PidRuntime:
        """Convert configuration to runtime structure.

        Args:
            dtype: JAX array data type for values

        Returns:
            PidRuntime with JAX scalars
        """
        return PidRuntime.from_floats(
            set_point=self.set_point,
            kp=self.proportional,
            ki=self.integral,
            kd=self.derivative,
            dtype=dtype,
        )

    @staticmethod
    def from_runtime(runtime: PidRuntime) -> PidConfig:
        """Create configuration from runtime structure.

        Args:
            runtime: PidRuntime to convert

        Returns:
            PidConfig with Python floats
        """
        return PidConfig(
            set_point=float(runtime.set_point),
            proportional=float(runtime.kp),
            integral=float(runtime.ki),
            derivative=float(runtime.kd),
        )

    def summary(self, format: str = "markdown") -> Union[str, Dict[str, float]]:
        """Generate a formatted summary of the configuration.

        Args:
            format: Output format ("markdown", "text", or "dict")

        Returns:
            Formatted representation (string or dict of floats)
        """
        values = self.model_dump()

        if format == "dict":
            return values

        if format == "markdown":
            lines = [
                "## PID Configuration",
                "",
                "| Parameter | Value |",
                "|-----------|-------|",
            ]
            for key, value in values.items():
                lines.append(f"| {key} | {value:.4g} |")
            return "\n".join(lines)

        else:  # text format
            lines = ["PID Configuration:"]
            for key, value in values.items():
                lines.append(f"  {key}: {value:.4g}")
            return "\n".join(lines)


class PidBuilder:
    """Fluent, order-independent construction of a PID controller.

    Each setter records one value and returns the builder. Anything left
    unset becomes 0.0 when the builder is resolved.

    Example:
        >>> controller = (PidBuilder()
        ...               .set_point(200.0)
        ...               .derivative(0.19)
        ...               .integral(0.1)
        ...               .proportional(0.1)
        ...               .build())
    """

    def __init__(self):
        self._set_point: Optional[float] = None
        self._proportional: Optional[float] = None
        self._integral: Optional[float] = None
        self._derivative: Optional[float] = None

    def set_point(self, value: float) -> PidBuilder:
        self._set_point = value
        return self

    def proportional(self, value: float) -> PidBuilder:
        self._proportional = value
        return self

    def integral(self, value: float) -> PidBuilder:
        self._integral = value
        return self

    def derivative(self, value: float) -> PidBuilder:
        self._derivative = value
        return self

    def config(self) -> PidConfig:
        """Resolve the recorded values into a PidConfig.

        Raises:
            pydantic.ValidationError: If a recorded value is not a finite number
        """
        fields = {
            "set_point": self._set_point,
            "proportional": self._proportional,
            "integral": self._integral,
            "derivative": self._derivative,
        }
        return PidConfig(**{k: v for k, v in fields.items() if v is not None})

    def build(self, dtype: jnp.dtype = jnp.float64) -> PidController:
        """Build a PidController with empty history."""
        from .controller import PidController
        return PidController(self.config(), dtype=dtype)

    def __repr__(self) -> str:
        return (
            f"PidBuilder(set_point={self._set_point}, proportional={self._proportional}, "
            f"integral={self._integral}, derivative={self._derivative})"
        )
