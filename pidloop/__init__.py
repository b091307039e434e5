"""pidloop: discrete-time feedback control with a pluggable control law."""

import logging as _logging

import jax as _jax

# Process values and gains are double precision; float64 arrays need x64 mode
_jax.config.update("jax_enable_x64", True)

from .errors import InvalidInputError
from .types import Timestamp, Seconds, to_timestamp, to_seconds
from .servo import ControlValue, ServoInput, Servo
from .runtime import PidRuntime, PidState, tree_info
from .pid import (
    PidConfig,
    PidBuilder,
    PidController,
    pid_bootstrap_step,
    pid_step,
    pid_scan,
)
from .engine import Engine, Measurement

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

__all__ = [
    # Errors
    'InvalidInputError',
    # Types
    'Timestamp',
    'Seconds',
    'to_timestamp',
    'to_seconds',
    # Servo capability
    'ControlValue',
    'ServoInput',
    'Servo',
    # Runtime structures
    'PidRuntime',
    'PidState',
    'tree_info',
    # PID control law
    'PidConfig',
    'PidBuilder',
    'PidController',
    'pid_bootstrap_step',
    'pid_step',
    'pid_scan',
    # Orchestration
    'Engine',
    'Measurement',
]
