"""Discrete PID control law in recurrence form."""

from .config import PidConfig, PidBuilder
from .kernel import (
    recurrence_coefficients,
    pid_bootstrap_step,
    pid_step,
    pid_step_with_diagnostics,
    pid_scan,
)
from .controller import PidController, ZERO_DELTA_T_MESSAGE
from ..runtime import PidRuntime, PidState

__all__ = [
    # Configuration
    'PidConfig',
    'PidBuilder',
    # Runtime structures
    'PidRuntime',
    'PidState',
    # Pure kernel
    'recurrence_coefficients',
    'pid_bootstrap_step',
    'pid_step',
    'pid_step_with_diagnostics',
    'pid_scan',
    # Stateful servo
    'PidController',
    'ZERO_DELTA_T_MESSAGE',
]
