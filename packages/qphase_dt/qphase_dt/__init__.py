"""Adaptive Step-Size Control
===========================

Step-size controller for time-marching solvers. The controller proposes each
step, consumes the solver's convergence feedback, and composes iteration-count
heuristics or a piecewise-linear table with mandatory breakpoints and a
limiting function of time.

Public API
----------
StepSizeController
    Stateful controller driving ``propose_step`` / ``report_result``.
ControllerConfig
    Pydantic configuration of a controller.
SolveFeedback
    Outcome of one solve attempt.
load_controller_config
    Build a ``ControllerConfig`` from layered YAML sources.
"""

from .controller import ControllerState, StepSizeController
from .core.config import ControllerConfig, LimitingConfig, TableConfig
from .core.config_loader import load_controller_config
from .core.errors import (
    QDTConfigError,
    QDTError,
    QDTExhaustedRetriesError,
    QDTLimitingFunctionError,
    QDTStateError,
    QDTStepSizeError,
)
from .core.protocols import SolveFeedback, StepRecord
from .limiting import LimitingFunctionEvaluator
from .schedule import BreakpointSchedule, PiecewiseLinearTable

__version__ = "0.1.0"

__all__ = [
    "StepSizeController",
    "ControllerState",
    "ControllerConfig",
    "LimitingConfig",
    "TableConfig",
    "load_controller_config",
    "SolveFeedback",
    "StepRecord",
    "LimitingFunctionEvaluator",
    "BreakpointSchedule",
    "PiecewiseLinearTable",
    "QDTError",
    "QDTConfigError",
    "QDTStateError",
    "QDTStepSizeError",
    "QDTExhaustedRetriesError",
    "QDTLimitingFunctionError",
    "__version__",
]
