"""External time constraints: mandatory breakpoints and step tables."""

from .breakpoints import BreakpointSchedule
from .table import PiecewiseLinearTable

__all__ = [
    "BreakpointSchedule",
    "PiecewiseLinearTable",
]
