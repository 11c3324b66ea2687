"""qphase_dt: Growth Policies
---------------------------

The acceptance-time step policy is a tagged choice made once when the
controller is built: ``HeuristicPolicy`` reacts to solver effort,
``TablePolicy`` follows a piecewise-linear schedule. Rejection cutback is not
a policy concern; the controller handles it for both.
"""

from dataclasses import dataclass

from .core.config import ControllerConfig
from .core.protocols import GrowthPolicy, SolveFeedback
from .schedule.table import PiecewiseLinearTable

__all__ = ["HeuristicPolicy", "TablePolicy", "make_policy"]


@dataclass(frozen=True)
class HeuristicPolicy:
    """Iteration-count driven growth and shrink.

    Nonlinear counts below ``optimal - window`` grow the step, counts above
    ``optimal + window`` shrink it, anything in between keeps it. A linear to
    nonlinear iteration ratio above ``linear_iteration_ratio`` also shrinks.
    Without ``optimal_iterations`` the step grows on every acceptance.
    """

    growth_factor: float
    cutback_factor: float
    optimal_iterations: int | None = None
    iteration_window: int = 0
    linear_iteration_ratio: float = 25.0

    def next_dt(
        self,
        time: float,
        dt: float,
        feedback: SolveFeedback,
        allow_growth: bool,
    ) -> float:
        if self.optimal_iterations is None:
            return dt * self.growth_factor if allow_growth else dt

        nl = feedback.nonlinear_iterations
        grow_below = self.optimal_iterations - self.iteration_window
        shrink_above = self.optimal_iterations + self.iteration_window

        if nl > shrink_above or feedback.linear_ratio > self.linear_iteration_ratio:
            return dt * self.cutback_factor
        if nl < grow_below and allow_growth:
            return dt * self.growth_factor
        return dt


@dataclass(frozen=True)
class TablePolicy:
    """Table-driven growth.

    The candidate is the table value at the accepted time, limited to
    ``growth_factor`` times the reference step, or to the reference step
    itself right after a rejection.
    """

    table: PiecewiseLinearTable
    growth_factor: float

    def next_dt(
        self,
        time: float,
        dt: float,
        feedback: SolveFeedback,
        allow_growth: bool,
    ) -> float:
        cap = dt * self.growth_factor if allow_growth else dt
        return min(self.table.value_at(time), cap)


def make_policy(
    config: ControllerConfig, table: PiecewiseLinearTable | None = None
) -> GrowthPolicy:
    """Select the policy for ``config``; a table always wins."""
    if table is not None:
        return TablePolicy(table=table, growth_factor=config.growth_factor)
    return HeuristicPolicy(
        growth_factor=config.growth_factor,
        cutback_factor=config.cutback_factor,
        optimal_iterations=config.optimal_iterations,
        iteration_window=config.iteration_window or 0,
        linear_iteration_ratio=config.linear_iteration_ratio,
    )
