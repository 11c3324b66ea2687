"""qphase_dt: Protocol Definitions
---------------------------------------------------------
Defines the value types exchanged between the solver loop and the controller,
and the structural contract shared by growth policies.

Public API
----------
``SolveFeedback`` : Outcome of a single solve attempt
``StepRecord`` : One entry of the controller's step history
``GrowthPolicy`` : Protocol for computing the next dt after an acceptance
``LimitingFunction`` : Type of the external limiting function f(t)

Notes
-----
- Feedback is passed by value into ``report_result()``; the controller never
  reads solver state directly

"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .errors import QDTConfigError

__all__ = [
    "SolveFeedback",
    "StepRecord",
    "GrowthPolicy",
    "LimitingFunction",
]


LimitingFunction = Callable[[float], float]
"""Type for a limiting function f(t) returning a scalar."""


@dataclass(frozen=True)
class SolveFeedback:
    """Outcome of a single nonlinear solve attempt.

    Attributes
    ----------
    converged : bool
        Whether the solve converged; False means the step is rejected.
    nonlinear_iterations : int
        Nonlinear iterations spent on the attempt.
    linear_iterations : int
        Linear iterations summed over the nonlinear iterations.

    """

    converged: bool
    nonlinear_iterations: int = 0
    linear_iterations: int = 0

    def __post_init__(self) -> None:
        if self.nonlinear_iterations < 0 or self.linear_iterations < 0:
            raise QDTConfigError(
                "[520] Iteration counts must be non-negative, got "
                f"nl={self.nonlinear_iterations}, l={self.linear_iterations}"
            )

    @property
    def linear_ratio(self) -> float:
        """Linear iterations per nonlinear iteration (0 when nl is 0)."""
        if self.nonlinear_iterations == 0:
            return 0.0
        return self.linear_iterations / self.nonlinear_iterations


@dataclass(frozen=True)
class StepRecord:
    """A reported attempt: the time it started from and the dt it used."""

    time: float
    dt: float
    converged: bool
    nonlinear_iterations: int
    linear_iterations: int


@runtime_checkable
class GrowthPolicy(Protocol):
    """Protocol for the acceptance-time step policy.

    Implementations return the candidate ``dt`` for the next step before
    bounds, limiting function and breakpoints are applied.
    """

    def next_dt(
        self,
        time: float,
        dt: float,
        feedback: SolveFeedback,
        allow_growth: bool,
    ) -> float:
        """Compute the candidate step after an accepted solve.

        Parameters
        ----------
        time : float
            Newly accepted simulation time.
        dt : float
            Reference step the policy grows or shrinks from.
        feedback : SolveFeedback
            Feedback of the accepted solve.
        allow_growth : bool
            False on the first acceptance after a rejection.

        Returns
        -------
        float
            Candidate step size.

        """
        ...
