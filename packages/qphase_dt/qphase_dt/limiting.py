"""qphase_dt: Limiting-Function Evaluator
---------------------------------------

Bounds the step so an external function of time changes by at most
``max_change`` between the last accepted time and the end of the step.

Behavior
--------
- The full step is tried first. On violation the step is shrunk in
  proportion to the observed change until one satisfies the bound, then
  bisection between the satisfying and the violating step recovers the
  largest satisfying step to within ``rel_tol``.
- Every function evaluation counts against ``max_probes``. If no satisfying
  step is found within the budget, or the search drops below ``floor``, the
  floor is returned and a warning is logged.
"""

import math

from .core.errors import QDTConfigError, QDTLimitingFunctionError, get_logger
from .core.protocols import LimitingFunction

__all__ = ["LimitingFunctionEvaluator"]

log = get_logger()


class LimitingFunctionEvaluator:
    """Wrap a limiting function f(t) and bound step sizes against it.

    Parameters
    ----------
    function : Callable[[float], float]
        External function of time.
    max_change : float
        Largest allowed ``|f(t + dt) - f(t)|``.
    floor : float
        Step returned when the search cannot satisfy the bound.
    max_probes : int, default 30
        Evaluation budget per call to ``limit``.
    rel_tol : float, default 1e-3
        Relative bracket width at which bisection stops.

    Examples
    --------
    >>> ev = LimitingFunctionEvaluator(lambda t: t, max_change=0.1, floor=1e-6)
    >>> ev.limit(0.0, 0.0, 1.0)
    0.1

    """

    RETRY_SAFETY = 0.9

    def __init__(
        self,
        function: LimitingFunction,
        max_change: float,
        floor: float,
        max_probes: int = 30,
        rel_tol: float = 1e-3,
    ) -> None:
        if not callable(function):
            raise QDTConfigError("[540] Limiting function must be callable")
        if max_change <= 0.0:
            raise QDTConfigError(f"[541] max_change must be positive, got {max_change}")
        if floor <= 0.0:
            raise QDTConfigError(f"[542] floor must be positive, got {floor}")
        self.function = function
        self.max_change = max_change
        self.floor = floor
        self.max_probes = max_probes
        self.rel_tol = rel_tol

    def evaluate(self, time: float) -> float:
        """Evaluate the wrapped function at ``time`` as a float.

        Raises
        ------
        QDTLimitingFunctionError
            - [302] The function raised or returned a non-numeric value.

        """
        try:
            return float(self.function(time))
        except Exception as e:
            raise QDTLimitingFunctionError(
                f"[302] Limiting function failed at t={time}: {e!r}", time=time
            ) from e

    def _change(self, previous_time: float, previous_value: float, dt: float) -> float:
        return abs(self.evaluate(previous_time + dt) - previous_value)

    def limit(
        self, previous_time: float, previous_value: float, candidate_time: float
    ) -> float:
        """Return the largest admissible step towards ``candidate_time``.

        Parameters
        ----------
        previous_time : float
            Last accepted time.
        previous_value : float
            Function value at ``previous_time``.
        candidate_time : float
            End time of the proposed step.

        Returns
        -------
        float
            ``candidate_time - previous_time`` when the bound holds, otherwise
            a smaller step satisfying it, or ``floor`` if none was found.

        """
        dt = candidate_time - previous_time
        if dt <= 0.0:
            return dt

        change = self._change(previous_time, previous_value, dt)
        probes = 1
        if change <= self.max_change:
            return dt

        bad = dt
        good: float | None = None
        trial = dt
        safety = 1.0
        while probes < self.max_probes:
            if not math.isfinite(change):
                break
            # proportional estimates approach concave functions from above
            trial = safety * trial * self.max_change / change
            safety = self.RETRY_SAFETY
            if trial <= self.floor:
                break
            change = self._change(previous_time, previous_value, trial)
            probes += 1
            if change <= self.max_change:
                good = trial
                break
            bad = trial

        if good is None:
            log.warning(
                f"Limiting function unresolved at t={previous_time}: no step in "
                f"[{self.floor}, {dt}] keeps the change below {self.max_change} "
                f"after {probes} probes; using floor {self.floor}"
            )
            return self.floor

        while probes < self.max_probes and bad - good > self.rel_tol * good:
            mid = 0.5 * (good + bad)
            probes += 1
            if self._change(previous_time, previous_value, mid) <= self.max_change:
                good = mid
            else:
                bad = mid

        log.debug(
            f"Limiting function reduced dt {dt} -> {good} at t={previous_time} "
            f"({probes} probes)"
        )
        return good
