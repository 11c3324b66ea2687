"""qphase_dt: Step-Size Controller
--------------------------------

Stateful controller that proposes the next step size for a time-marching
solver from solve feedback and external constraints.

Behavior
--------
- ``propose_step()`` returns the current proposal; repeated calls without a
  report return the same value. The first call computes the initial step.
- ``report_result(feedback)`` consumes one solve outcome. An accepted solve
  advances time and computes the next step through the growth policy,
  configured bounds, the limiting function and breakpoint truncation, in that
  order. A rejected solve cuts the step back and keeps time unchanged.
- Limiting-function and breakpoint constraints are applied independently; the
  smaller step wins. Landing exactly on a breakpoint takes precedence over
  ``dt_min``.

Notes
-----
- The controller is single-owner state. In distributed runs one rank owns it
  and broadcasts the step; workers must not recompute it.
"""

import math
from enum import Enum

from .core.config import ControllerConfig
from .core.errors import (
    QDTConfigError,
    QDTError,
    QDTExhaustedRetriesError,
    QDTLimitingFunctionError,
    QDTStateError,
    QDTStepSizeError,
    get_logger,
)
from .core.protocols import GrowthPolicy, LimitingFunction, SolveFeedback, StepRecord
from .core.utils import resolve_callable
from .limiting import LimitingFunctionEvaluator
from .policies import make_policy
from .schedule.breakpoints import BreakpointSchedule
from .schedule.table import PiecewiseLinearTable

__all__ = ["StepSizeController", "ControllerState"]

log = get_logger()


class ControllerState(Enum):
    """Lifecycle of a controller."""

    INIT = "init"
    PROPOSING = "proposing"
    TERMINAL = "terminal"


class StepSizeController:
    """Adaptive step-size controller.

    Parameters
    ----------
    config : ControllerConfig
        Validated controller configuration.
    limiting_function : Callable[[float], float], optional
        Limiting function overriding ``config.limiting.function``. Requires a
        ``limiting`` section for ``max_change``.

    Raises
    ------
    QDTConfigError
        - [550] A limiting function is given without a ``limiting`` section.
        - [551] A ``limiting`` section is given without a function.

    Examples
    --------
    >>> cfg = ControllerConfig(dt=1.0, cutback_factor=0.5)
    >>> ctl = StepSizeController(cfg)
    >>> ctl.propose_step()
    1.0
    >>> ctl.report_result(SolveFeedback(converged=False))
    >>> ctl.propose_step()
    0.5

    """

    def __init__(
        self,
        config: ControllerConfig,
        limiting_function: LimitingFunction | None = None,
    ) -> None:
        self.config = config

        self._table: PiecewiseLinearTable | None = None
        table_points: tuple[float, ...] = ()
        if config.table is not None:
            self._table = PiecewiseLinearTable(
                config.table.times,
                config.table.values,
                out_of_range=config.table.out_of_range,
            )
            if config.table.force_points:
                table_points = self._table.times

        self._policy: GrowthPolicy = make_policy(config, self._table)
        self._schedule = BreakpointSchedule(
            config.breakpoints,
            table_points,
            start_time=config.start_time,
            tolerance=config.time_tolerance,
        )
        self._limiter = self._build_limiter(limiting_function)

        self._state = ControllerState.INIT
        self._time = config.start_time
        self._dt: float | None = None
        self._reference_dt: float | None = None
        self._landing: float | None = None
        self._awaiting_report = False
        self._failures = 0
        self._cutback_occurred = False
        self._limit_value: float | None = None
        self.history: list[StepRecord] = []

    def _build_limiter(
        self, function: LimitingFunction | None
    ) -> LimitingFunctionEvaluator | None:
        section = self.config.limiting
        if section is None:
            if function is not None:
                raise QDTConfigError(
                    "[550] A limiting function needs a 'limiting' section with max_change"
                )
            return None

        fn = function if function is not None else section.function
        if fn is None:
            raise QDTConfigError("[551] 'limiting' section has no function")
        if isinstance(fn, str):
            fn = resolve_callable(fn)
        return LimitingFunctionEvaluator(
            fn,
            max_change=section.max_change,
            floor=self.config.floor,
            max_probes=section.max_probes,
            rel_tol=section.rel_tol,
        )

    # ------------------------------------------------------------------ views

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def time(self) -> float:
        """Last accepted simulation time."""
        return self._time

    @property
    def failures(self) -> int:
        """Consecutive rejections since the last acceptance."""
        return self._failures

    @property
    def schedule(self) -> BreakpointSchedule:
        return self._schedule

    @property
    def policy(self) -> GrowthPolicy:
        return self._policy

    # ------------------------------------------------------------- operations

    def propose_step(self) -> float:
        """Return the step size for the next solve attempt.

        Raises
        ------
        QDTStateError
            - [702] The controller is terminal.
        QDTStepSizeError
            - [300] The initial step is invalid after all adjustments.
        QDTLimitingFunctionError
            - [302] The limiting function raised; the controller is terminal.

        """
        if self._state is ControllerState.TERMINAL:
            raise QDTStateError("[702] Controller is terminal; no further steps")

        if self._state is ControllerState.INIT:
            try:
                if self._limiter is not None:
                    self._limit_value = self._limiter.evaluate(self._time)
                if self._table is not None:
                    raw = self._table.value_at(self._time)
                else:
                    raw = self.config.dt
                self._finalize(raw)
            except QDTError as e:
                self._halt(e)
                raise
            self._state = ControllerState.PROPOSING
            log.debug(f"Initial dt={self._dt} at t={self._time}")

        self._awaiting_report = True
        assert self._dt is not None
        return self._dt

    def report_result(self, feedback: SolveFeedback) -> None:
        """Consume the outcome of the last proposed step.

        Parameters
        ----------
        feedback : SolveFeedback
            Convergence flag and iteration counts of the attempt.

        Raises
        ------
        QDTStateError
            - [701] No step was proposed since the last report.
            - [702] The controller is terminal.
        QDTExhaustedRetriesError
            - [301] Too many consecutive rejections, or dt already at dt_min.
        QDTStepSizeError
            - [300] The next step is invalid after all adjustments.
        QDTLimitingFunctionError
            - [302] The limiting function raised; the controller is terminal.

        """
        if self._state is ControllerState.TERMINAL:
            raise QDTStateError("[702] Controller is terminal; no further steps")
        if not self._awaiting_report:
            raise QDTStateError("[701] report_result() called without a proposed step")
        self._awaiting_report = False

        assert self._dt is not None
        self.history.append(
            StepRecord(
                time=self._time,
                dt=self._dt,
                converged=feedback.converged,
                nonlinear_iterations=feedback.nonlinear_iterations,
                linear_iterations=feedback.linear_iterations,
            )
        )

        try:
            if feedback.converged:
                self._accept(feedback)
            else:
                self._reject(feedback)
        except QDTError as e:
            self._halt(e)
            raise

    # -------------------------------------------------------------- internals

    def _accept(self, feedback: SolveFeedback) -> None:
        assert self._dt is not None
        self._time = self._landing if self._landing is not None else self._time + self._dt
        self._schedule.advance_past(self._time)
        if self._limiter is not None:
            self._limit_value = self._limiter.evaluate(self._time)

        allow_growth = not self._cutback_occurred
        self._cutback_occurred = False
        self._failures = 0

        # After landing on a breakpoint, continue from the untruncated step.
        base = self._reference_dt if self._landing is not None else self._dt
        assert base is not None
        raw = self._policy.next_dt(self._time, base, feedback, allow_growth)
        log.debug(
            f"Accepted t={self._time} (nl={feedback.nonlinear_iterations}, "
            f"l={feedback.linear_iterations}); policy dt {base} -> {raw}"
        )
        self._finalize(raw)

    def _reject(self, feedback: SolveFeedback) -> None:
        assert self._dt is not None
        self._failures += 1
        self._cutback_occurred = True

        if self._failures > self.config.max_rejections:
            self._terminate(
                f"[301] Solve failed {self._failures} consecutive times "
                f"(max {self.config.max_rejections}) at t={self._time}, dt={self._dt}",
                feedback,
            )
        if self._dt <= self.config.dt_min:
            self._terminate(
                f"[301] Solve failed at t={self._time} with dt={self._dt} already at "
                f"dt_min={self.config.dt_min}; cannot cut back",
                feedback,
            )

        raw = self._dt * self.config.cutback_factor
        log.info(
            f"Solve rejected at t={self._time} with dt={self._dt} "
            f"(failure {self._failures}); cutting back to {raw}"
        )
        self._finalize(raw)

    def _halt(self, error: QDTError) -> None:
        """Make the controller terminal after ``error`` interrupted an update."""
        self._state = ControllerState.TERMINAL
        self._awaiting_report = False
        if isinstance(error, QDTLimitingFunctionError):
            error.dt = self._dt if self._dt is not None else math.nan
            error.failures = self._failures
            log.error(f"{error} (dt={error.dt}, failures={error.failures})")

    def _terminate(self, message: str, feedback: SolveFeedback) -> None:
        log.error(message)
        raise QDTExhaustedRetriesError(
            message,
            time=self._time,
            dt=self._dt if self._dt is not None else math.nan,
            failures=self._failures,
            feedback=feedback,
        )

    def _finalize(self, raw: float) -> None:
        """Apply bounds, limiting function and breakpoints to ``raw``."""
        cfg = self.config
        dt = min(max(raw, cfg.dt_min), cfg.dt_max)
        if self._limiter is not None and math.isfinite(dt):
            assert self._limit_value is not None
            dt = min(dt, self._limiter.limit(self._time, self._limit_value, self._time + dt))
        self._reference_dt = dt

        landing = None
        bp = self._schedule.next_breakpoint_after(self._time)
        # snapping forward onto a breakpoint within tolerance must not exceed dt_max
        if (
            bp is not None
            and self._time + dt >= bp - cfg.time_tolerance
            and bp - self._time <= cfg.dt_max
        ):
            dt = bp - self._time
            landing = bp
            log.debug(f"Truncated dt to {dt} to land on breakpoint {bp}")

        self._check(dt, landing)
        self._dt = dt
        self._landing = landing

    def _check(self, dt: float, landing: float | None) -> None:
        cfg = self.config
        problem = None
        if not math.isfinite(dt) or dt <= 0.0:
            problem = "is not positive"
        elif dt > cfg.dt_max:
            problem = f"exceeds dt_max={cfg.dt_max}"
        elif dt < cfg.dt_min and landing is None:
            problem = f"is below dt_min={cfg.dt_min}"
        if problem is None:
            return

        message = (
            f"[300] Step size {dt} {problem} at t={self._time} "
            f"(failures={self._failures})"
        )
        log.error(message)
        raise QDTStepSizeError(message, time=self._time, dt=dt, failures=self._failures)

    def __repr__(self) -> str:
        return (
            f"StepSizeController(state={self._state.value}, t={self._time}, "
            f"dt={self._dt}, failures={self._failures})"
        )
