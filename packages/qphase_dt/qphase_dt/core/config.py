"""qphase_dt: Controller Configuration Models
---------------------------------------------------------
Defines the Pydantic models that describe a step-size controller: the initial
step and its bounds, the growth/cutback policy, the optimality window used to
judge solver effort, mandatory breakpoints, and the optional limiting-function
and piecewise-linear table sections.

Public API
----------
``ControllerConfig`` : Root configuration model consumed by ``StepSizeController``
``LimitingConfig`` : Limiting-function section (function, max_change, probes)
``TableConfig`` : Piecewise-linear time -> dt table section

Notes
-----
- Unknown keys are rejected so typos in YAML files fail loudly
- Cross-field checks (bounds ordering, table monotonicity) run on validation

"""

import math
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

__all__ = ["ControllerConfig", "LimitingConfig", "TableConfig"]


class LimitingConfig(BaseModel):
    """Limiting-function section.

    The function may be given directly as a callable, or as a dotted path
    (``"package.module:attr"``) that is resolved when the controller is built.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    function: str | Callable[[float], float] | None = Field(
        default=None,
        description="Callable f(t) or dotted path 'module:attr' to one.",
    )
    max_change: float = Field(
        ...,
        gt=0.0,
        description="Largest allowed |f(t_new) - f(t_old)| over one step.",
    )
    max_probes: int = Field(
        default=30,
        ge=1,
        description="Maximum number of function evaluations per search.",
    )
    rel_tol: float = Field(
        default=1e-3,
        gt=0.0,
        lt=1.0,
        description="Relative width at which the bisection refinement stops.",
    )
    floor: float | None = Field(
        default=None,
        gt=0.0,
        description="Step returned when the search fails. Defaults to dt_min.",
    )


class TableConfig(BaseModel):
    """Piecewise-linear time -> dt table section."""

    model_config = ConfigDict(extra="forbid")

    times: list[float] = Field(..., description="Knot times, strictly increasing.")
    values: list[float] = Field(..., description="Step size at each knot.")
    out_of_range: Literal["clamp", "error"] = Field(
        default="clamp",
        description="Clamp to the nearest endpoint or raise outside the table.",
    )
    force_points: bool = Field(
        default=False,
        description="Make every knot time a mandatory breakpoint.",
    )

    @model_validator(mode="after")
    def _check_entries(self) -> "TableConfig":
        if not self.times:
            raise ValueError("Table must contain at least one entry")
        if len(self.times) != len(self.values):
            raise ValueError(
                f"Table has {len(self.times)} times but {len(self.values)} values"
            )
        for a, b in zip(self.times, self.times[1:]):
            if not b > a:
                raise ValueError(f"Table times must be strictly increasing ({a} >= {b})")
        for v in self.values:
            if not (math.isfinite(v) and v > 0.0):
                raise ValueError(f"Table step sizes must be positive, got {v}")
        return self


class ControllerConfig(BaseModel):
    """Configuration for ``StepSizeController``.

    Attributes
    ----------
    dt : float
        Initial step size (ignored when a table is configured).
    start_time : float
        Simulation time at which the controller starts.
    dt_min, dt_max : float
        Bounds applied after the growth/cutback policy.
    growth_factor : float
        Multiplier applied after an efficient accepted solve (>= 1).
    cutback_factor : float
        Multiplier applied after a rejection or an expensive solve, in (0, 1).
    optimal_iterations : int or None
        Target nonlinear iteration count. When None, the heuristic grows on
        every acceptance.
    iteration_window : int or None
        Half-width of the on-target band. Defaults to ``optimal_iterations // 5``.
    linear_iteration_ratio : float
        Linear/nonlinear iteration ratio above which the step shrinks.
    max_rejections : int
        Consecutive rejections tolerated before the run is aborted.
    breakpoints : list[float]
        Mandatory times that must be hit exactly.
    time_tolerance : float
        Absolute slack used when comparing times against breakpoints.
    limiting : LimitingConfig or None
        Optional limiting-function section.
    table : TableConfig or None
        Optional table; when present the table drives growth.

    """

    model_config = ConfigDict(extra="forbid")

    dt: float = Field(1.0, gt=0.0, description="Initial step size")
    start_time: float = Field(0.0, description="Start time")
    dt_min: float = Field(2e-14, gt=0.0, description="Minimum step size")
    dt_max: float = Field(1e30, gt=0.0, description="Maximum step size")
    growth_factor: float = Field(2.0, ge=1.0, description="Growth multiplier")
    cutback_factor: float = Field(
        0.5, gt=0.0, lt=1.0, description="Cutback multiplier"
    )
    optimal_iterations: int | None = Field(
        None, ge=1, description="Target number of nonlinear iterations"
    )
    iteration_window: int | None = Field(
        None, ge=0, description="Half-width of the on-target iteration band"
    )
    linear_iteration_ratio: float = Field(
        25.0, gt=0.0, description="Linear/nonlinear iteration ratio threshold"
    )
    max_rejections: int = Field(
        10, ge=0, description="Maximum consecutive rejected solves"
    )
    breakpoints: list[float] = Field(
        default_factory=list, description="Mandatory times to hit exactly"
    )
    time_tolerance: float = Field(
        2e-14, ge=0.0, description="Tolerance when landing on breakpoints"
    )
    limiting: LimitingConfig | None = None
    table: TableConfig | None = None

    @field_validator("breakpoints")
    @classmethod
    def _finite_breakpoints(cls, v: list[float]) -> list[float]:
        for t in v:
            if not math.isfinite(t):
                raise ValueError(f"Breakpoints must be finite, got {t}")
        return v

    @model_validator(mode="after")
    def _check_bounds(self) -> "ControllerConfig":
        if self.dt_min > self.dt_max:
            raise ValueError(f"dt_min ({self.dt_min}) exceeds dt_max ({self.dt_max})")
        if self.table is None and not (self.dt_min <= self.dt <= self.dt_max):
            raise ValueError(
                f"Initial dt {self.dt} lies outside [{self.dt_min}, {self.dt_max}]"
            )
        if (
            self.limiting is not None
            and self.limiting.floor is not None
            and not (self.dt_min <= self.limiting.floor <= self.dt_max)
        ):
            raise ValueError(
                f"Limiting floor {self.limiting.floor} lies outside "
                f"[{self.dt_min}, {self.dt_max}]"
            )
        if self.optimal_iterations is not None and self.iteration_window is None:
            self.iteration_window = self.optimal_iterations // 5
        return self

    @property
    def floor(self) -> float:
        """Step used when the limiting-function search fails."""
        if self.limiting is not None and self.limiting.floor is not None:
            return self.limiting.floor
        return self.dt_min
