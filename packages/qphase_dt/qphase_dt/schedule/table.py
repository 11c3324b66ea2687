"""qphase_dt: Piecewise-Linear Step Table
---------------------------------------

Direct time -> dt lookup with linear interpolation between knots.

Behavior
--------
- Inside ``[times[0], times[-1]]`` the value is interpolated linearly between
  the two bracketing knots; a knot time returns its value exactly.
- Outside the range the policy fixed at construction applies: ``"clamp"``
  returns the nearest endpoint value, ``"error"`` raises ``QDTConfigError``.
"""

from collections.abc import Sequence
from typing import Literal

import numpy as np

from ..core.errors import QDTConfigError

__all__ = ["PiecewiseLinearTable"]


class PiecewiseLinearTable:
    """Piecewise-linear table of step sizes keyed by time.

    Parameters
    ----------
    times : Sequence[float]
        Knot times, strictly increasing.
    values : Sequence[float]
        Positive step size at each knot.
    out_of_range : {"clamp", "error"}, default "clamp"
        Behavior for queries outside the knot range.

    Raises
    ------
    QDTConfigError
        - [530] Empty table or length mismatch.
        - [531] Times not strictly increasing.
        - [532] Non-positive or non-finite step size.

    Examples
    --------
    >>> table = PiecewiseLinearTable([0.0, 10.0], [1.0, 3.0])
    >>> table.value_at(5.0)
    2.0

    """

    def __init__(
        self,
        times: Sequence[float],
        values: Sequence[float],
        out_of_range: Literal["clamp", "error"] = "clamp",
    ) -> None:
        t = np.asarray(times, dtype=float)
        v = np.asarray(values, dtype=float)
        if t.ndim != 1 or t.size == 0 or t.shape != v.shape:
            raise QDTConfigError(
                f"[530] Table needs matching non-empty 1-D times/values, "
                f"got shapes {t.shape} and {v.shape}"
            )
        if np.any(np.diff(t) <= 0.0):
            raise QDTConfigError("[531] Table times must be strictly increasing")
        if not np.all(np.isfinite(v)) or np.any(v <= 0.0):
            raise QDTConfigError("[532] Table step sizes must be positive and finite")
        if out_of_range not in ("clamp", "error"):
            raise QDTConfigError(f"[533] Unknown out_of_range policy '{out_of_range}'")

        self._times = t
        self._values = v
        self.out_of_range = out_of_range

    @property
    def times(self) -> tuple[float, ...]:
        return tuple(float(x) for x in self._times)

    @property
    def domain(self) -> tuple[float, float]:
        return float(self._times[0]), float(self._times[-1])

    def value_at(self, time: float) -> float:
        """Interpolate the step size at ``time``."""
        lo, hi = self.domain
        if (time < lo or time > hi) and self.out_of_range == "error":
            raise QDTConfigError(
                f"[534] Time {time} outside table range [{lo}, {hi}]"
            )
        # np.interp clamps to the endpoint values outside the knot range
        return float(np.interp(time, self._times, self._values))

    def __len__(self) -> int:
        return int(self._times.size)

    def __repr__(self) -> str:
        lo, hi = self.domain
        return f"PiecewiseLinearTable(n={len(self)}, range=[{lo}, {hi}], out_of_range={self.out_of_range!r})"
