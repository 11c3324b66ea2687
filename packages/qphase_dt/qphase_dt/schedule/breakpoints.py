"""qphase_dt: Breakpoint Schedule
------------------------------

Mandatory times the controller must land on exactly.

Behavior
--------
- Breakpoints are stored once as a sorted, deduplicated tuple; an integer
  cursor marks the first unconsumed entry and only ever moves forward.
- ``advance_past(time)`` consumes every breakpoint ``<= time`` (within the
  configured tolerance). Once all are consumed, ``next_breakpoint_after``
  returns None and breakpoint enforcement becomes a no-op.
"""

from collections.abc import Iterable

from ..core.errors import get_logger

__all__ = ["BreakpointSchedule"]

log = get_logger()


class BreakpointSchedule:
    """Sorted set of mandatory times with a forward-only cursor.

    Parameters
    ----------
    times : Iterable[float]
        Explicitly configured mandatory times.
    table_times : Iterable[float], optional
        Table knot times merged in when a table forces its points.
    start_time : float, optional
        Breakpoints at or before this time are consumed immediately.
    tolerance : float, default 0.0
        Absolute slack when deciding whether a time has reached a breakpoint.

    Examples
    --------
    >>> sched = BreakpointSchedule([5.0, 2.0, 2.0])
    >>> sched.points
    (2.0, 5.0)
    >>> sched.next_breakpoint_after(1.0)
    2.0
    >>> sched.advance_past(2.0)
    >>> sched.next_breakpoint_after(2.0)
    5.0

    """

    def __init__(
        self,
        times: Iterable[float],
        table_times: Iterable[float] = (),
        start_time: float | None = None,
        tolerance: float = 0.0,
    ) -> None:
        merged = {float(t) for t in times} | {float(t) for t in table_times}
        self._points: tuple[float, ...] = tuple(sorted(merged))
        self._cursor = 0
        self.tolerance = tolerance
        if start_time is not None:
            self.advance_past(start_time)

    @property
    def points(self) -> tuple[float, ...]:
        """All breakpoints, consumed or not."""
        return self._points

    @property
    def remaining(self) -> tuple[float, ...]:
        """Breakpoints not yet consumed."""
        return self._points[self._cursor :]

    @property
    def cursor(self) -> int:
        return self._cursor

    def next_breakpoint_after(self, time: float) -> float | None:
        """Return the first unconsumed breakpoint strictly after ``time``.

        Consumed breakpoints are never returned, even when ``time`` is earlier
        than them.
        """
        i = self._cursor
        while i < len(self._points) and self._points[i] <= time + self.tolerance:
            i += 1
        if i == len(self._points):
            return None
        return self._points[i]

    def advance_past(self, time: float) -> None:
        """Consume every breakpoint ``<= time``."""
        start = self._cursor
        while (
            self._cursor < len(self._points)
            and self._points[self._cursor] <= time + self.tolerance
        ):
            self._cursor += 1
        if self._cursor > start:
            log.debug(
                f"Consumed breakpoints {self._points[start:self._cursor]} at t={time}"
            )

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"BreakpointSchedule(points={self._points}, cursor={self._cursor})"
