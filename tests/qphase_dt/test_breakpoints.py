"""Tests for the breakpoint schedule."""

from qphase_dt.schedule.breakpoints import BreakpointSchedule


def test_sorted_and_deduplicated():
    sched = BreakpointSchedule([5.0, 2.0, 2.0, 3.5])
    assert sched.points == (2.0, 3.5, 5.0)
    assert len(sched) == 3


def test_merges_table_points():
    sched = BreakpointSchedule([2.0], table_times=[0.0, 2.0, 4.0])
    assert sched.points == (0.0, 2.0, 4.0)


def test_next_breakpoint_after():
    sched = BreakpointSchedule([2.0, 5.0])
    assert sched.next_breakpoint_after(1.0) == 2.0
    assert sched.next_breakpoint_after(2.0) == 5.0
    assert sched.next_breakpoint_after(5.0) is None


def test_advance_past_consumes_reached_points():
    sched = BreakpointSchedule([1.0, 2.0, 3.0])
    sched.advance_past(2.0)
    assert sched.remaining == (3.0,)
    assert sched.cursor == 2


def test_consumed_points_never_revisited():
    sched = BreakpointSchedule([1.0, 2.0])
    sched.advance_past(2.0)
    assert sched.next_breakpoint_after(0.0) is None
    assert sched.remaining == ()


def test_start_time_consumes_earlier_points():
    sched = BreakpointSchedule([0.0, 1.0, 2.0], start_time=1.0)
    assert sched.remaining == (2.0,)
    assert sched.next_breakpoint_after(1.0) == 2.0


def test_tolerance_treats_near_points_as_reached():
    sched = BreakpointSchedule([1.0, 2.0], tolerance=1e-12)
    assert sched.next_breakpoint_after(1.0 - 1e-13) == 2.0
    sched.advance_past(1.0 - 1e-13)
    assert sched.remaining == (2.0,)


def test_empty_schedule_is_noop():
    sched = BreakpointSchedule([])
    assert sched.next_breakpoint_after(0.0) is None
    sched.advance_past(10.0)
    assert sched.remaining == ()
