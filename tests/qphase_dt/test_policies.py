"""Tests for growth policies."""

import pytest
from qphase_dt.core.config import ControllerConfig, TableConfig
from qphase_dt.core.protocols import GrowthPolicy, SolveFeedback
from qphase_dt.policies import HeuristicPolicy, TablePolicy, make_policy
from qphase_dt.schedule.table import PiecewiseLinearTable


def _fb(nl: int, l: int = 0) -> SolveFeedback:
    return SolveFeedback(converged=True, nonlinear_iterations=nl, linear_iterations=l)


@pytest.fixture
def heuristic():
    return HeuristicPolicy(
        growth_factor=2.0,
        cutback_factor=0.5,
        optimal_iterations=10,
        iteration_window=2,
        linear_iteration_ratio=25.0,
    )


def test_below_window_grows(heuristic):
    assert heuristic.next_dt(0.0, 1.0, _fb(7), allow_growth=True) == 2.0


def test_within_window_holds(heuristic):
    for nl in (8, 10, 12):
        assert heuristic.next_dt(0.0, 1.0, _fb(nl), allow_growth=True) == 1.0


def test_above_window_shrinks(heuristic):
    assert heuristic.next_dt(0.0, 1.0, _fb(13), allow_growth=True) == 0.5


def test_linear_ratio_triggers_shrink(heuristic):
    assert heuristic.next_dt(0.0, 1.0, _fb(10, 300), allow_growth=True) == 0.5
    assert heuristic.next_dt(0.0, 1.0, _fb(3, 90), allow_growth=True) == 0.5
    assert heuristic.next_dt(0.0, 1.0, _fb(10, 250), allow_growth=True) == 1.0


def test_growth_suppressed_but_shrink_allowed(heuristic):
    assert heuristic.next_dt(0.0, 1.0, _fb(3), allow_growth=False) == 1.0
    assert heuristic.next_dt(0.0, 1.0, _fb(20), allow_growth=False) == 0.5


def test_zero_nonlinear_iterations_grow(heuristic):
    assert heuristic.next_dt(0.0, 1.0, _fb(0, 40), allow_growth=True) == 2.0


def test_without_target_grows_every_acceptance():
    policy = HeuristicPolicy(growth_factor=1.5, cutback_factor=0.5)
    assert policy.next_dt(0.0, 2.0, _fb(100, 10000), allow_growth=True) == 3.0
    assert policy.next_dt(0.0, 2.0, _fb(1), allow_growth=False) == 2.0


def test_table_policy_follows_table_with_growth_cap():
    table = PiecewiseLinearTable([0.0, 10.0], [1.0, 100.0])
    policy = TablePolicy(table=table, growth_factor=2.0)
    assert policy.next_dt(0.0, 5.0, _fb(50), allow_growth=True) == 1.0
    assert policy.next_dt(10.0, 5.0, _fb(1), allow_growth=True) == 10.0
    assert policy.next_dt(10.0, 5.0, _fb(1), allow_growth=False) == 5.0


def test_make_policy_selects_once():
    heuristic_cfg = ControllerConfig(dt=1.0, optimal_iterations=10)
    table_cfg = ControllerConfig(
        dt=1.0,
        optimal_iterations=10,
        table=TableConfig(times=[0.0, 1.0], values=[0.5, 0.5]),
    )
    table = PiecewiseLinearTable([0.0, 1.0], [0.5, 0.5])

    h = make_policy(heuristic_cfg)
    t = make_policy(table_cfg, table)
    assert isinstance(h, HeuristicPolicy)
    assert h.iteration_window == 2
    assert isinstance(t, TablePolicy)
    assert isinstance(h, GrowthPolicy)
    assert isinstance(t, GrowthPolicy)
