"""Tests for the piecewise-linear step table."""

import pytest
from qphase_dt.core.errors import QDTConfigError
from qphase_dt.schedule.table import PiecewiseLinearTable


def test_interpolates_between_knots():
    table = PiecewiseLinearTable([0.0, 10.0, 20.0], [1.0, 3.0, 2.0])
    assert table.value_at(5.0) == pytest.approx(2.0)
    assert table.value_at(15.0) == pytest.approx(2.5)


def test_knots_return_exact_values():
    table = PiecewiseLinearTable([0.0, 10.0, 20.0], [1.0, 3.0, 2.0])
    assert table.value_at(0.0) == 1.0
    assert table.value_at(10.0) == 3.0
    assert table.value_at(20.0) == 2.0


def test_clamp_policy_outside_range():
    table = PiecewiseLinearTable([1.0, 2.0], [0.5, 0.25])
    assert table.value_at(-5.0) == 0.5
    assert table.value_at(100.0) == 0.25


def test_error_policy_outside_range():
    table = PiecewiseLinearTable([1.0, 2.0], [0.5, 0.25], out_of_range="error")
    assert table.value_at(1.5) == pytest.approx(0.375)
    with pytest.raises(QDTConfigError):
        table.value_at(0.5)
    with pytest.raises(QDTConfigError):
        table.value_at(2.5)


def test_single_entry_table_is_constant():
    table = PiecewiseLinearTable([3.0], [0.1])
    assert table.value_at(0.0) == 0.1
    assert table.value_at(3.0) == 0.1
    assert table.domain == (3.0, 3.0)


@pytest.mark.parametrize(
    "times, values",
    [
        ([], []),
        ([0.0, 1.0], [1.0]),
        ([0.0, 2.0, 1.0], [1.0, 1.0, 1.0]),
        ([0.0, 0.0], [1.0, 1.0]),
        ([0.0, 1.0], [1.0, 0.0]),
        ([0.0, 1.0], [1.0, -2.0]),
    ],
)
def test_invalid_tables_rejected(times, values):
    with pytest.raises(QDTConfigError):
        PiecewiseLinearTable(times, values)


def test_unknown_policy_rejected():
    with pytest.raises(QDTConfigError):
        PiecewiseLinearTable([0.0], [1.0], out_of_range="wrap")  # type: ignore[arg-type]


def test_times_and_len():
    table = PiecewiseLinearTable([0.0, 1.0, 4.0], [1.0, 1.0, 1.0])
    assert table.times == (0.0, 1.0, 4.0)
    assert len(table) == 3
