"""Tests for CLI commands using Typer's CliRunner."""

import pytest
from qphase_dt.commands.replay import load_feedback_trace
from qphase_dt.core.errors import QDTConfigError
from qphase_dt.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def controller_file(write_yaml):
    return write_yaml(
        "controller.yaml",
        {
            "dt": 1.0,
            "optimal_iterations": 10,
            "iteration_window": 2,
            "breakpoints": [2.5],
        },
    )


@pytest.fixture
def trace_file(write_yaml):
    return write_yaml(
        "trace.yaml",
        {
            "feedback": [
                {"converged": True, "nonlinear_iterations": 3, "linear_iterations": 9},
                {"converged": False},
                {"converged": True, "nonlinear_iterations": 10, "linear_iterations": 30},
            ]
        },
    )


def test_check_command(controller_file):
    """Test 'check' on a valid configuration."""
    result = runner.invoke(app, ["check", str(controller_file)])
    assert result.exit_code == 0
    assert "Configuration OK" in result.stdout
    assert "initial dt:  1.0" in result.stdout
    assert "heuristic" in result.stdout


def test_check_command_invalid(write_yaml):
    """Test 'check' reports invalid configuration with exit code 1."""
    bad = write_yaml("bad.yaml", {"cutback_factor": 3.0})
    result = runner.invoke(app, ["check", str(bad)])
    assert result.exit_code == 1


def test_replay_command(controller_file, trace_file):
    """Test 'replay' prints one line per attempt and a summary."""
    result = runner.invoke(app, ["replay", str(controller_file), str(trace_file)])
    assert result.exit_code == 0
    assert "rejected" in result.stdout
    assert "Replayed 3 attempt(s), 2 accepted" in result.stdout


def test_replay_stops_at_end_time(controller_file, trace_file):
    """Test 'replay --end-time' stops feeding once time is reached."""
    result = runner.invoke(
        app, ["replay", "--end-time", "0.5", str(controller_file), str(trace_file)]
    )
    assert result.exit_code == 0
    assert "Replayed 1 attempt(s), 1 accepted" in result.stdout


def test_replay_exhausted_retries_exit_code(write_yaml):
    """Test 'replay' exits with 1 when the controller gives up."""
    cfg = write_yaml("strict.yaml", {"dt": 1.0, "max_rejections": 0})
    trace = write_yaml("fail.yaml", {"feedback": [{"converged": False}]})
    result = runner.invoke(app, ["replay", str(cfg), str(trace)])
    assert result.exit_code == 1


def test_replay_empty_trace_with_invalid_start_exits_cleanly(write_yaml):
    """Test 'replay' exits with 1 when even the first proposal fails."""
    cfg = write_yaml(
        "table.yaml",
        {
            "start_time": 5.0,
            "table": {"times": [0.0, 1.0], "values": [0.1, 0.1], "out_of_range": "error"},
        },
    )
    trace = write_yaml("empty.yaml", {"feedback": []})
    result = runner.invoke(app, ["replay", str(cfg), str(trace)])
    assert result.exit_code == 1
    assert not isinstance(result.exception, QDTConfigError)


def test_load_feedback_trace(trace_file, write_yaml):
    trace = load_feedback_trace(trace_file)
    assert [fb.converged for fb in trace] == [True, False, True]
    assert trace[2].linear_iterations == 30

    with pytest.raises(QDTConfigError):
        load_feedback_trace(write_yaml("no_list.yaml", {"steps": []}))
    with pytest.raises(QDTConfigError):
        load_feedback_trace(write_yaml("no_flag.yaml", {"feedback": [{"nonlinear_iterations": 1}]}))
