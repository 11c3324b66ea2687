"""qphase_dt: Feedback Replay Command
---------------------------------------------------------
Implements ``qdt replay``: feed a recorded sequence of solve outcomes into a
controller and print the step history it produces. Useful for tuning growth
and cutback settings against a real run without re-running the solver.

Trace file format (YAML)::

    feedback:
      - {converged: true, nonlinear_iterations: 3, linear_iterations: 12}
      - {converged: false}
      - {converged: true, nonlinear_iterations: 8, linear_iterations: 40}

"""

from pathlib import Path
from typing import Any

import typer

from qphase_dt.controller import StepSizeController
from qphase_dt.core.config_loader import load_controller_config
from qphase_dt.core.errors import (
    QDTConfigError,
    QDTError,
    configure_logging,
    get_logger,
)
from qphase_dt.core.protocols import SolveFeedback
from qphase_dt.core.utils import load_yaml_file


def load_feedback_trace(path: Path) -> list[SolveFeedback]:
    """Read a feedback trace file into ``SolveFeedback`` values."""
    data = load_yaml_file(path)
    entries: Any = data.get("feedback")
    if not isinstance(entries, list):
        raise QDTConfigError(f"[560] Trace {path} has no 'feedback' list")

    trace = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or "converged" not in entry:
            raise QDTConfigError(f"[561] Trace entry {i} needs a 'converged' flag")
        trace.append(
            SolveFeedback(
                converged=bool(entry["converged"]),
                nonlinear_iterations=int(entry.get("nonlinear_iterations", 0)),
                linear_iterations=int(entry.get("linear_iterations", 0)),
            )
        )
    return trace


def replay_command(
    config: Path = typer.Argument(..., help="Controller configuration YAML file"),
    trace: Path = typer.Argument(..., help="Feedback trace YAML file"),
    end_time: float | None = typer.Option(
        None, "--end-time", help="Stop once simulation time reaches this value"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
    log_file: str | None = typer.Option(None, help="Write logs to file path"),
    log_json: bool = typer.Option(False, help="Log in JSON format"),
):
    """Replay a recorded feedback trace through a controller.

    Examples
    --------
        qdt replay configs/controller.yaml runs/trace.yaml
        qdt replay --end-time 10 configs/controller.yaml runs/trace.yaml

    """
    configure_logging(verbose=verbose, log_file=log_file, as_json=log_json)
    log = get_logger()

    try:
        cfg = load_controller_config(config)
        feedback = load_feedback_trace(trace)
        controller = StepSizeController(cfg)
    except QDTError as e:
        log.error(str(e))
        raise typer.Exit(code=1) from e

    typer.echo(f"{'step':>5} {'time':>14} {'dt':>14}  result")
    try:
        for i, fb in enumerate(feedback):
            if end_time is not None and controller.time >= end_time:
                break
            dt = controller.propose_step()
            t = controller.time
            controller.report_result(fb)
            outcome = (
                f"ok (nl={fb.nonlinear_iterations}, l={fb.linear_iterations})"
                if fb.converged
                else "rejected"
            )
            typer.echo(f"{i:>5} {t:>14.6g} {dt:>14.6g}  {outcome}")
        next_dt = controller.propose_step()
    except QDTError as e:
        log.error(str(e))
        raise typer.Exit(code=1) from e

    accepted = sum(1 for r in controller.history if r.converged)
    typer.echo(
        f"\nReplayed {len(controller.history)} attempt(s), {accepted} accepted; "
        f"final time {controller.time:.6g}, next dt {next_dt:.6g}"
    )
