"""qphase_dt: Configuration Check Command
---------------------------------------------------------
Implements ``qdt check``: load a controller configuration through the usual
override chain, build the controller (resolving any limiting function) and
report the initial proposal.
"""

from pathlib import Path

import typer

from qphase_dt.controller import StepSizeController
from qphase_dt.core.config_loader import load_controller_config
from qphase_dt.core.errors import QDTError, configure_logging, get_logger


def check_command(
    config: Path = typer.Argument(..., help="Controller configuration YAML file"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
):
    """Validate a controller configuration and print its initial step.

    Examples
    --------
        qdt check configs/controller.yaml

    """
    configure_logging(verbose=verbose)
    log = get_logger()

    try:
        cfg = load_controller_config(config)
        controller = StepSizeController(cfg)
        dt = controller.propose_step()
    except QDTError as e:
        log.error(str(e))
        raise typer.Exit(code=1) from e

    policy = "table" if cfg.table is not None else "heuristic"
    typer.echo(f"Configuration OK: {config}")
    typer.echo(f"  policy:      {policy}")
    typer.echo(f"  start time:  {cfg.start_time}")
    typer.echo(f"  initial dt:  {dt}")
    typer.echo(f"  breakpoints: {len(controller.schedule.remaining)} remaining")
