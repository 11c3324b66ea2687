"""qphase_dt: CLI Entry Point
---------------------------------------------------------
Initializes the Typer application for the ``qdt`` console script and wires in
the diagnostic sub-commands for validating controller configurations and
replaying recorded solver feedback through a controller.

Public API
----------
``app`` : The main Typer application instance.
"""

from __future__ import annotations

import typer

from .commands.check import check_command
from .commands.replay import replay_command

app = typer.Typer(help="QPhase step-size controller tools")


@app.callback()
def main():
    """QPhase step-size controller command line interface."""
    pass


app.command("check")(check_command)
app.command("replay")(replay_command)
