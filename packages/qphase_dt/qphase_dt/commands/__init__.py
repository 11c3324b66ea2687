"""qphase_dt: commands subpackage
---------------------------------------------------------
Implementation of the ``qdt`` CLI commands, built with Typer.

Public API
----------
``check`` : Validate a controller configuration file (``qdt check``)
``replay`` : Drive a controller from a recorded feedback trace (``qdt replay``)
"""
