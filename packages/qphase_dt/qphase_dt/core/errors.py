"""qphase_dt: Error Taxonomy and Logging
-------------------------------------

Independent error system for the qphase_dt package.
This module defines a standalone error hierarchy without any dependencies
on qphase or the SDE packages.

Error Hierarchy
---------------
- QDTError: Base exception for all qphase_dt errors
- QDTStepSizeError: Invalid step size after all adjustments (300)
- QDTExhaustedRetriesError: Consecutive rejections exhausted (301)
- QDTLimitingFunctionError: The limiting function raised while being evaluated (302)
- QDTConfigError: Configuration and table-data errors (500-599)
- QDTStateError: Controller used out of order or after termination (700-799)

A rejected solve is not an error: the controller absorbs it by cutting the
step back. Only terminal conditions are raised.

Logging
-------
The shared logger is named "qphase_dt" and can be configured for
console and file output with optional JSON formatting.
Python warnings are captured into logging with adjustable levels.
"""

import logging
import math
import os
from typing import Any

__all__ = [
    "QDTError",
    "QDTStepSizeError",
    "QDTExhaustedRetriesError",
    "QDTLimitingFunctionError",
    "QDTConfigError",
    "QDTStateError",
    "get_logger",
    "configure_logging",
]


# =============================================================================
# Exception Hierarchy
# =============================================================================


class QDTError(Exception):
    """Base exception for all qphase_dt errors.

    Examples
    --------
    >>> try:
    ...     controller.propose_step()  # doctest: +SKIP
    ... except QDTError as e:
    ...     print(f"Step control failed: {e}")

    """

    pass


class QDTStepSizeError(QDTError):
    """Invalid step size (Code 300).

    Raised when a computed ``dt`` is non-positive, non-finite or above
    ``dt_max`` after every adjustment. This always points at a configuration
    or table-data inconsistency and is never clamped away.

    Attributes
    ----------
    time : float
        Simulation time at which the step was computed.
    dt : float
        The offending step size.
    failures : int
        Consecutive rejection count at the moment of failure.

    """

    def __init__(self, message: str, *, time: float, dt: float, failures: int = 0):
        super().__init__(message)
        self.time = time
        self.dt = dt
        self.failures = failures


class QDTExhaustedRetriesError(QDTError):
    """Consecutive rejections exhausted (Code 301).

    Raised when the solver keeps failing and the controller cannot cut the
    step back any further, either because ``max_rejections`` was exceeded or
    because ``dt`` already sits at ``dt_min``. The run must stop.

    Attributes
    ----------
    time : float
        Last accepted simulation time.
    dt : float
        Last attempted step size.
    failures : int
        Number of consecutive rejections.
    feedback : Any
        The ``SolveFeedback`` of the final failed attempt.

    """

    def __init__(
        self,
        message: str,
        *,
        time: float,
        dt: float,
        failures: int,
        feedback: Any = None,
    ):
        super().__init__(message)
        self.time = time
        self.dt = dt
        self.failures = failures
        self.feedback = feedback


class QDTLimitingFunctionError(QDTError):
    """Limiting function failure (Code 302).

    Raised when the user-supplied limiting function raises. The original
    exception is chained as ``__cause__``. The controller fills in ``dt`` and
    ``failures`` and becomes terminal.

    Attributes
    ----------
    time : float
        Time at which the function was evaluated.
    dt : float
        Current step size of the controller, NaN when unknown.
    failures : int
        Consecutive rejection count at the moment of failure.

    """

    def __init__(
        self, message: str, *, time: float, dt: float = math.nan, failures: int = 0
    ):
        super().__init__(message)
        self.time = time
        self.dt = dt
        self.failures = failures


class QDTConfigError(QDTError):
    """Configuration-related errors (Code 500-599).

    Raised when configuration validation, loading or resolution fails.
    Examples: non-monotonic table, missing limiting function, bad YAML.
    """

    pass


class QDTStateError(QDTError):
    """Controller state errors (Code 700-799).

    Raised when the controller is driven out of order, e.g. a result is
    reported before any step was proposed, or after it became terminal.
    """

    pass


# =============================================================================
# Logger Configuration
# =============================================================================

_logger: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the shared qphase_dt logger instance.

    Returns
    -------
    logging.Logger
        The singleton logger named "qphase_dt" configured at INFO level by
        default with a console handler. Handlers are created lazily on first use.

    Examples
    --------
    >>> logger = get_logger()
    >>> logger.name
    'qphase_dt'

    """
    global _logger
    if _logger is None:
        _logger = logging.getLogger("qphase_dt")
        _logger.setLevel(logging.INFO)
        if not _logger.handlers:
            h = logging.StreamHandler()
            fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            h.setFormatter(fmt)
            _logger.addHandler(h)
    return _logger


def configure_logging(
    verbose: bool = False,
    log_file: str | None = None,
    as_json: bool = False,
    suppress_warnings: bool = False,
) -> None:
    """Configure the shared logger outputs and warning capture.

    Parameters
    ----------
    verbose : bool, default False
        When True, set logger level to DEBUG; otherwise INFO.
    log_file : str or None, default None
        Optional file path to append logs.
    as_json : bool, default False
        Emit logs in a compact JSON line format when True; otherwise plain text.
    suppress_warnings : bool, default False
        Route Python warnings into logging and raise their level to ERROR when
        True; otherwise capture warnings at WARNING level.

    Raises
    ------
    QDTConfigError
        - [510] The log file cannot be opened.

    """
    logger = get_logger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    ch = logging.StreamHandler()
    if as_json:
        fmt = logging.Formatter(
            '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","msg":"%(message)s"}'
        )
    else:
        fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:
        try:
            fh = logging.FileHandler(os.fspath(log_file), encoding="utf-8")
        except OSError as e:
            raise QDTConfigError(f"[510] Cannot open log file {log_file}: {e}") from e
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    logging.captureWarnings(True)
    logging.getLogger("py.warnings").setLevel(
        logging.ERROR if suppress_warnings else logging.WARNING
    )
