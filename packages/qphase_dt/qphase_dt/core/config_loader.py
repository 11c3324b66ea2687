"""Configuration loading utilities.

This module builds a validated ``ControllerConfig`` from layered YAML sources
and explicit overrides, and is the only place where configuration I/O happens.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import ControllerConfig
from .errors import QDTConfigError, get_logger
from .utils import deep_merge_dicts, load_yaml_file

logger = get_logger()

ENV_VAR = "QPHASE_DT_CONFIG"


def user_config_path() -> Path:
    """Return the per-user override file location."""
    return Path.home() / ".qphase_dt" / "config.yaml"


def load_controller_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ControllerConfig:
    """Load controller configuration with override chain.

    Search order (later overrides earlier):
    1. ~/.qphase_dt/config.yaml (User-specific)
    2. QPHASE_DT_CONFIG environment variable
    3. Explicitly provided config_path
    4. ``overrides`` dictionary

    Parameters
    ----------
    config_path : str or Path, optional
        Path to a specific config file. Unlike the implicit layers, a missing
        or unreadable explicit file is an error.
    overrides : dict, optional
        Values merged last, e.g. from CLI options.

    Returns
    -------
    ControllerConfig
        Validated configuration

    Raises
    ------
    QDTConfigError
        If the explicit file cannot be loaded or validation fails.

    """
    config_dict: dict[str, Any] = {}

    user_path = user_config_path()
    if user_path.exists():
        try:
            config_dict = deep_merge_dicts(config_dict, load_yaml_file(user_path))
        except QDTConfigError as e:
            logger.warning(f"Failed to load user config {user_path}: {e}")

    env_path = os.environ.get(ENV_VAR)
    if env_path:
        path = Path(env_path)
        if path.exists():
            try:
                config_dict = deep_merge_dicts(config_dict, load_yaml_file(path))
            except QDTConfigError as e:
                logger.warning(f"Failed to load env config {path}: {e}")

    if config_path is not None:
        config_dict = deep_merge_dicts(config_dict, load_yaml_file(Path(config_path)))

    if overrides:
        config_dict = deep_merge_dicts(config_dict, overrides)

    try:
        return ControllerConfig(**config_dict)
    except ValidationError as e:
        raise QDTConfigError(f"[505] Invalid controller configuration: {e}") from e
