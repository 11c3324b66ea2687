"""qphase_dt: Core Utilities
---------------------------------------------------------
Shared helpers for configuration management: YAML parsing with error
handling, deep dictionary merging, and dotted-path resolution of callables
referenced from configuration files.

Public API
----------
``load_yaml_file`` : Load YAML with error handling
``deep_merge_dicts`` : Recursive dictionary merge
``resolve_callable`` : Import ``module:attr`` or ``module.attr`` targets
"""

from __future__ import annotations

from collections.abc import Callable
from importlib import import_module
from pathlib import Path
from typing import Any

import yaml

from .errors import QDTConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from disk.

    Parameters
    ----------
    path : Path
        Path to the YAML file

    Returns
    -------
    dict[str, Any]
        Loaded YAML data; an empty file yields an empty dict.

    Raises
    ------
    QDTConfigError
        - [501] File does not exist.
        - [502] File cannot be parsed or is not a mapping.

    """
    if not path.exists():
        raise QDTConfigError(f"[501] File not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise QDTConfigError(f"[502] Failed to parse YAML file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise QDTConfigError(f"[502] Expected a mapping at top level of {path}")
    return data


def deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override values taking precedence.

    Lists and scalars in ``override`` replace the base value outright; only
    nested dicts are merged key by key.
    """
    result = dict(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def resolve_callable(target: str) -> Callable[..., Any]:
    """Import a dotted target supporting ``module:attr`` or ``module.attr``.

    Parameters
    ----------
    target : str
        Dotted path such as ``"math:sin"`` or ``"mypkg.loads.ramp"``.

    Returns
    -------
    Callable[..., Any]
        The resolved attribute.

    Raises
    ------
    QDTConfigError
        - [503] Module cannot be imported.
        - [504] Attribute missing or not callable.

    """
    if ":" in target:
        module_name, attr_name = target.split(":", 1)
    elif "." in target:
        module_name, attr_name = target.rsplit(".", 1)
    else:
        raise QDTConfigError(f"[504] Target '{target}' does not name an attribute")

    try:
        mod = import_module(module_name)
    except ImportError as e:
        raise QDTConfigError(f"[503] Cannot import '{module_name}': {e}") from e

    obj = getattr(mod, attr_name, None)
    if obj is None or not callable(obj):
        raise QDTConfigError(f"[504] Target '{target}' not found or not callable")
    return obj
