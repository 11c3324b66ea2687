"""Pytest configuration and fixtures for qphase_dt tests."""

from pathlib import Path

import pytest
import yaml
from qphase_dt.core.protocols import SolveFeedback


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's config files and environment out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.delenv("QPHASE_DT_CONFIG", raising=False)
    yield home


@pytest.fixture
def ok():
    """Factory for accepted feedback."""

    def _ok(nl: int = 5, l: int = 20) -> SolveFeedback:
        return SolveFeedback(converged=True, nonlinear_iterations=nl, linear_iterations=l)

    return _ok


@pytest.fixture
def failed():
    """A rejected solve."""
    return SolveFeedback(converged=False, nonlinear_iterations=50, linear_iterations=500)


@pytest.fixture
def write_yaml(tmp_path):
    """Write a mapping to a YAML file under tmp_path and return its path."""

    def _write(name: str, data: dict) -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.safe_dump(data, f)
        return path

    return _write
