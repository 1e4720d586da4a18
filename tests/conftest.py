"""Shared pytest fixtures for retrace tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from retrace.history.container import History


@pytest.fixture(autouse=True)
def _reset_retrace_logger():
    """Undo setup_logging() so caplog sees records in later tests."""
    yield
    root = logging.getLogger("retrace")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "default.yaml"


@pytest.fixture
def default_config(config_path: Path):
    return OmegaConf.load(config_path)


@pytest.fixture
def counter_history() -> History[int]:
    """Unbounded integer history starting at 0."""
    return History(0)


@pytest.fixture
def record_state() -> dict:
    """A composite state with several fields."""
    return {"title": "draft", "width": 100, "height": 50, "tags": ["a"]}
