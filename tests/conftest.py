"""Pytest configuration for minitrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Kernels run in
    float64 so they can be compared against the Python reference routines.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes text to a file under tmp_path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def clean_render_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every RENDER_* override from the environment."""
    from src.minitrace.parsing.config import ENV_OVERRIDES

    for variable in ENV_OVERRIDES:
        monkeypatch.delenv(variable, raising=False)
