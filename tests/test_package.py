"""Tests for package imports and exports.

Each subpackage must import in a fresh interpreter, before any ti.init()
call, since the Taichi dataclasses and function signatures are built at
import time.
"""

import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


class TestFreshImport:
    """Import modules in a new interpreter with no other setup."""

    @pytest.mark.parametrize(
        "module",
        [
            "src.minitrace.geometry",
            "src.minitrace.scene",
            "src.minitrace.parsing.scene",
            "src.minitrace.parsing.config",
            "src.minitrace.core.integrator",
            "examples.render_scene",
        ],
    )
    def test_module_imports(self, module):
        """Test that importing the module alone succeeds."""
        result = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            cwd=ROOT,
            capture_output=True,
            text=True,
            timeout=120,
        )
        assert result.returncode == 0, result.stderr


class TestModuleExports:
    """Test the names each subpackage re-exports."""

    def test_geometry_exports(self):
        """Test geometry exports both intersection versions."""
        from src.minitrace import geometry

        for name in ("HitRecord", "hit_sphere", "hit_sphere_ti", "hit_cylinder", "hit_cylinder_ti"):
            assert hasattr(geometry, name)

    def test_scene_exports(self):
        """Test scene exports the data model and the scene query."""
        from src.minitrace import scene

        for name in ("Scene", "SceneBuilder", "intersect_scene", "pack_scene"):
            assert hasattr(scene, name)
