"""Verify photojob package installation structure.

After ``pip install -e .``, every subpackage must be importable through the
``photojob`` namespace.  These tests confirm the pyproject.toml
``package-dir`` mapping and explicit ``packages`` list are correct.
"""
from __future__ import annotations

import importlib
import subprocess
import sys

import pytest

# ---------------------------------------------------------------------------
# All packages declared in pyproject.toml [tool.setuptools] packages
# ---------------------------------------------------------------------------
EXPECTED_PACKAGES = [
    "photojob",
    "photojob.jobs",
    "photojob.utils",
]

# Top-level modules inside the photojob package
EXPECTED_MODULES = [
    "photojob.config",
    "photojob.config_structured",
    "photojob.settings",
    "photojob.photo",
    "photojob.run_job",
]


class TestPackageInstallation:
    """Verify every declared package is importable."""

    @pytest.mark.parametrize("package", EXPECTED_PACKAGES)
    def test_package_importable(self, package: str) -> None:
        mod = importlib.import_module(package)
        assert hasattr(mod, "__file__") or hasattr(mod, "__path__")

    @pytest.mark.parametrize("module", EXPECTED_MODULES)
    def test_module_importable(self, module: str) -> None:
        mod = importlib.import_module(module)
        assert mod.__file__ is not None


class TestCriticalImportPaths:
    """Verify the most-used import paths resolve."""

    def test_job(self) -> None:
        from photojob.jobs import PhotoJob
        assert PhotoJob is not None

    def test_cli_tool(self) -> None:
        from photojob.jobs.tool import CliTransformTool, default_tool
        assert CliTransformTool is not None
        assert callable(default_tool)

    def test_entry_point(self) -> None:
        from photojob.run_job import main
        assert callable(main)

    def test_version(self) -> None:
        import photojob
        assert photojob.__version__


class TestEggInfoCorrect:
    """Verify the installed package metadata is correct."""

    def test_no_stale_top_level_jobs(self) -> None:
        """``jobs`` must only be reachable as ``photojob.jobs``."""
        from pathlib import Path

        egg_info = Path(__file__).resolve().parent.parent / "photojob.egg-info" / "top_level.txt"
        if egg_info.exists():
            top_levels = egg_info.read_text().strip().splitlines()
            assert "jobs" not in top_levels
            assert "photojob" in top_levels

    def test_subprocess_import(self) -> None:
        """Verify import works in a clean subprocess (no CWD pollution)."""
        result = subprocess.run(
            [
                sys.executable, "-c",
                "import photojob; from photojob.jobs import PhotoJob; print('OK')",
            ],
            capture_output=True,
            text=True,
            timeout=30,
        )
        assert result.returncode == 0, f"Import failed in subprocess: {result.stderr}"
        assert "OK" in result.stdout
