"""Smoke tests – verify all modules are importable and free of syntax errors.

This is an infrastructure test (not a unit test), so it lives in the tests
root rather than under ``tests/unit/``.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Module lists
# ---------------------------------------------------------------------------

CORE_MODULES: list[str] = [
    "smartlists.core.logging",
    "smartlists.core.record",
]

SERVICE_MODULES: list[str] = [
    "smartlists.services.smart_lists",
    "smartlists.services.smart_lists.compiler",
    "smartlists.services.smart_lists.errors",
    "smartlists.services.smart_lists.evaluator",
    "smartlists.services.smart_lists.fields",
    "smartlists.services.smart_lists.models",
    "smartlists.services.smart_lists.orders",
    "smartlists.services.smart_lists.patterns",
    "smartlists.services.smart_lists.predicates",
    "smartlists.services.smart_lists.requirements",
    "smartlists.services.smart_lists.similarity",
]

UTILS_MODULES: list[str] = [
    "smartlists.utils.date_utils",
    "smartlists.utils.name_utils",
]

TOP_LEVEL_MODULES: list[str] = [
    "smartlists",
    "smartlists.config",
    "smartlists.version",
]


# ---------------------------------------------------------------------------
# Parametrized import tests
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("module_path", CORE_MODULES)
def test_import_core_modules(module_path: str) -> None:
    """Core module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", SERVICE_MODULES)
def test_import_service_modules(module_path: str) -> None:
    """Service module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", UTILS_MODULES)
def test_import_utils_modules(module_path: str) -> None:
    """Utils module must be importable without errors."""
    importlib.import_module(module_path)


@pytest.mark.parametrize("module_path", TOP_LEVEL_MODULES)
def test_import_top_level_modules(module_path: str) -> None:
    """Top-level module must be importable without errors."""
    importlib.import_module(module_path)


def test_public_api_exports() -> None:
    """Everything listed in the package ``__all__`` exists."""
    package = importlib.import_module("smartlists.services.smart_lists")
    for name in package.__all__:
        assert hasattr(package, name), name


# ---------------------------------------------------------------------------
# Circular import check
# ---------------------------------------------------------------------------


def test_no_circular_imports() -> None:
    """All modules can be imported in a fresh subprocess without cycles.

    Uses subprocess isolation to avoid corrupting module references for
    other tests in the same session.
    """
    import subprocess

    all_modules = CORE_MODULES + SERVICE_MODULES + UTILS_MODULES + TOP_LEVEL_MODULES
    import_lines = "; ".join(f"import {m}" for m in all_modules)
    result = subprocess.run(
        [sys.executable, "-c", import_lines],
        capture_output=True,
        text=True,
        timeout=30,
        cwd=Path(__file__).resolve().parent.parent,
    )
    assert result.returncode == 0, f"Circular import detected:\nstderr: {result.stderr}"
