"""Architecture enforcement tests for the layered package layout.

This module provides lightweight, repository-local invariants to ensure that
the provider-agnostic core (``aicall/base``) and the configuration layer stay
decoupled from the outer layers: concrete provider adapters and the
composition root. It focuses on import boundaries only and is designed to
fail fast if a forbidden dependency is introduced.

Rules validated here:
1) ``aicall/base`` and ``aicall/config`` must not import ``aicall.mock``,
   ``aicall.openai`` or ``aicall.di`` (absolute or relative).
   - Adapters are reached through ``ProviderFactory`` by module path string.
2) Provider adapters must not import the composition root ``aicall.di``.

These tests are static-file scans to avoid import-time side effects, and they
emit clear failure messages for quick remediation.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Sequence

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
PACKAGE_ROOT = REPO_ROOT / "aicall"


def _iter_python_files(root: Path) -> Iterable[Path]:
    """Yield all Python source files under a root directory.

    Parameters
    ----------
    root: Path
        The directory to scan recursively.

    Yields
    ------
    Path
        Paths to ``.py`` files under ``root``, skipping ``__pycache__``.
    """

    for path in root.rglob("*.py"):
        if "__pycache__" in path.parts:
            continue
        yield path


def _read_text(path: Path) -> str:
    """Read a file as UTF-8 text, replacing undecodable bytes."""

    return path.read_text(encoding="utf-8", errors="replace")


def _import_pattern(targets: Sequence[str]) -> re.Pattern[str]:
    names = "|".join(targets)
    return re.compile(
        rf"^\s*(?:from\s+(?:aicall\.|\.{{2,}})(?:{names})\b|import\s+aicall\.(?:{names})\b)",
        re.MULTILINE,
    )


def _offenders(roots: Iterable[Path], pattern: re.Pattern[str]) -> List[str]:
    found: List[str] = []
    for root in roots:
        for py in _iter_python_files(root):
            for match in pattern.finditer(_read_text(py)):
                found.append(f"{py.relative_to(REPO_ROOT)}: '{match.group(0).strip()}'")
    return found


def test_core_does_not_import_outer_layers() -> None:
    """``aicall/base`` and ``aicall/config`` depend inward only."""

    roots = [PACKAGE_ROOT / "base", PACKAGE_ROOT / "config"]
    if not all(r.is_dir() for r in roots):
        pytest.skip("aicall/base or aicall/config not found; skipping boundary check")

    offenders = _offenders(roots, _import_pattern(("mock", "openai", "di")))
    if offenders:
        pytest.fail("Core modules must not import adapters or the DI container.\n" + "\n".join(offenders))


def test_adapters_do_not_import_the_composition_root() -> None:
    """Adapters are wired by the container, never the other way round."""

    roots = [p for p in (PACKAGE_ROOT / "mock", PACKAGE_ROOT / "openai") if p.is_dir()]
    offenders = _offenders(roots, _import_pattern(("di",)))
    if offenders:
        pytest.fail("Provider adapters must not import aicall.di.\n" + "\n".join(offenders))
