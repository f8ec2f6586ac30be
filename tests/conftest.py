"""Shared test fixtures for capsync."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def tmp_capsync_home(tmp_path: Path) -> Path:
    """Provide a temporary capsync home directory."""
    home = tmp_path / ".capsync"
    home.mkdir()
    return home


@pytest.fixture
def cache_dir(tmp_capsync_home: Path) -> Path:
    """Provide an empty capability cache directory."""
    path = tmp_capsync_home / "capabilities"
    path.mkdir()
    return path


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Provide an empty definition source directory."""
    path = tmp_path / "definitions"
    path.mkdir()
    return path
