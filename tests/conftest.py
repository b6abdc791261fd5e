"""Shared pytest fixtures for diskcached tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from diskcached.core.caching import reset_default_store
from diskcached.core.io import FakeFileSystem


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    """Provide an empty in-memory filesystem."""
    return FakeFileSystem()


@pytest.fixture(autouse=True)
def _reset_default_store():
    """Keep the process-wide default store from leaking between tests."""
    reset_default_store()
    yield
    reset_default_store()
