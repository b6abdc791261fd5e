"""Fixtures for cache pipeline tests."""

import pytest

from tests.fixtures.stores import CountingProducer, RecordingStore


@pytest.fixture
def store() -> RecordingStore:
    """Provide empty recording store."""
    return RecordingStore()


@pytest.fixture
def producer() -> CountingProducer:
    """Provide producer returning 'fresh'."""
    return CountingProducer("fresh")
