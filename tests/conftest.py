"""
Pytest Configuration and Shared Test Fixtures

All fixtures defined here are automatically available to all test files.
No test needs a live Redis: store handles are InMemoryStore instances or
AsyncMock doubles.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from redis_dataloader.core.config.settings import Settings
from redis_dataloader.core.interfaces.store import InMemoryStore


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """Settings with fixed values, independent of the environment."""
    return Settings(
        _env_file=None,
        REDIS_PRIMARY_URL="redis://primary:6379/0",
        REDIS_REPLICA_URL="redis://replica:6379/0",
        LOADER_DEFAULT_EXPIRE=None,
        LOADER_MAX_BATCH_SIZE=None,
        LOADER_LOCAL_CACHE=True,
        LOADER_INVALIDATION_CHANNEL=None,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def primary_store():
    """In-memory primary handle."""
    return InMemoryStore()


@pytest.fixture
def replica_store(primary_store):
    """Replica sharing the primary's data, as after a completed sync."""
    replica = InMemoryStore()
    replica.data = primary_store.data
    replica.expiry = primary_store.expiry
    return replica


@pytest.fixture
def mock_logger():
    """Logger double; bind() returns the same double."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


# ============================================================================
# Fetch Function Fixtures
# ============================================================================


class RecordingFetch:
    """
    Async fetch function that records every key it is asked for.

    Args:
        values: key -> value; keys not listed resolve to None
        errors: key -> exception raised for that key
        delay: seconds to sleep per call, keyed lookups take ``delays`` first
    """

    def __init__(self, values=None, errors=None, delay=0.0, delays=None):
        self.values = values or {}
        self.errors = errors or {}
        self.delay = delay
        self.delays = delays or {}
        self.calls = []

    async def __call__(self, key):
        self.calls.append(key)
        lookup = key if isinstance(key, str) else repr(key)
        await asyncio.sleep(self.delays.get(lookup, self.delay))
        if lookup in self.errors:
            raise self.errors[lookup]
        return self.values.get(lookup)

    @property
    def call_count(self):
        return len(self.calls)


@pytest.fixture
def recording_fetch():
    """Factory for RecordingFetch instances."""
    return RecordingFetch
