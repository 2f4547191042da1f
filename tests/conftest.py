"""
Main pytest configuration for the cache layer tests.

Fixtures, configuration, and utilities shared by the unit tests.
"""

import os

import pytest

# Set test environment variables before importing package modules
os.environ["ENVIRONMENT"] = "test"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["REDIS_URL"] = "redis://localhost:5240/0"
os.environ["LOG_LEVEL"] = "DEBUG"

from mealcache.infrastructure.memory import InMemoryCacheStore
from mealcache.monitoring.cache_metrics import CacheMetricsRecorder
from mealcache.services.cache.cache_manager import CacheManager


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a manually driven clock."""
    return ManualClock()


@pytest.fixture
def memory_store(clock):
    """Create an in-memory store driven by the manual clock."""
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def cache_manager(memory_store):
    """Create a cache manager over the in-memory store."""
    return CacheManager(
        memory_store, scan_batch_size=2, metrics=CacheMetricsRecorder()
    )


# Test markers and configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "redis" in item.nodeid:
            item.add_marker(pytest.mark.redis)
