"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import pytest

from heap_cache.cache.store import HeapStore
from heap_cache.config.settings import Settings
from heap_cache.protocol.parser import ProtocolParser
from heap_cache.provider import ServiceContainer
from heap_cache.shell import CacheShell


class FakeClock:
    """
    Manually advanced clock for expiration tests.

    Usage:
        clock = FakeClock()
        store = HeapStore(clock=clock)
        clock.advance(minutes=5)
    """

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0) -> None:
        self.now += seconds + minutes * 60


# ============================================================================
# HeapStore Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def cache_settings() -> Settings:
    """Settings with a known prefix and default ttl."""
    return Settings(PREFIX="app_", DEFAULT_TTL=10)


@pytest.fixture
def store(cache_settings: Settings, clock: FakeClock) -> HeapStore:
    """Create a fresh HeapStore driven by the fake clock."""
    return HeapStore(settings=cache_settings, clock=clock)


@pytest.fixture
def real_store(cache_settings: Settings) -> HeapStore:
    """Create a HeapStore on the real clock, for threaded tests."""
    return HeapStore(settings=cache_settings)


# ============================================================================
# Shell Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def shell(store: HeapStore) -> CacheShell:
    """Create a shell bound to the fake-clock store."""
    return CacheShell(store)


# ============================================================================
# Container Fixtures
# ============================================================================

@pytest.fixture
def container() -> ServiceContainer:
    """Create an empty service container."""
    return ServiceContainer()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
