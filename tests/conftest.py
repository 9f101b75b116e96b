"""Shared test fixtures and configuration."""

import pytest

from kvcache.cache.service import CacheService
from kvcache.cache.store import RedisStore
from tests.fixtures.fake_redis import FakeRedisPool


@pytest.fixture
def fake_pool():
    """Create an in-memory pool double."""
    return FakeRedisPool()


@pytest.fixture
def store(fake_pool):
    """Create a store with a 60 second default expiration."""
    return RedisStore(fake_pool, default_expiration=60)


@pytest.fixture
def service(fake_pool):
    """Create a service with the "app" prefix over the shared pool."""
    return CacheService.with_pool(fake_pool, "app")
