"""Unit tests for the Redis commands issued by the cache store."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from kvcache.cache.store import FOREVER, RedisStore
from kvcache.exceptions import CacheMissError, ErrorCode, ParseError, StoreError


class MockPool:
    """Pool double yielding a single mocked connection."""

    def __init__(self, conn):
        self.conn = conn
        self.disconnect = AsyncMock()

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


class TestStoreCommands:
    """Test command translation against a mocked Redis client."""

    @pytest.fixture
    def mock_redis(self):
        """Create mock Redis client."""
        mock = AsyncMock(spec=redis.Redis)
        mock.get = AsyncMock(return_value=None)
        mock.set = AsyncMock(return_value=True)
        mock.setex = AsyncMock(return_value=True)
        mock.exists = AsyncMock(return_value=0)
        mock.expire = AsyncMock(return_value=True)
        mock.delete = AsyncMock(return_value=1)
        mock.decrby = AsyncMock()
        mock.flushdb = AsyncMock(return_value=True)
        return mock

    @pytest.fixture
    def store(self, mock_redis):
        """Create store with mock Redis and a 5 minute default expiration."""
        return RedisStore(MockPool(mock_redis), default_expiration=300)

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, store, mock_redis):
        """Test explicit TTL issues SETEX with serialized payload."""
        await store.set("key", "value", 30)

        mock_redis.setex.assert_awaited_once_with("key", 30, b'"value"')
        mock_redis.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_default_ttl(self, store, mock_redis):
        """Test DEFAULT uses the configured default expiration."""
        await store.set("key", {"a": 1})

        mock_redis.setex.assert_awaited_once_with("key", 300, b'{"a":1}')

    @pytest.mark.asyncio
    async def test_set_forever(self, store, mock_redis):
        """Test FOREVER issues plain SET."""
        await store.set("key", 42, FOREVER)

        mock_redis.set.assert_awaited_once_with("key", b"42")
        mock_redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_non_positive_ttl(self, store, mock_redis):
        """Test zero or negative explicit TTL means no expiration."""
        await store.set("key", 1, 0)
        await store.set("key", 1, -5)

        assert mock_redis.set.await_count == 2
        mock_redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_transport_error(self, store, mock_redis):
        """Test redis errors are wrapped in StoreError with the cause chained."""
        original = redis.ConnectionError("Connection refused")
        mock_redis.get.side_effect = original

        with pytest.raises(StoreError) as exc_info:
            await store.get("key")

        assert exc_info.value.__cause__ is original
        assert exc_info.value.code == ErrorCode.STORE_ERROR
        assert exc_info.value.data == {"key": "key", "operation": "get"}

    @pytest.mark.asyncio
    async def test_exists_swallows_errors(self, store, mock_redis):
        """Test exists reports False for any failure."""
        mock_redis.exists.side_effect = RuntimeError("boom")

        assert await store.exists("key") is False

    @pytest.mark.asyncio
    async def test_set_expire_swallows_errors(self, store, mock_redis):
        """Test set_expire reports False for any failure."""
        mock_redis.expire.side_effect = redis.TimeoutError("Timeout")

        assert await store.set_expire("key", 10) is False

    @pytest.mark.asyncio
    async def test_delete_checks_existence_first(self, store, mock_redis):
        """Test delete issues EXISTS before DEL."""
        mock_redis.exists.return_value = 1

        await store.delete("key")

        mock_redis.exists.assert_awaited_once_with("key")
        mock_redis.delete.assert_awaited_once_with("key")

    @pytest.mark.asyncio
    async def test_delete_missing_does_not_delete(self, store, mock_redis):
        """Test delete on an absent key never issues DEL."""
        with pytest.raises(CacheMissError):
            await store.delete("key")

        mock_redis.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_increment_reads_without_exists(self, store, mock_redis):
        """Test increment uses GET for the existence check."""
        mock_redis.get.return_value = b"41"

        assert await store.increment("key", 1) == 42

        mock_redis.exists.assert_not_awaited()
        mock_redis.set.assert_awaited_once_with("key", 42)

    @pytest.mark.asyncio
    async def test_increment_negative_result_is_unsigned(self, store, mock_redis):
        """Test a negative sum is reported as its unsigned 64-bit form."""
        mock_redis.get.return_value = b"-10"

        assert await store.increment("key", 3) == 2**64 - 7

        mock_redis.set.assert_awaited_once_with("key", -7)

    @pytest.mark.asyncio
    async def test_increment_out_of_int64_range(self, store, mock_redis):
        """Test values beyond signed 64-bit are not integers for increment."""
        mock_redis.get.return_value = b"9223372036854775808"

        with pytest.raises(ParseError):
            await store.increment("key", 1)

        mock_redis.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_decrement_by_delta(self, store, mock_redis):
        """Test decrement within range issues DECRBY delta."""
        mock_redis.exists.return_value = 1
        mock_redis.get.return_value = b"10"
        mock_redis.decrby.return_value = 6

        assert await store.decrement("key", 4) == 6

        mock_redis.decrby.assert_awaited_once_with("key", 4)

    @pytest.mark.asyncio
    async def test_decrement_clamps_to_current(self, store, mock_redis):
        """Test decrement larger than the value issues DECRBY current."""
        mock_redis.exists.return_value = 1
        mock_redis.get.return_value = b"10"
        mock_redis.decrby.return_value = 0

        assert await store.decrement("key", 11) == 0

        mock_redis.decrby.assert_awaited_once_with("key", 10)

    @pytest.mark.asyncio
    async def test_decrement_negative_current_goes_to_zero(self, store, mock_redis):
        """Test a negative stored value is raised back to zero."""
        mock_redis.exists.return_value = 1
        mock_redis.get.return_value = b"-5"
        mock_redis.decrby.return_value = 0

        assert await store.decrement("key", 3) == 0

        mock_redis.decrby.assert_awaited_once_with("key", -5)

    @pytest.mark.asyncio
    async def test_flush(self, store, mock_redis):
        """Test flush issues FLUSHDB."""
        await store.flush()

        mock_redis.flushdb.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_flush_error(self, store, mock_redis):
        """Test flush surfaces backend errors."""
        mock_redis.flushdb.side_effect = redis.ResponseError("NOPERM")

        with pytest.raises(StoreError) as exc_info:
            await store.flush()

        assert exc_info.value.data == {"operation": "flush"}
