"""
Unit Tests for StoreGateway

Tests replica reads with primary fallback while the replica loads, and
that writes only ever reach the primary.
"""

from unittest.mock import AsyncMock

import pytest

from redis.exceptions import BusyLoadingError, ResponseError
from redis_dataloader.infrastructure.cache.observer import CacheObserver
from redis_dataloader.infrastructure.cache.store_gateway import StoreGateway, is_replica_loading_error
from tests.test_fixtures.store_factory import StoreTestFactory


@pytest.mark.unit
class TestReplicaLoadingDetection:
    """Test recognition of the replica-loading condition."""

    def test_raw_loading_reply(self):
        assert is_replica_loading_error(ResponseError("LOADING Redis is loading the dataset in memory"))

    def test_busy_loading_error(self):
        assert is_replica_loading_error(BusyLoadingError("Redis is loading the dataset in memory"))

    def test_other_errors(self):
        assert not is_replica_loading_error(ConnectionError("connection refused"))
        assert not is_replica_loading_error(ResponseError("WRONGTYPE"))


@pytest.mark.unit
class TestMultiGet:
    """Test the read path."""

    @pytest.mark.asyncio
    async def test_reads_from_replica(self):
        primary = StoreTestFactory.store_with_data({"user:1": "primary"})
        replica = StoreTestFactory.store_with_data({"user:1": '{"n":1}'})
        gateway = StoreGateway(primary, replica, "user")

        replies = await gateway.multi_get(["1", "2"])

        assert replies == [b'{"n":1}', None]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("redis_py_style", [False, True])
    async def test_falls_back_to_primary_while_replica_loads(self, redis_py_style):
        primary = StoreTestFactory.store_with_data({"user:1": '{"n":1}'})
        replica = StoreTestFactory.loading_replica(redis_py_style)
        observer = CacheObserver()
        gateway = StoreGateway(primary, replica, "user", observer=observer)

        replies = await gateway.multi_get(["1"])

        assert replies == [b'{"n":1}']
        replica.mget.assert_awaited_once_with(["user:1"])
        assert observer.get_stats()["replica_fallbacks"] == 1

    @pytest.mark.asyncio
    async def test_other_replica_errors_propagate(self):
        primary = AsyncMock()
        replica = StoreTestFactory.failing_replica(ConnectionError("replica unreachable"))
        gateway = StoreGateway(primary, replica, "user")

        with pytest.raises(ConnectionError):
            await gateway.multi_get(["1"])

        primary.mget.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_keys_skips_store(self):
        replica = AsyncMock()
        gateway = StoreGateway(AsyncMock(), replica, "user")

        assert await gateway.multi_get([]) == []
        replica.mget.assert_not_called()


@pytest.mark.unit
class TestWrites:
    """Test the write path."""

    @pytest.mark.asyncio
    async def test_set_and_get_is_transactional(self, primary_store):
        gateway = StoreGateway(primary_store, primary_store, "user", expire=60)

        stored = await gateway.set_and_get("1", {"name": "Ann"})

        assert stored == {"name": "Ann"}
        assert primary_store.pipelines_executed == [
            [("set", ("user:1", '{"name":"Ann"}')), ("get", ("user:1",))]
        ]
        assert "user:1" in primary_store.expiry

    @pytest.mark.asyncio
    async def test_set_and_get_none_stores_empty_marker(self, primary_store):
        gateway = StoreGateway(primary_store, primary_store, "user")

        assert await gateway.set_and_get("1", None) is None
        assert primary_store.data["user:1"] == b""
        assert "user:1" not in primary_store.expiry

    @pytest.mark.asyncio
    async def test_writes_never_touch_replica(self, primary_store):
        replica = AsyncMock()
        gateway = StoreGateway(primary_store, replica, "user")

        await gateway.set_and_get("1", {"a": 1})
        await gateway.pipelined_set([("2", {"b": 2})])
        await gateway.delete("1")

        assert replica.method_calls == []
        assert primary_store.data == {"user:2": b'{"b":2}'}

    @pytest.mark.asyncio
    async def test_pipelined_set_is_one_round_trip(self, primary_store):
        gateway = StoreGateway(primary_store, primary_store, "user", expire=30)

        await gateway.pipelined_set([("1", {"a": 1}), ("2", None)])

        assert len(primary_store.pipelines_executed) == 1
        assert primary_store.data == {"user:1": b'{"a":1}', "user:2": b""}
        assert set(primary_store.expiry) == {"user:1", "user:2"}

    @pytest.mark.asyncio
    async def test_pipelined_set_failure_propagates(self):
        primary = StoreTestFactory.failing_pipeline_store(ConnectionError("reset"))
        gateway = StoreGateway(primary, primary, "user")

        with pytest.raises(ConnectionError):
            await gateway.pipelined_set([("1", {"a": 1})])

    @pytest.mark.asyncio
    async def test_delete_returns_count(self, primary_store):
        primary_store.data["user:1"] = b"{}"
        gateway = StoreGateway(primary_store, primary_store, "user")

        assert await gateway.delete("1") == 1
        assert await gateway.delete("1") == 0
