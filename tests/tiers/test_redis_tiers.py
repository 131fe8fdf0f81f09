# tests/tiers/test_redis_tiers.py
"""
Tests for the Redis string and hash tiers.

The Redis client is replaced by an AsyncMock so the tests assert on the
exact commands sent, without a running server.
"""

import json
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from tiercascade.cascade import Capability
from tiercascade.exceptions import InvalidOperationError, SerializationError
from tiercascade.tiers import RedisHashTier, RedisTier


class Order(BaseModel):
    id: int
    total: float


@pytest.fixture
def client():
    mock = AsyncMock()
    mock.get.return_value = None
    mock.getex.return_value = None
    mock.hget.return_value = None
    mock.hgetall.return_value = {}
    return mock


# =============================================================================
# STRING TIER
# =============================================================================


class TestRedisTier:
    """Tests for RedisTier."""

    def test_declares_distributed_cache(self, client):
        assert RedisTier("Order", client).has_capability(Capability.DISTRIBUTED_CACHE)

    @pytest.mark.asyncio
    async def test_set_without_expiry(self, client):
        tier = RedisTier("Order", client)
        await tier.set("42", {"id": 42})

        client.set.assert_awaited_once_with("42", b'{"id":42}')

    @pytest.mark.asyncio
    async def test_set_with_expiry_uses_exat(self, client, clock):
        tier = RedisTier("Order", client, clock=clock).set_time_to_live(timedelta(minutes=5))
        await tier.set("42", {"id": 42})

        client.set.assert_awaited_once_with(
            "42", b'{"id":42}', exat=clock.now() + timedelta(minutes=5)
        )

    @pytest.mark.asyncio
    async def test_get_decodes_model(self, client):
        client.get.return_value = b'{"id": 1, "total": 9.5}'
        tier = RedisTier("Order", client, item_type=Order)

        assert await tier.get(1) == Order(id=1, total=9.5)
        client.get.assert_awaited_once_with("1")

    @pytest.mark.asyncio
    async def test_get_miss(self, client):
        assert await RedisTier("Order", client).get("x") is None

    @pytest.mark.asyncio
    async def test_sliding_get_uses_getex(self, client, clock):
        client.getex.return_value = b'"v"'
        tier = (
            RedisTier("Order", client, clock=clock)
            .set_time_to_live(timedelta(seconds=30))
            .set_expiration_mode("sliding")
        )

        assert await tier.get("k") == "v"
        client.getex.assert_awaited_once_with("k", exat=clock.now() + timedelta(seconds=30))
        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sliding_capped_by_absolute_expiration(self, client, clock):
        """A sliding read never pushes expiry past the absolute instant."""
        client.getex.return_value = b'"v"'
        absolute = clock.now() + timedelta(minutes=1)
        tier = (
            RedisTier("Order", client, clock=clock)
            .set_time_to_live(timedelta(minutes=10))
            .set_expiration_mode("sliding")
            .set_absolute_expiration(absolute)
        )

        await tier.get("k")

        client.getex.assert_awaited_once_with("k", exat=absolute)

    @pytest.mark.asyncio
    async def test_adapted_key_is_sent(self, client):
        tier = RedisTier("Order", client).adapt_key_to_key(lambda k: f"order:{k}")
        await tier.delete(7)

        client.delete.assert_awaited_once_with("order:7")

    @pytest.mark.asyncio
    async def test_collections_are_json_arrays(self, client):
        tier = RedisTier("Order", client, item_type=Order)
        await tier.set_all([Order(id=1, total=2.0)])

        name, payload = client.set.await_args.args
        assert name == "Order_List"
        assert json.loads(payload) == [{"id": 1, "total": 2.0}]

    @pytest.mark.asyncio
    async def test_get_list_decodes_array(self, client):
        client.get.return_value = b"[1, 2]"
        tier = RedisTier("Order", client, item_type=int)

        assert await tier.get_list("open") == [1, 2]
        client.get.assert_awaited_once_with("Order:open")

    @pytest.mark.asyncio
    async def test_corrupt_payload_raises_serialization_error(self, client):
        client.get.return_value = b"{not json"
        tier = RedisTier("Order", client, item_type=Order)

        with pytest.raises(SerializationError):
            await tier.get(1)

    @pytest.mark.asyncio
    async def test_backend_error_propagates(self, client):
        client.get.side_effect = ConnectionError("refused")

        with pytest.raises(ConnectionError):
            await RedisTier("Order", client).get("k")


# =============================================================================
# HASH TIER
# =============================================================================


class TestRedisHashTier:
    """Tests for RedisHashTier."""

    def test_declares_distributed_hash(self, client):
        assert RedisHashTier("Order", client).has_capability(Capability.DISTRIBUTED_HASH)

    def test_hash_name_defaults_to_entity(self, client):
        assert RedisHashTier("Order", client).hash_name == "Order"

    def test_adapt_hash_key(self, client):
        tier = RedisHashTier("Order", client)
        assert tier.adapt_hash_key("orders:v2").hash_name == "orders:v2"
        assert tier.adapt_hash_key(lambda: "orders:v3").hash_name == "orders:v3"

    @pytest.mark.asyncio
    async def test_single_item_is_a_field(self, client):
        tier = RedisHashTier("Order", client)
        await tier.set(5, "five")

        client.hset.assert_awaited_once_with("Order", "5", b'"five"')

    @pytest.mark.asyncio
    async def test_get_reads_field(self, client):
        client.hget.return_value = b'"five"'
        tier = RedisHashTier("Order", client)

        assert await tier.get(5) == "five"
        client.hget.assert_awaited_once_with("Order", "5")

    @pytest.mark.asyncio
    async def test_delete_removes_field(self, client):
        await RedisHashTier("Order", client).delete(5)
        client.hdel.assert_awaited_once_with("Order", "5")

    @pytest.mark.asyncio
    async def test_set_all_writes_one_field_per_item(self, client):
        tier = RedisHashTier("Order", client, item_type=Order).adapt_item_to_key(lambda o: o.id)
        await tier.set_all([Order(id=1, total=1.0), Order(id=2, total=2.0)])

        client.hset.assert_awaited_once()
        assert client.hset.await_args.args == ("Order_List",)
        mapping = client.hset.await_args.kwargs["mapping"]
        assert set(mapping) == {"1", "2"}
        assert json.loads(mapping["2"]) == {"id": 2, "total": 2.0}

    @pytest.mark.asyncio
    async def test_set_list_without_item_adapter_raises(self, client):
        tier = RedisHashTier("Order", client)

        with pytest.raises(InvalidOperationError):
            await tier.set_list("open", [{"id": 1}])

    @pytest.mark.asyncio
    async def test_empty_collection_not_written(self, client):
        tier = RedisHashTier("Order", client).adapt_item_to_key(lambda o: o["id"])
        await tier.set_all([])

        client.hset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_list_decodes_field_values(self, client):
        client.hgetall.return_value = {b"1": b'{"id": 1, "total": 3.0}'}
        tier = RedisHashTier("Order", client, item_type=Order)

        assert await tier.get_list("open") == [Order(id=1, total=3.0)]
        client.hgetall.assert_awaited_once_with("Order:open")

    @pytest.mark.asyncio
    async def test_no_expiration_applied(self, client, clock):
        tier = RedisHashTier("Order", client, clock=clock).set_time_to_live(timedelta(seconds=5))
        await tier.set(1, "x")

        client.expire.assert_not_awaited()
        client.hset.assert_awaited_once_with("Order", "1", b'"x"')
