"""
Tests for the Redis keyspace (tessera/store/redis.py) against an
in-process fake of the redis.asyncio client surface it uses.
"""

import json

import pytest

from tessera.store.core import FamilySchema
from tessera.store.faults import (
    FamilyAlreadyExistsFault,
    FamilyNotFoundFault,
    StoreUnavailableFault,
)
from tessera.store.redis import RedisKeyspace


class FakeRedis:
    """Hash commands only; values stored as bytes like a real client."""

    def __init__(self):
        self.hashes = {}
        self.expiries = {}
        self.closed = False
        self.broken = False

    def _check(self):
        if self.broken:
            raise ConnectionError("Connection refused")

    async def ping(self):
        self._check()
        return True

    async def exists(self, key):
        self._check()
        return 1 if key in self.hashes else 0

    async def hset(self, key, mapping):
        self._check()
        row = self.hashes.setdefault(key, {})
        for field, value in mapping.items():
            row[field.encode()] = value.encode() if isinstance(value, str) else value
        return len(mapping)

    async def hsetnx(self, key, field, value):
        self._check()
        row = self.hashes.setdefault(key, {})
        if field.encode() in row:
            return 0
        row[field.encode()] = value.encode()
        return 1

    async def hgetall(self, key):
        self._check()
        return dict(self.hashes.get(key, {}))

    async def hmget(self, key, fields):
        self._check()
        row = self.hashes.get(key, {})
        return [row.get(field.encode()) for field in fields]

    async def expire(self, key, seconds):
        self._check()
        self.expiries[key] = seconds
        return True

    async def close(self):
        self.closed = True


@pytest.fixture
def redis():
    return FakeRedis()


@pytest.fixture
def redis_keyspace(redis):
    return RedisKeyspace(client=redis, key_prefix="t:")


class TestRedisFamily:

    @pytest.mark.asyncio
    async def test_missing_family(self, redis_keyspace):
        with pytest.raises(FamilyNotFoundFault):
            await redis_keyspace.family("tickets").get("_", ["_"])
        with pytest.raises(FamilyNotFoundFault):
            await redis_keyspace.family("tickets").set({"k": {"id": "1"}})

    @pytest.mark.asyncio
    async def test_create_writes_schema(self, redis_keyspace, redis):
        await redis_keyspace.family("tickets").create(FamilySchema())
        schema = redis.hashes["t:tickets:_schema"]
        assert schema[b"comparator"] == b"UTF8Type"

    @pytest.mark.asyncio
    async def test_create_existing(self, redis_keyspace):
        family = redis_keyspace.family("tickets")
        await family.create()
        with pytest.raises(FamilyAlreadyExistsFault):
            await family.create()

    @pytest.mark.asyncio
    async def test_create_race_has_single_winner(self, redis_keyspace, redis):
        family = redis_keyspace.family("tickets")
        await family.create()

        # A rival provisioner whose existence check ran before the first write
        async def stale_exists(key):
            return 0

        redis.exists = stale_exists
        with pytest.raises(FamilyAlreadyExistsFault):
            await redis_keyspace.family("tickets").create()
        assert redis.hashes["t:tickets:_schema"][b"key_validation"] == b"UTF8Type"

    @pytest.mark.asyncio
    async def test_set_get_roundtrip_preserves_types(self, redis_keyspace, redis):
        family = redis_keyspace.family("store")
        await family.create()
        await family.set({"100": {"name": "test", "value": 100}})

        assert json.loads(redis.hashes["t:store:100"][b"value"]) == 100
        assert await family.get("100", ["name", "value"]) == {"name": "test", "value": 100}
        assert await family.get("100") == {"name": "test", "value": 100}

    @pytest.mark.asyncio
    async def test_get_absent_row(self, redis_keyspace):
        family = redis_keyspace.family("store")
        await family.create()
        assert await family.get("nobody", ["name"]) is None
        assert await family.get("nobody") is None

    @pytest.mark.asyncio
    async def test_get_subset(self, redis_keyspace):
        family = redis_keyspace.family("store")
        await family.create()
        await family.set({"100": {"name": "test"}})
        assert await family.get("100", ["name", "missing"]) == {"name": "test"}
        assert await family.get("100", ["missing"]) == {}

    @pytest.mark.asyncio
    async def test_ttl_sets_expire(self, redis_keyspace, redis):
        family = redis_keyspace.family("tickets")
        await family.create()
        await family.set({"abc": {"id": "1"}}, ttl=300)
        await family.set({"def": {"id": "2"}})
        assert redis.expiries == {"t:tickets:abc": 300}

    @pytest.mark.asyncio
    async def test_zero_ttl_still_sets_expire(self, redis_keyspace, redis):
        family = redis_keyspace.family("tickets")
        await family.create()
        await family.set({"abc": {"id": "1"}}, ttl=0)
        assert redis.expiries == {"t:tickets:abc": 0}

    @pytest.mark.asyncio
    async def test_backend_errors_are_wrapped(self, redis_keyspace, redis):
        family = redis_keyspace.family("tickets")
        await family.create()
        redis.broken = True

        with pytest.raises(StoreUnavailableFault) as exc_info:
            await family.get("abc", ["id"])
        assert exc_info.value.retryable is True
        assert "Connection refused" in exc_info.value.message

        with pytest.raises(StoreUnavailableFault):
            await family.set({"abc": {"id": "1"}})

    @pytest.mark.asyncio
    async def test_close_leaves_borrowed_client_open(self, redis_keyspace, redis):
        await redis_keyspace.close()
        assert redis.closed is False
