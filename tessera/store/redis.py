"""
Tessera store - Redis keyspace.

Maps column families onto Redis hashes:
- ``<prefix><family>:_schema``  hash holding the FamilySchema (existence marker)
- ``<prefix><family>:<key>``    hash of column -> JSON-encoded value

TTL granularity is the row: a write with ``ttl`` sets EXPIRE on the row
key, a write without ``ttl`` leaves any existing expiry in place.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from tessera.faults.core import Fault

from .core import DEFAULT_SCHEMA, FamilySchema, Row
from .faults import FamilyAlreadyExistsFault, FamilyNotFoundFault, StoreUnavailableFault

logger = logging.getLogger("tessera.store.redis")


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisKeyspace:
    """
    Redis-backed keyspace using redis-py's asyncio client.

    Either pass a ready client (tests, shared pools) or a URL; with a URL the
    connection is opened lazily on first use.

    Args:
        url: Redis URL used when no client is given
        client: Existing ``redis.asyncio.Redis``-compatible client
        key_prefix: Prefix for every key written
        max_connections: Pool size for URL connections
        socket_timeout: Socket timeout for URL connections
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        client: Any = None,
        key_prefix: str = "tessera:",
        max_connections: int = 10,
        socket_timeout: float = 5.0,
    ):
        self._url = url
        self._redis = client
        self._owns_client = client is None
        self._key_prefix = key_prefix
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def family(self, name: str) -> "RedisFamily":
        return RedisFamily(self, name)

    async def connection(self) -> Any:
        """Return the client, connecting on first call."""
        if self._redis is not None:
            return self._redis

        try:
            import redis.asyncio as aioredis
        except ImportError:
            raise ImportError(
                "Redis keyspace requires 'redis' package. "
                "Install with: pip install tessera[redis]"
            )

        try:
            client = aioredis.from_url(
                self._url,
                max_connections=self._max_connections,
                socket_timeout=self._socket_timeout,
            )
            await client.ping()
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StoreUnavailableFault("redis", cause=str(e)) from e

        self._redis = client
        logger.info(f"Redis keyspace connected: {self._url}")
        return client

    async def close(self) -> None:
        """Close the connection if this keyspace opened it."""
        if self._redis is not None and self._owns_client:
            await self._redis.close()
            self._redis = None


class RedisFamily:
    """Handle on one family of a :class:`RedisKeyspace`."""

    __slots__ = ("_keyspace", "name")

    def __init__(self, keyspace: RedisKeyspace, name: str):
        self._keyspace = keyspace
        self.name = name

    def __repr__(self) -> str:
        return f"RedisFamily({self.name!r})"

    def _schema_key(self) -> str:
        return f"{self._keyspace.key_prefix}{self.name}:_schema"

    def _row_key(self, key: str) -> str:
        return f"{self._keyspace.key_prefix}{self.name}:{key}"

    async def _require(self, redis: Any) -> None:
        if not await redis.exists(self._schema_key()):
            raise FamilyNotFoundFault(self.name)

    async def get(self, key: str, columns: Optional[Sequence[str]] = None) -> Row | None:
        try:
            redis = await self._keyspace.connection()
            await self._require(redis)
            row_key = self._row_key(key)

            if columns is None:
                raw = await redis.hgetall(row_key)
                if not raw:
                    return None
                return {_text(k): json.loads(v) for k, v in raw.items()}

            if not await redis.exists(row_key):
                return None
            columns = list(columns)
            if not columns:
                return {}
            values = await redis.hmget(row_key, columns)
            return {
                column: json.loads(value)
                for column, value in zip(columns, values)
                if value is not None
            }
        except Fault:
            raise
        except Exception as e:
            raise StoreUnavailableFault("redis", cause=str(e)) from e

    async def set(self, rows: Mapping[str, Mapping[str, Any]], ttl: Optional[int] = None) -> None:
        try:
            redis = await self._keyspace.connection()
            await self._require(redis)
            for key, columns in rows.items():
                if not columns:
                    continue
                row_key = self._row_key(key)
                await redis.hset(
                    row_key,
                    mapping={column: json.dumps(value) for column, value in columns.items()},
                )
                if ttl is not None:
                    await redis.expire(row_key, int(ttl))
        except Fault:
            raise
        except Exception as e:
            raise StoreUnavailableFault("redis", cause=str(e)) from e

    async def create(self, schema: FamilySchema = DEFAULT_SCHEMA) -> None:
        try:
            redis = await self._keyspace.connection()
            fields = schema.to_dict()
            # HSETNX on the first schema field decides which provisioner wins
            marker = next(iter(fields))
            if not await redis.hsetnx(self._schema_key(), marker, fields[marker]):
                raise FamilyAlreadyExistsFault(self.name)
            await redis.hset(self._schema_key(), mapping=fields)
        except Fault:
            raise
        except Exception as e:
            raise StoreUnavailableFault("redis", cause=str(e)) from e
        logger.info(f"Created column family '{self.name}' under '{self._keyspace.key_prefix}'")
