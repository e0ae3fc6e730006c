"""
Tessera store - In-memory keyspace.

Column-family semantics kept faithfully so the session layer behaves the
same as against a real store:
- Families must be created before use
- Writes are sparse (only named columns change)
- TTL is tracked per column; a row disappears once its last column expires

NOT suitable for production (no persistence across restarts, single process).

Example:
    >>> keyspace = MemoryKeyspace()
    >>> tickets = keyspace.family("session_ticket")
    >>> await tickets.create()
    >>> await tickets.set({"abc": {"id": "100"}}, ttl=60)
    >>> await tickets.get("abc", ["id"])
    {'id': '100'}
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Mapping, Optional, Sequence

from .core import DEFAULT_SCHEMA, FamilySchema, Row
from .faults import FamilyAlreadyExistsFault, FamilyNotFoundFault

logger = logging.getLogger("tessera.store.memory")


class _Column:
    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, expires_at: Optional[float]):
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class _FamilyData:
    __slots__ = ("schema", "rows")

    def __init__(self, schema: FamilySchema):
        self.schema = schema
        self.rows: dict[str, dict[str, _Column]] = {}


class MemoryKeyspace:
    """
    In-process keyspace holding any number of column families.

    Args:
        clock: Monotonic clock used for TTL bookkeeping (injectable for tests)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._families: dict[str, _FamilyData] = {}
        self._lock = asyncio.Lock()

    def family(self, name: str) -> "MemoryFamily":
        """Return a handle for ``name`` (the family may not exist yet)."""
        return MemoryFamily(self, name)

    def create_family(self, name: str, schema: FamilySchema = DEFAULT_SCHEMA) -> None:
        """Provision a family synchronously (test and bootstrap helper)."""
        if name in self._families:
            raise FamilyAlreadyExistsFault(name)
        self._families[name] = _FamilyData(schema)

    def has_family(self, name: str) -> bool:
        return name in self._families

    def schema(self, name: str) -> FamilySchema:
        return self._require(name).schema

    def stats(self) -> dict[str, Any]:
        """Row counts per family (expired rows included until touched)."""
        return {
            name: {"rows": len(data.rows), "schema": data.schema.to_dict()}
            for name, data in self._families.items()
        }

    def _require(self, name: str) -> _FamilyData:
        data = self._families.get(name)
        if data is None:
            raise FamilyNotFoundFault(name)
        return data


class MemoryFamily:
    """Handle on one family of a :class:`MemoryKeyspace`."""

    __slots__ = ("_keyspace", "name")

    def __init__(self, keyspace: MemoryKeyspace, name: str):
        self._keyspace = keyspace
        self.name = name

    def __repr__(self) -> str:
        return f"MemoryFamily({self.name!r})"

    async def get(self, key: str, columns: Optional[Sequence[str]] = None) -> Row | None:
        keyspace = self._keyspace
        async with keyspace._lock:
            data = keyspace._require(self.name)
            row = data.rows.get(key)
            if row is None:
                return None

            now = keyspace._clock()
            for column in [c for c, cell in row.items() if cell.is_expired(now)]:
                del row[column]
            if not row:
                del data.rows[key]
                return None

            names = row.keys() if columns is None else columns
            return {name: row[name].value for name in names if name in row}

    async def set(self, rows: Mapping[str, Mapping[str, Any]], ttl: Optional[int] = None) -> None:
        keyspace = self._keyspace
        async with keyspace._lock:
            data = keyspace._require(self.name)
            expires_at = keyspace._clock() + ttl if ttl is not None else None
            for key, columns in rows.items():
                row = data.rows.setdefault(key, {})
                for column, value in columns.items():
                    row[column] = _Column(value, expires_at)

    async def create(self, schema: FamilySchema = DEFAULT_SCHEMA) -> None:
        async with self._keyspace._lock:
            self._keyspace.create_family(self.name, schema)
        logger.info(f"Created column family '{self.name}'")
