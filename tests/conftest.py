"""
Shared test fixtures and helpers for the tessera test suite.
"""

from typing import Any, Dict, List, Optional

import pytest

from tessera.store.faults import FamilyNotFoundFault, StoreUnavailableFault
from tessera.store.memory import MemoryKeyspace


# ============================================================================
# Clock
# ============================================================================


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Record store doubles
# ============================================================================


class RecordingFamily:
    """
    Wraps a real family handle, records calls and injects faults.

    ``fail_get``/``fail_set``/``fail_create`` hold exceptions raised on the
    next matching call; ``forced_rows`` makes the next ``get`` calls return
    the given rows regardless of the store contents.
    """

    def __init__(self, inner):
        self.inner = inner
        self.name = inner.name
        self.calls: List[tuple] = []
        self.fail_get: Optional[BaseException] = None
        self.fail_set: Optional[BaseException] = None
        self.fail_create: Optional[BaseException] = None
        self.forced_rows: List[Optional[Dict[str, Any]]] = []

    async def get(self, key, columns=None):
        self.calls.append(("get", key, columns))
        if self.fail_get is not None:
            error, self.fail_get = self.fail_get, None
            raise error
        if self.forced_rows:
            return self.forced_rows.pop(0)
        return await self.inner.get(key, columns)

    async def set(self, rows, ttl=None):
        self.calls.append(("set", dict(rows), ttl))
        if self.fail_set is not None:
            error, self.fail_set = self.fail_set, None
            raise error
        await self.inner.set(rows, ttl=ttl)

    async def create(self, schema=None):
        self.calls.append(("create", schema))
        if self.fail_create is not None:
            raise self.fail_create
        if schema is None:
            await self.inner.create()
        else:
            await self.inner.create(schema)

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)


class RecordingKeyspace:
    """Keyspace handing out one RecordingFamily per family name."""

    def __init__(self, inner: Optional[MemoryKeyspace] = None):
        self.inner = inner or MemoryKeyspace()
        self.families: Dict[str, RecordingFamily] = {}

    def family(self, name: str) -> RecordingFamily:
        if name not in self.families:
            self.families[name] = RecordingFamily(self.inner.family(name))
        return self.families[name]


class UnreachableFamily:
    """Family whose every call fails as if the backend were down."""

    def __init__(self, name: str):
        self.name = name

    async def get(self, key, columns=None):
        raise StoreUnavailableFault("test", cause="connection refused")

    async def set(self, rows, ttl=None):
        raise StoreUnavailableFault("test", cause="connection refused")

    async def create(self, schema=None):
        raise StoreUnavailableFault("test", cause="connection refused")


class NeverCreatedFamily:
    """Family that reports missing and refuses creation."""

    def __init__(self, name: str):
        self.name = name

    async def get(self, key, columns=None):
        raise FamilyNotFoundFault(self.name)

    async def set(self, rows, ttl=None):
        raise FamilyNotFoundFault(self.name)

    async def create(self, schema=None):
        raise StoreUnavailableFault("test", cause="permission denied")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def keyspace(clock):
    """Fresh in-memory keyspace driven by the fake clock."""
    return MemoryKeyspace(clock=clock)


@pytest.fixture
def recording_keyspace(keyspace):
    return RecordingKeyspace(keyspace)
