"""
Tessera store - column-family record storage.

Backends:
- MemoryKeyspace: In-process storage (dev/testing)
- RedisKeyspace: Redis hashes (production)
"""

from .core import (
    DEFAULT_SCHEMA,
    FamilySchema,
    Keyspace,
    RecordStore,
    Row,
)
from .faults import (
    FamilyAlreadyExistsFault,
    FamilyNotFoundFault,
    StoreFault,
    StoreUnavailableFault,
)
from .memory import MemoryFamily, MemoryKeyspace
from .redis import RedisFamily, RedisKeyspace

__all__ = [
    "DEFAULT_SCHEMA",
    "FamilySchema",
    "Keyspace",
    "RecordStore",
    "Row",
    "FamilyAlreadyExistsFault",
    "FamilyNotFoundFault",
    "StoreFault",
    "StoreUnavailableFault",
    "MemoryFamily",
    "MemoryKeyspace",
    "RedisFamily",
    "RedisKeyspace",
]
