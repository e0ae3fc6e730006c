"""
Tessera store - RecordStore contract.

A keyspace hands out column-family handles. Each handle is a sparse
key -> {column: value} map with per-write TTL:

- get(key, columns) reads a subset of columns of one row
- set(rows, ttl) upserts only the named columns of each row
- create(schema) provisions the family

Stores are responsible ONLY for persistence and expiry. Ticket, token and
session semantics live in ``tessera.sessions``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable


Row = dict[str, Any]


@dataclass(frozen=True)
class FamilySchema:
    """
    Column validation used when a family is created.

    Defaults mirror a UTF-8 keyed, UTF-8 named, UTF-8 valued family.
    """
    key_validation: str = "UTF8Type"
    comparator: str = "UTF8Type"
    default_validation: str = "UTF8Type"

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


DEFAULT_SCHEMA = FamilySchema()


@runtime_checkable
class RecordStore(Protocol):
    """
    Column-family handle.

    All methods are async. Backend failures are raised as
    ``StoreUnavailableFault``; operations on a family that was never
    provisioned raise ``FamilyNotFoundFault``.
    """

    name: str

    async def get(self, key: str, columns: Optional[Sequence[str]] = None) -> Row | None:
        """
        Read one row.

        Args:
            key: Row key
            columns: Column names to read (None reads every live column)

        Returns:
            None if the row has no live column, otherwise the subset of
            requested columns that exist (may be empty).
        """
        ...

    async def set(self, rows: Mapping[str, Mapping[str, Any]], ttl: Optional[int] = None) -> None:
        """
        Upsert columns.

        Args:
            rows: Mapping of row key to the columns to write
            ttl: Seconds until the written columns expire (None = never)
        """
        ...

    async def create(self, schema: FamilySchema = DEFAULT_SCHEMA) -> None:
        """
        Provision the family.

        Raises:
            FamilyAlreadyExistsFault: Family is already provisioned
        """
        ...


@runtime_checkable
class Keyspace(Protocol):
    """Factory of family handles. Handles exist whether or not the family does."""

    def family(self, name: str) -> RecordStore:
        ...
