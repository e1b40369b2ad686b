"""
Event Store Adapter Interface.

Protocol-based interface over the document store that holds videos, raw
engagement events, connections and user profiles.

Key requirements:
- Read-your-writes consistency within a session
- Every operation is a coroutine; callers resume only after it settles
- Compound queries need a declared composite index, otherwise the store
  raises IndexRequiredError carrying a remediation hint
- Compare-and-set primitives plus atomic increment for cached counters
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

FilterOp = Literal["==", "!=", "<", "<=", ">", ">=", "in", "array_contains"]

RANGE_OPS: frozenset[str] = frozenset({"<", "<=", ">", ">=", "!="})


@dataclass(frozen=True)
class DocRef:
    """Reference to a single document."""

    collection: str
    key: str


@dataclass(frozen=True)
class FieldFilter:
    """Single field predicate."""

    field: str
    op: FilterOp
    value: Any

    @property
    def is_range(self) -> bool:
        return self.op in RANGE_OPS


@dataclass(frozen=True)
class OrderBy:
    """Sort order for a query."""

    field: str
    descending: bool = False


@dataclass(frozen=True)
class CompositeIndex:
    """Declared composite index (collection + ordered field list)."""

    collection: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class Document:
    """Stored record plus its key."""

    key: str
    data: dict[str, Any]


class EventStorePort(Protocol):
    """Asynchronous document store interface."""

    async def append(self, collection: str, record: dict[str, Any]) -> str:
        """Append a record under a generated key. Returns the key."""
        ...

    async def get(self, ref: DocRef) -> dict[str, Any] | None:
        """Fetch a record, or None if absent."""
        ...

    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """
        Query a collection.

        Raises:
            IndexRequiredError: the filter/order combination needs a
                composite index that is not declared.
        """
        ...

    async def update(self, ref: DocRef, patch: dict[str, Any]) -> None:
        """
        Merge ``patch`` into an existing record.

        Raises:
            NotFoundError: record does not exist.
        """
        ...

    async def delete(self, ref: DocRef) -> None:
        """Delete a record. Deleting an absent record is a no-op."""
        ...

    async def create_if_absent(self, ref: DocRef, record: dict[str, Any]) -> bool:
        """Create the record only if the key is free. Returns True if created."""
        ...

    async def delete_if_exists(self, ref: DocRef) -> bool:
        """Delete the record only if present. Returns True if deleted."""
        ...

    async def increment(
        self, ref: DocRef, field: str, delta: int, *, floor: int | None = None
    ) -> int:
        """
        Atomically add ``delta`` to a numeric field. Returns the new value.

        With ``floor`` set the stored value never drops below it.

        Raises:
            NotFoundError: record does not exist.
        """
        ...
