"""
In-memory event store adapter (dev/test).

Implements EventStorePort over plain dicts. Every operation yields to the
event loop once before touching state, so interleavings between concurrent
callers behave like a real remote store.

Composite index emulation:
- Equality-style filters ("==", "in", "array_contains") on any number of
  fields need no index.
- A range filter combined with a filter on another field, or an order_by on
  a field that is not filtered, needs a declared CompositeIndex covering
  exactly those fields; otherwise IndexRequiredError is raised.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Iterable, Sequence
from typing import Any
from uuid import uuid4

from src.core.errors import IndexRequiredError, NotFoundError
from src.core.ports.store import (
    CompositeIndex,
    DocRef,
    Document,
    FieldFilter,
    OrderBy,
)

logger = logging.getLogger(__name__)


def _matches(record: dict[str, Any], flt: FieldFilter) -> bool:
    value = record.get(flt.field)
    op = flt.op
    if op == "==":
        return bool(value == flt.value)
    if op == "!=":
        return bool(value != flt.value)
    if op == "in":
        return value in flt.value
    if op == "array_contains":
        return flt.value in (value or ())
    if value is None:
        return False
    if op == "<":
        return bool(value < flt.value)
    if op == "<=":
        return bool(value <= flt.value)
    if op == ">":
        return bool(value > flt.value)
    if op == ">=":
        return bool(value >= flt.value)
    msg = f"Unknown filter operator: {op}"
    raise ValueError(msg)


def required_index_fields(
    filters: Sequence[FieldFilter],
    order_by: OrderBy | None,
) -> tuple[str, ...] | None:
    """
    Return the field list a composite index must cover, or None if the
    query can be served without one.
    """
    filter_fields: list[str] = []
    for flt in filters:
        if flt.field not in filter_fields:
            filter_fields.append(flt.field)

    range_fields = {f.field for f in filters if f.is_range}
    needs_index = False

    if range_fields and len(filter_fields) > 1:
        needs_index = True
    if order_by is not None and filter_fields and order_by.field not in filter_fields:
        needs_index = True

    if not needs_index:
        return None

    fields = list(filter_fields)
    if order_by is not None and order_by.field not in fields:
        fields.append(order_by.field)
    return tuple(fields)


class InMemoryEventStore:
    """In-memory document store for testing/dev."""

    def __init__(self, indexes: Iterable[CompositeIndex] = ()) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._indexes: list[CompositeIndex] = list(indexes)

    # --- Helpers ---

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def _has_index(self, collection: str, fields: tuple[str, ...]) -> bool:
        wanted = set(fields)
        return any(
            idx.collection == collection and set(idx.fields) == wanted
            for idx in self._indexes
        )

    def declare_index(self, index: CompositeIndex) -> None:
        """Declare a composite index."""
        self._indexes.append(index)

    def seed(self, collection: str, key: str, record: dict[str, Any]) -> None:
        """Synchronously insert or replace a record (fixtures, dev data)."""
        self._collection(collection)[key] = copy.deepcopy(record)

    def count(self, collection: str) -> int:
        """Number of records in a collection."""
        return len(self._collections.get(collection, {}))

    def clear(self) -> None:
        """Remove everything."""
        self._collections.clear()

    # --- EventStorePort ---

    async def append(self, collection: str, record: dict[str, Any]) -> str:
        await asyncio.sleep(0)
        key = uuid4().hex
        self._collection(collection)[key] = copy.deepcopy(record)
        return key

    async def get(self, ref: DocRef) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        record = self._collection(ref.collection).get(ref.key)
        return copy.deepcopy(record) if record is not None else None

    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        await asyncio.sleep(0)

        fields = required_index_fields(filters, order_by)
        if fields is not None and not self._has_index(collection, fields):
            logger.debug("Query on %s needs undeclared index %s", collection, fields)
            raise IndexRequiredError(collection, fields)

        results = [
            Document(key=key, data=copy.deepcopy(record))
            for key, record in self._collection(collection).items()
            if all(_matches(record, flt) for flt in filters)
        ]

        if order_by is not None:
            present = [d for d in results if d.data.get(order_by.field) is not None]
            missing = [d for d in results if d.data.get(order_by.field) is None]
            present.sort(key=lambda d: d.data[order_by.field], reverse=order_by.descending)
            results = present + missing

        if limit is not None:
            results = results[:limit]
        return results

    async def update(self, ref: DocRef, patch: dict[str, Any]) -> None:
        await asyncio.sleep(0)
        records = self._collection(ref.collection)
        if ref.key not in records:
            raise NotFoundError(ref.collection, ref.key)
        records[ref.key].update(copy.deepcopy(patch))

    async def delete(self, ref: DocRef) -> None:
        await asyncio.sleep(0)
        self._collection(ref.collection).pop(ref.key, None)

    async def create_if_absent(self, ref: DocRef, record: dict[str, Any]) -> bool:
        await asyncio.sleep(0)
        records = self._collection(ref.collection)
        if ref.key in records:
            return False
        records[ref.key] = copy.deepcopy(record)
        return True

    async def delete_if_exists(self, ref: DocRef) -> bool:
        await asyncio.sleep(0)
        return self._collection(ref.collection).pop(ref.key, None) is not None

    async def increment(
        self, ref: DocRef, field: str, delta: int, *, floor: int | None = None
    ) -> int:
        await asyncio.sleep(0)
        records = self._collection(ref.collection)
        if ref.key not in records:
            raise NotFoundError(ref.collection, ref.key)
        record = records[ref.key]
        value = int(record.get(field) or 0) + delta
        if floor is not None:
            value = max(floor, value)
        record[field] = value
        return int(record[field])
