"""
Tests for the in-memory event store.

Covers the EventStorePort contract plus composite index emulation and the
compare-and-set primitives used by the like counter.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from src.adapters.memory_store import InMemoryEventStore, required_index_fields
from src.core.errors import IndexRequiredError, NotFoundError
from src.core.ports.store import CompositeIndex, DocRef, FieldFilter, OrderBy

pytestmark = pytest.mark.anyio


def _ts(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 1, day, hour, 0, tzinfo=UTC)


class TestRequiredIndexFields:
    """Which filter/order combinations need a composite index."""

    def test_single_equality_needs_nothing(self) -> None:
        assert required_index_fields([FieldFilter("videoId", "==", "v1")], None) is None

    def test_multi_equality_needs_nothing(self) -> None:
        filters = [
            FieldFilter("participants", "array_contains", "u1"),
            FieldFilter("status", "==", "accepted"),
        ]
        assert required_index_fields(filters, None) is None

    def test_range_plus_other_field(self) -> None:
        filters = [
            FieldFilter("videoId", "==", "v1"),
            FieldFilter("viewedAt", ">=", _ts(1)),
        ]
        assert required_index_fields(filters, None) == ("videoId", "viewedAt")

    def test_order_on_unfiltered_field(self) -> None:
        fields = required_index_fields(
            [FieldFilter("videoId", "==", "v1")], OrderBy("viewedAt", descending=True)
        )
        assert fields == ("videoId", "viewedAt")

    def test_order_on_filtered_field(self) -> None:
        fields = required_index_fields(
            [FieldFilter("viewedAt", ">=", _ts(1))], OrderBy("viewedAt")
        )
        assert fields is None

    def test_order_without_filters(self) -> None:
        assert required_index_fields([], OrderBy("viewedAt")) is None


class TestQuery:
    """Query filtering, ordering and index enforcement."""

    @pytest.fixture
    def seeded(self, store: InMemoryEventStore) -> InMemoryEventStore:
        store.seed("videoViews", "a", {"videoId": "v1", "viewerId": "u1", "viewedAt": _ts(3)})
        store.seed("videoViews", "b", {"videoId": "v1", "viewerId": "u2", "viewedAt": _ts(5)})
        store.seed("videoViews", "c", {"videoId": "v2", "viewerId": "u1", "viewedAt": _ts(4)})
        store.seed("videoViews", "d", {"videoId": "v1", "viewerId": "u3", "viewedAt": None})
        return store

    async def test_equality_filter(self, seeded: InMemoryEventStore) -> None:
        docs = await seeded.query("videoViews", [FieldFilter("videoId", "==", "v1")])
        assert sorted(d.key for d in docs) == ["a", "b", "d"]

    async def test_in_filter(self, seeded: InMemoryEventStore) -> None:
        docs = await seeded.query("videoViews", [FieldFilter("viewerId", "in", ["u2", "u3"])])
        assert sorted(d.key for d in docs) == ["b", "d"]

    async def test_ordered_query_without_index_raises(self, seeded: InMemoryEventStore) -> None:
        with pytest.raises(IndexRequiredError) as exc_info:
            await seeded.query(
                "videoViews",
                [FieldFilter("videoId", "==", "v1")],
                order_by=OrderBy("viewedAt", descending=True),
            )

        err = exc_info.value
        assert err.collection == "videoViews"
        assert err.fields == ("videoId", "viewedAt")
        assert "videoId, viewedAt" in err.hint

    async def test_declared_index_allows_ordered_query(
        self, seeded: InMemoryEventStore
    ) -> None:
        seeded.declare_index(CompositeIndex("videoViews", ("videoId", "viewedAt")))

        docs = await seeded.query(
            "videoViews",
            [FieldFilter("videoId", "==", "v1")],
            order_by=OrderBy("viewedAt", descending=True),
        )

        # Missing values sort last
        assert [d.key for d in docs] == ["b", "a", "d"]

    async def test_index_declared_in_constructor(self) -> None:
        store = InMemoryEventStore(indexes=[CompositeIndex("videoLikes", ("createdAt", "videoId"))])
        docs = await store.query(
            "videoLikes", [FieldFilter("videoId", "==", "v1")], order_by=OrderBy("createdAt")
        )
        assert docs == []

    async def test_range_query(self, seeded: InMemoryEventStore) -> None:
        docs = await seeded.query(
            "videoViews", [FieldFilter("viewedAt", ">", _ts(3))], order_by=OrderBy("viewedAt")
        )
        assert [d.key for d in docs] == ["c", "b"]

    async def test_limit(self, seeded: InMemoryEventStore) -> None:
        docs = await seeded.query("videoViews", order_by=OrderBy("viewedAt"), limit=2)
        assert [d.key for d in docs] == ["a", "c"]

    async def test_results_are_copies(self, seeded: InMemoryEventStore) -> None:
        docs = await seeded.query("videoViews", [FieldFilter("viewerId", "==", "u2")])
        docs[0].data["viewerId"] = "tampered"

        record = await seeded.get(DocRef("videoViews", "b"))
        assert record is not None
        assert record["viewerId"] == "u2"


class TestWrites:
    """append/update/delete and the compare-and-set primitives."""

    async def test_append_generates_unique_keys(self, store: InMemoryEventStore) -> None:
        first = await store.append("videoViews", {"videoId": "v1"})
        second = await store.append("videoViews", {"videoId": "v1"})

        assert first != second
        assert store.count("videoViews") == 2

    async def test_update_merges(self, store: InMemoryEventStore) -> None:
        store.seed("pitchVideos", "v1", {"title": "Pitch", "likes": 0})
        await store.update(DocRef("pitchVideos", "v1"), {"likes": 3})

        assert await store.get(DocRef("pitchVideos", "v1")) == {"title": "Pitch", "likes": 3}

    async def test_update_missing_raises(self, store: InMemoryEventStore) -> None:
        with pytest.raises(NotFoundError):
            await store.update(DocRef("pitchVideos", "nope"), {"likes": 1})

    async def test_delete_absent_is_noop(self, store: InMemoryEventStore) -> None:
        await store.delete(DocRef("videoLikes", "nope"))
        assert store.count("videoLikes") == 0

    async def test_create_if_absent(self, store: InMemoryEventStore) -> None:
        ref = DocRef("videoLikes", "v1_u1")

        assert await store.create_if_absent(ref, {"n": 1}) is True
        assert await store.create_if_absent(ref, {"n": 2}) is False
        assert await store.get(ref) == {"n": 1}

    async def test_delete_if_exists(self, store: InMemoryEventStore) -> None:
        ref = DocRef("videoLikes", "v1_u1")
        store.seed("videoLikes", "v1_u1", {})

        assert await store.delete_if_exists(ref) is True
        assert await store.delete_if_exists(ref) is False

    async def test_increment(self, store: InMemoryEventStore) -> None:
        ref = DocRef("pitchVideos", "v1")
        store.seed("pitchVideos", "v1", {"title": "Pitch"})

        assert await store.increment(ref, "likes", 1) == 1
        assert await store.increment(ref, "likes", 1) == 2
        assert await store.increment(ref, "likes", -1) == 1

    async def test_increment_missing_raises(self, store: InMemoryEventStore) -> None:
        with pytest.raises(NotFoundError):
            await store.increment(DocRef("pitchVideos", "nope"), "likes", 1)

    async def test_increment_floor(self, store: InMemoryEventStore) -> None:
        ref = DocRef("pitchVideos", "v1")
        store.seed("pitchVideos", "v1", {"likes": 1})

        assert await store.increment(ref, "likes", -1, floor=0) == 0
        assert await store.increment(ref, "likes", -1, floor=0) == 0
        assert await store.increment(ref, "likes", -1) == -1

    async def test_clear(self, store: InMemoryEventStore) -> None:
        await store.append("videoViews", {})
        store.clear()
        assert store.count("videoViews") == 0
