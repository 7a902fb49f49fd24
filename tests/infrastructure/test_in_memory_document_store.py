"""
Tests for InMemoryDocumentStore.

Test Categories:
1. Basic CRUD: set, get, update, add, delete
2. Queries: ordered listing, prefix ranges, collection groups, counts
3. Server timestamps and the injectable clock
4. Failure simulation: the offline switch
"""

import itertools

import pytest

from litlore.domain.ports import PREFIX_SENTINEL, SERVER_TIMESTAMP
from litlore.infrastructure.store import InMemoryDocumentStore, StoreUnavailableError


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """A fresh store whose clock ticks 1000, 1001, 1002, ..."""
    ticks = itertools.count(1000)
    return InMemoryDocumentStore(clock=lambda: next(ticks))


# -----------------------------------------------------------------------------
# Basic CRUD
# -----------------------------------------------------------------------------


class TestCrud:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get("Users/nobody") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, store):
        await store.set("Users/u1", {"username": "alice", "bio": ""})

        doc = await store.get("Users/u1")

        assert doc.path == "Users/u1"
        assert doc.id == "u1"
        assert doc.data == {"username": "alice", "bio": ""}

    @pytest.mark.asyncio
    async def test_set_overwrites(self, store):
        await store.set("Users/u1", {"username": "alice", "bio": "old"})
        await store.set("Users/u1", {"username": "alice"})

        assert (await store.get("Users/u1")).data == {"username": "alice"}

    @pytest.mark.asyncio
    async def test_returned_data_is_a_copy(self, store):
        await store.set("Users/u1", {"username": "alice"})

        doc = await store.get("Users/u1")
        doc.data["username"] = "mallory"

        assert (await store.get("Users/u1")).data["username"] == "alice"

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, store):
        await store.set("Users/u1", {"username": "alice", "bio": ""})

        await store.update("Users/u1", {"bio": "Reader"})

        assert (await store.get("Users/u1")).data == {"username": "alice", "bio": "Reader"}

    @pytest.mark.asyncio
    async def test_update_missing_raises_key_error(self, store):
        with pytest.raises(KeyError):
            await store.update("Users/ghost", {"bio": "x"})

    @pytest.mark.asyncio
    async def test_add_assigns_distinct_ids(self, store):
        first = await store.add("Reviews/b1/UserReviews", {"rating": 5})
        second = await store.add("Reviews/b1/UserReviews", {"rating": 3})

        assert first != second
        assert (await store.get(f"Reviews/b1/UserReviews/{first}")).data == {"rating": 5}

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store):
        await store.set("Users/u1", {"username": "alice"})

        await store.delete("Users/u1")
        await store.delete("Users/u1")

        assert await store.get("Users/u1") is None

    @pytest.mark.asyncio
    async def test_get_rejects_collection_path(self, store):
        with pytest.raises(ValueError, match="Not a document path"):
            await store.get("Users")

    @pytest.mark.asyncio
    async def test_add_rejects_document_path(self, store):
        with pytest.raises(ValueError, match="Not a collection path"):
            await store.add("Users/u1", {"x": 1})


# -----------------------------------------------------------------------------
# Server timestamps
# -----------------------------------------------------------------------------


class TestServerTimestamp:
    @pytest.mark.asyncio
    async def test_sentinel_is_resolved_by_the_clock(self, store):
        await store.set("Users/u1/Follow/bob", {"followed": "bob", "timestamp": SERVER_TIMESTAMP})

        doc = await store.get("Users/u1/Follow/bob")

        assert doc.data["timestamp"] == 1000

    @pytest.mark.asyncio
    async def test_default_clock_is_epoch_millis(self):
        store = InMemoryDocumentStore()
        await store.set("A/a", {"t": SERVER_TIMESTAMP})

        assert (await store.get("A/a")).data["t"] > 1_600_000_000_000


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_collection_only_direct_children(self, store):
        await store.set("Users/u1", {"username": "alice"})
        await store.set("Users/u1/Follow/bob", {"followed": "bob"})
        await store.set("Users/u2", {"username": "bob"})

        docs = await store.list_collection("Users")

        assert [d.path for d in docs] == ["Users/u1", "Users/u2"]

    @pytest.mark.asyncio
    async def test_list_collection_ordered_descending(self, store):
        for rid in ("r1", "r2", "r3"):
            await store.set(f"Reviews/b1/UserReviews/{rid}", {"timestamp": SERVER_TIMESTAMP})

        docs = await store.list_collection("Reviews/b1/UserReviews", order_by="timestamp", descending=True)

        assert [d.id for d in docs] == ["r3", "r2", "r1"]

    @pytest.mark.asyncio
    async def test_list_collection_excludes_documents_missing_order_field(self, store):
        await store.set("C/a", {"n": 2})
        await store.set("C/b", {})
        await store.set("C/c", {"n": 1})

        docs = await store.list_collection("C", order_by="n")

        assert [d.id for d in docs] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_prefix_range_query(self, store):
        for uid, name in (("u1", "Alice"), ("u2", "Al"), ("u3", "Bella"), ("u4", "alfred")):
            await store.set(f"Users/{uid}", {"username": name})

        docs = await store.range_query("Users", "username", "Al", "Al" + PREFIX_SENTINEL)

        assert [d.data["username"] for d in docs] == ["Al", "Alice"]

    @pytest.mark.asyncio
    async def test_range_query_ignores_non_string_values(self, store):
        await store.set("Users/u1", {"username": 42})

        assert await store.range_query("Users", "username", "", PREFIX_SENTINEL) == []

    @pytest.mark.asyncio
    async def test_collection_group_spans_parents(self, store):
        await store.set("Reviews/b1/UserReviews/r1", {"username": "Khurshid"})
        await store.set("Reviews/b2/UserReviews/r2", {"username": "Khurshid"})
        await store.set("Reviews/b2/UserReviews/r3", {"username": "Someone"})
        await store.set("Other/x/Elsewhere/r4", {"username": "Khurshid"})

        docs = await store.collection_group("UserReviews", "username", "Khurshid")

        assert sorted(d.path for d in docs) == [
            "Reviews/b1/UserReviews/r1",
            "Reviews/b2/UserReviews/r2",
        ]
        assert {d.parent_id for d in docs} == {"b1", "b2"}

    @pytest.mark.asyncio
    async def test_counts(self, store):
        await store.set("Users/u1/Follow/carol", {"followed": "carol"})
        await store.set("Users/u2/Follow/carol", {"followed": "carol"})
        await store.set("Users/u2/Follow/dave", {"followed": "dave"})

        assert await store.count_collection("Users/u2/Follow") == 2
        assert await store.count_group("Follow", "followed", "carol") == 2
        assert await store.count_group("Follow", "followed", "erin") == 0


# -----------------------------------------------------------------------------
# Failure simulation
# -----------------------------------------------------------------------------


class TestOffline:
    @pytest.mark.asyncio
    async def test_offline_store_raises(self, store):
        store.offline = True

        with pytest.raises(StoreUnavailableError, match="unreachable"):
            await store.get("Users/u1")

    @pytest.mark.asyncio
    async def test_request_count_tracks_calls(self, store):
        await store.set("Users/u1", {"username": "alice"})
        await store.get("Users/u1")

        assert store.request_count == 2
