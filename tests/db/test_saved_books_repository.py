"""
Tests for DocumentSavedBooksRepository over the in-memory document store.
"""

import pytest

from litlore.domain.entities import Book, SavedBook
from litlore.domain.errors import RemoteFailure, ValidationError
from litlore.domain.value_objects import UserContext
from litlore.infrastructure.db import DocumentSavedBooksRepository
from litlore.infrastructure.store import InMemoryDocumentStore


ME = UserContext(user_id="u1", username="Khurshid")
DUNE = Book(title="Dune", author="Frank Herbert", thumbnail_url="http://img/dune.jpg", rating=4.5)
EMMA = Book(title="emma", author="Jane Austen")


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def repo(store) -> DocumentSavedBooksRepository:
    return DocumentSavedBooksRepository(store)


class TestSaveAndRemove:
    @pytest.mark.asyncio
    async def test_save_then_remove(self, repo):
        assert (await repo.save(ME, DUNE)).ok
        assert await repo.is_saved(ME.user_id, DUNE) is True

        assert (await repo.remove(ME, DUNE)).ok
        assert await repo.is_saved(ME.user_id, DUNE) is False

    @pytest.mark.asyncio
    async def test_save_returns_the_save_record(self, repo):
        record = (await repo.save(ME, DUNE)).value

        assert record == SavedBook(user_id="u1", book=DUNE)
        assert record.key == DUNE.id

    @pytest.mark.asyncio
    async def test_save_is_idempotent(self, repo):
        await repo.save(ME, DUNE)
        await repo.save(ME, DUNE)

        assert (await repo.fetch_saved(ME.user_id)).value == [DUNE]

    @pytest.mark.asyncio
    async def test_remove_unsaved_book_is_ok(self, repo):
        assert (await repo.remove(ME, DUNE)).ok

    @pytest.mark.asyncio
    async def test_snapshot_is_stored_under_the_book_id(self, repo, store):
        await repo.save(ME, DUNE)

        doc = await store.get(f"Users/u1/SavedBooks/{DUNE.id}")

        assert doc.data["title"] == "Dune"
        assert doc.data["thumbnailUrl"] == "https://img/dune.jpg"

    @pytest.mark.asyncio
    async def test_saves_are_per_user(self, repo):
        await repo.save(ME, DUNE)

        assert await repo.is_saved("u2", DUNE) is False


class TestToggle:
    @pytest.mark.asyncio
    async def test_toggle_flips_state(self, repo):
        first = await repo.toggle(ME, DUNE)
        second = await repo.toggle(ME, DUNE)

        assert first.value is True
        assert second.value is False
        assert await repo.is_saved(ME.user_id, DUNE) is False


class TestFetchSaved:
    @pytest.mark.asyncio
    async def test_fetch_orders_by_title_ignoring_case(self, repo):
        await repo.save(ME, EMMA)
        await repo.save(ME, DUNE)

        result = await repo.fetch_saved(ME.user_id)

        assert [b.title for b in result.value] == ["Dune", "emma"]
        assert result.value[0] == DUNE

    @pytest.mark.asyncio
    async def test_snapshot_without_id_uses_document_key(self, repo, store):
        await store.set("Users/u1/SavedBooks/legacy-key", {"title": "Old Save", "author": "A"})

        book = (await repo.fetch_saved(ME.user_id)).value[0]

        assert book.id == "legacy-key"
        assert book.description == "No description available."
        assert (await repo.remove(ME, book)).ok
        assert (await repo.fetch_saved(ME.user_id)).value == []

    @pytest.mark.asyncio
    async def test_snapshot_without_title_is_skipped(self, repo, store):
        await repo.save(ME, DUNE)
        await store.set("Users/u1/SavedBooks/broken", {"author": "Nobody"})

        result = await repo.fetch_saved(ME.user_id)

        assert result.value == [DUNE]
        assert [s.reason for s in result.skipped] == ["missing title"]

    @pytest.mark.asyncio
    async def test_fetch_requires_user_id(self, repo, store):
        result = await repo.fetch_saved("")

        assert isinstance(result.error, ValidationError)
        assert store.request_count == 0


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_is_saved_fails_open(self, repo, store):
        await repo.save(ME, DUNE)
        store.offline = True

        assert await repo.is_saved(ME.user_id, DUNE) is False

    @pytest.mark.asyncio
    async def test_is_saved_without_user_is_false(self, repo):
        assert await repo.is_saved("", DUNE) is False

    @pytest.mark.asyncio
    async def test_save_reports_remote_failure(self, repo, store):
        store.offline = True

        result = await repo.save(ME, DUNE)

        assert isinstance(result.error, RemoteFailure)
