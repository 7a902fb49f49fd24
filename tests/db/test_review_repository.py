"""
Tests for DocumentReviewRepository over the in-memory document store.

Test Categories:
1. Post + fetch (the "Khurshid / Test Book" scenario)
2. Update and delete, including authorship checks
3. Local validation: no store call on missing identifiers
4. Malformed records: skipped, never fatal
5. Store failures surface as RemoteFailure outcomes
"""

import itertools

import pytest

from litlore.domain.entities import Book, Review
from litlore.domain.errors import NotFoundError, RemoteFailure, Unauthorized, ValidationError
from litlore.domain.value_objects import UserContext
from litlore.infrastructure.db import DocumentReviewRepository
from litlore.infrastructure.store import InMemoryDocumentStore


TEST_BOOK = Book(title="Test Book", author="Test Author")
KHURSHID = UserContext(user_id="uid-khurshid", username="Khurshid")
MALLORY = UserContext(user_id="uid-mallory", username="Mallory")


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryDocumentStore:
    ticks = itertools.count(1_700_000_000_000)
    return InMemoryDocumentStore(clock=lambda: next(ticks))


@pytest.fixture
def repo(store) -> DocumentReviewRepository:
    return DocumentReviewRepository(store)


def _review(rating=5, comment="Great read!", book_id=TEST_BOOK.id, **kwargs) -> Review:
    return Review(book_id=book_id, username="Khurshid", rating=rating, comment=comment, **kwargs)


# -----------------------------------------------------------------------------
# Post + fetch
# -----------------------------------------------------------------------------


class TestPostAndFetch:
    @pytest.mark.asyncio
    async def test_post_then_fetch_returns_the_review(self, repo):
        posted = await repo.post(KHURSHID, _review())
        assert posted.ok

        fetched = await repo.fetch_for_book(TEST_BOOK.id)

        assert fetched.ok
        assert len(fetched.value) == 1
        review = fetched.value[0]
        assert review.username == "Khurshid"
        assert review.rating == 5.0
        assert review.comment == "Great read!"
        assert review.book_id == TEST_BOOK.id
        assert review.review_id == posted.value
        assert review.review_id != ""
        assert review.author_id == KHURSHID.user_id
        assert review.created_at is not None

    @pytest.mark.asyncio
    async def test_fetch_orders_most_recent_first(self, repo):
        for comment in ("first", "second", "third"):
            await repo.post(KHURSHID, _review(comment=comment))

        fetched = await repo.fetch_for_book(TEST_BOOK.id)

        assert [r.comment for r in fetched.value] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_reviews_posted_in_the_same_millisecond_keep_posting_order(self):
        repo = DocumentReviewRepository(InMemoryDocumentStore(clock=lambda: 1_700_000_000_000))
        other_book = Book(title="Other Book").id
        for comment, book_id in (("first", TEST_BOOK.id), ("second", other_book), ("third", TEST_BOOK.id)):
            await repo.post(KHURSHID, _review(comment=comment, book_id=book_id))

        by_book = await repo.fetch_for_book(TEST_BOOK.id)
        by_author = await repo.fetch_for_author_username("Khurshid")

        assert [r.comment for r in by_book.value] == ["third", "first"]
        assert [r.comment for r in by_author.value] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_fetch_for_unknown_book_is_empty(self, repo):
        fetched = await repo.fetch_for_book(Book(title="Unreviewed").id)

        assert fetched.ok
        assert fetched.value == []

    @pytest.mark.asyncio
    async def test_books_sharing_a_title_keep_separate_reviews(self, repo):
        other = Book(title="Test Book", author="Another Author")
        await repo.post(KHURSHID, _review())

        assert (await repo.fetch_for_book(other.id)).value == []

    @pytest.mark.asyncio
    async def test_username_snapshot_falls_back_to_review(self, repo):
        await repo.post(UserContext(user_id="uid-k"), _review())

        fetched = await repo.fetch_for_book(TEST_BOOK.id)

        assert fetched.value[0].username == "Khurshid"

    @pytest.mark.asyncio
    async def test_fetch_by_author_username_spans_books(self, repo):
        other = Book(title="Other Book")
        await repo.post(KHURSHID, _review(comment="on test book"))
        await repo.post(KHURSHID, _review(comment="on other book", book_id=other.id))
        await repo.post(MALLORY, _review(comment="not mine"))

        fetched = await repo.fetch_for_author_username("Khurshid")

        assert fetched.ok
        assert [r.comment for r in fetched.value] == ["on other book", "on test book"]
        assert {r.book_id for r in fetched.value} == {TEST_BOOK.id, other.id}

    @pytest.mark.asyncio
    async def test_fetch_by_author_id(self, repo):
        await repo.post(KHURSHID, _review(comment="mine"))
        await repo.post(MALLORY, _review(comment="theirs"))

        fetched = await repo.fetch_for_author_id(KHURSHID.user_id)

        assert [r.comment for r in fetched.value] == ["mine"]


# -----------------------------------------------------------------------------
# Update / delete
# -----------------------------------------------------------------------------


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_changes_only_rating_and_comment(self, repo):
        review_id = (await repo.post(KHURSHID, _review())).value
        original = (await repo.fetch_for_book(TEST_BOOK.id)).value[0]

        updated = await repo.update(KHURSHID, original.with_changes(4, "Actually pretty good"))

        assert updated.ok
        after = (await repo.fetch_for_book(TEST_BOOK.id)).value
        assert len(after) == 1
        assert after[0].rating == 4.0
        assert after[0].comment == "Actually pretty good"
        assert after[0].review_id == review_id
        assert after[0].book_id == original.book_id
        assert after[0].author_id == original.author_id
        assert after[0].created_at == original.created_at

    @pytest.mark.asyncio
    async def test_update_by_someone_else_is_unauthorized(self, repo):
        await repo.post(KHURSHID, _review())
        original = (await repo.fetch_for_book(TEST_BOOK.id)).value[0]

        result = await repo.update(MALLORY, original.with_changes(1, "hijacked"))

        assert isinstance(result.error, Unauthorized)
        assert (await repo.fetch_for_book(TEST_BOOK.id)).value[0].comment == "Great read!"

    @pytest.mark.asyncio
    async def test_update_missing_review_is_not_found(self, repo):
        result = await repo.update(KHURSHID, _review(review_id="does-not-exist"))

        assert isinstance(result.error, NotFoundError)

    @pytest.mark.asyncio
    async def test_update_without_review_id_makes_no_store_call(self, repo, store):
        result = await repo.update(KHURSHID, _review())

        assert isinstance(result.error, ValidationError)
        assert result.error.field == "review_id"
        assert store.request_count == 0

    @pytest.mark.asyncio
    async def test_update_without_book_id_makes_no_store_call(self, repo, store):
        result = await repo.update(KHURSHID, _review(book_id="", review_id="r1"))

        assert isinstance(result.error, ValidationError)
        assert store.request_count == 0


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_review_and_is_repeatable(self, repo):
        await repo.post(KHURSHID, _review())
        review = (await repo.fetch_for_book(TEST_BOOK.id)).value[0]

        first = await repo.delete(KHURSHID, review)
        second = await repo.delete(KHURSHID, review)

        assert first.ok
        assert second.ok
        assert (await repo.fetch_for_book(TEST_BOOK.id)).value == []

    @pytest.mark.asyncio
    async def test_delete_by_someone_else_is_unauthorized(self, repo):
        await repo.post(KHURSHID, _review())
        review = (await repo.fetch_for_book(TEST_BOOK.id)).value[0]

        result = await repo.delete(MALLORY, review)

        assert isinstance(result.error, Unauthorized)
        assert len((await repo.fetch_for_book(TEST_BOOK.id)).value) == 1

    @pytest.mark.asyncio
    async def test_delete_without_identifiers_makes_no_store_call(self, repo, store):
        result = await repo.delete(KHURSHID, _review())

        assert isinstance(result.error, ValidationError)
        assert store.request_count == 0


# -----------------------------------------------------------------------------
# Validation on post
# -----------------------------------------------------------------------------


class TestPostValidation:
    @pytest.mark.asyncio
    async def test_missing_book_id(self, repo, store):
        result = await repo.post(KHURSHID, _review(book_id=""))

        assert isinstance(result.error, ValidationError)
        assert store.request_count == 0

    @pytest.mark.asyncio
    async def test_book_id_with_slash(self, repo):
        result = await repo.post(KHURSHID, _review(book_id="a/b"))

        assert isinstance(result.error, ValidationError)
        assert "cannot contain '/'" in result.error.message

    @pytest.mark.asyncio
    async def test_posting_as_someone_else_is_unauthorized(self, repo, store):
        result = await repo.post(MALLORY, _review(author_id=KHURSHID.user_id))

        assert isinstance(result.error, Unauthorized)
        assert store.request_count == 0

    @pytest.mark.asyncio
    async def test_missing_username(self, repo):
        review = Review(book_id=TEST_BOOK.id, username="", rating=3)

        result = await repo.post(UserContext(user_id="uid-anon"), review)

        assert isinstance(result.error, ValidationError)
        assert result.error.field == "username"


# -----------------------------------------------------------------------------
# Malformed records
# -----------------------------------------------------------------------------


class TestMalformedRecords:
    @pytest.mark.asyncio
    async def test_record_without_username_is_skipped(self, repo, store):
        await repo.post(KHURSHID, _review(comment="good one"))
        await store.set(
            f"Reviews/{TEST_BOOK.id}/UserReviews/broken",
            {"rating": 3, "comment": "no author", "timestamp": 1},
        )

        fetched = await repo.fetch_for_book(TEST_BOOK.id)

        assert fetched.ok
        assert [r.comment for r in fetched.value] == ["good one"]
        assert len(fetched.skipped) == 1
        assert fetched.skipped[0].path.endswith("/broken")
        assert fetched.skipped[0].reason == "missing username"

    @pytest.mark.asyncio
    async def test_missing_optional_fields_get_defaults(self, repo, store):
        await store.set(
            f"Reviews/{TEST_BOOK.id}/UserReviews/sparse",
            {"username": "Khurshid", "rating": "five", "timestamp": 1},
        )

        review = (await repo.fetch_for_book(TEST_BOOK.id)).value[0]

        assert review.comment == ""
        assert review.thumbnail_url == ""
        assert review.rating == 0.0
        assert review.author_id == ""

    @pytest.mark.asyncio
    async def test_out_of_range_rating_is_skipped(self, repo, store):
        await store.set(
            f"Reviews/{TEST_BOOK.id}/UserReviews/wild",
            {"username": "Khurshid", "rating": 11, "timestamp": 1},
        )

        fetched = await repo.fetch_for_book(TEST_BOOK.id)

        assert fetched.value == []
        assert len(fetched.skipped) == 1


# -----------------------------------------------------------------------------
# Store failures
# -----------------------------------------------------------------------------


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_offline_store_yields_remote_failure(self, repo, store):
        store.offline = True

        post = await repo.post(KHURSHID, _review())
        fetch = await repo.fetch_for_book(TEST_BOOK.id)

        assert isinstance(post.error, RemoteFailure)
        assert post.error.message == "Document store is unreachable"
        assert isinstance(fetch.error, RemoteFailure)
