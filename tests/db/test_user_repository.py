"""
Tests for DocumentUserRepository over the in-memory document store.
"""

import pytest

from litlore.domain.entities import User
from litlore.domain.errors import NotFoundError, RemoteFailure, ValidationError
from litlore.domain.value_objects import UserContext
from litlore.infrastructure.db import DocumentUserRepository
from litlore.infrastructure.store import InMemoryDocumentStore


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def repo(store) -> DocumentUserRepository:
    return DocumentUserRepository(store)


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_create_user_starts_with_empty_bio(self, repo, store):
        result = await repo.create_user("u1", "alice", "alice@example.com")

        assert result.value == User(id="u1", username="alice", email="alice@example.com", bio="")
        assert (await store.get("Users/u1")).data == {
            "username": "alice",
            "email": "alice@example.com",
            "bio": "",
        }

    @pytest.mark.asyncio
    async def test_username_taken_by_another_user(self, repo):
        await repo.create_user("u1", "alice", "a@example.com")

        result = await repo.create_user("u2", "alice", "other@example.com")

        assert isinstance(result.error, ValidationError)
        assert "already taken" in result.error.message

    @pytest.mark.asyncio
    async def test_recreating_own_profile_is_allowed(self, repo):
        await repo.create_user("u1", "alice", "a@example.com")

        assert (await repo.create_user("u1", "alice", "new@example.com")).ok

    @pytest.mark.asyncio
    async def test_username_prefix_is_not_a_clash(self, repo):
        await repo.create_user("u1", "alice", "")

        assert (await repo.create_user("u2", "ali", "")).ok

    @pytest.mark.asyncio
    async def test_blank_username_rejected_locally(self, repo, store):
        result = await repo.create_user("u1", "  ", "")

        assert isinstance(result.error, ValidationError)
        assert store.request_count == 0


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_user(self, repo):
        await repo.create_user("u1", "alice", "a@example.com")

        user = (await repo.fetch_user("u1")).value

        assert user.username == "alice"
        assert user.bio == ""

    @pytest.mark.asyncio
    async def test_fetch_missing_user_is_none(self, repo):
        result = await repo.fetch_user("ghost")

        assert result.ok
        assert result.value is None

    @pytest.mark.asyncio
    async def test_fetch_malformed_user_is_remote_failure(self, repo, store):
        await store.set("Users/u1", {"email": "no-username@example.com"})

        result = await repo.fetch_user("u1")

        assert isinstance(result.error, RemoteFailure)
        assert result.error.message == "Failed to parse user data."

    @pytest.mark.asyncio
    async def test_fetch_username(self, repo):
        await repo.create_user("u1", "alice", "")

        assert (await repo.fetch_username("u1")).value == "alice"

    @pytest.mark.asyncio
    async def test_fetch_username_missing_user(self, repo):
        assert isinstance((await repo.fetch_username("ghost")).error, NotFoundError)

    @pytest.mark.asyncio
    async def test_fetch_username_empty_username(self, repo, store):
        await store.set("Users/u1", {"username": ""})

        assert isinstance((await repo.fetch_username("u1")).error, NotFoundError)


class TestUpdateBio:
    @pytest.mark.asyncio
    async def test_update_bio(self, repo):
        await repo.create_user("u1", "alice", "")

        result = await repo.update_bio(UserContext(user_id="u1"), "Loves mysteries")

        assert result.ok
        assert (await repo.fetch_user("u1")).value.bio == "Loves mysteries"

    @pytest.mark.asyncio
    async def test_update_bio_of_missing_user_is_not_found(self, repo):
        result = await repo.update_bio(UserContext(user_id="ghost"), "hi")

        assert isinstance(result.error, NotFoundError)
