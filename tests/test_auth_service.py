"""
Tests for the authentication service — business rules and error taxonomy.
"""

import asyncio
import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from auth.errors import (
    DuplicateUsername,
    InternalError,
    InvalidCredentials,
    StoreError,
    UsernameExistsError,
    ValidationError,
)
from auth.models import UserCredential
from auth.service import AuthService


# ── helpers ────────────────────────────────────────────────────────────────────

def _mock_store(user: UserCredential | None = None) -> MagicMock:
    store = MagicMock()
    store.create = AsyncMock(
        side_effect=lambda username, password_hash: UserCredential(
            id="user-1", username=username, password_hash=password_hash,
        )
    )
    store.find_by_username = AsyncMock(return_value=user)
    return store


# ── register ───────────────────────────────────────────────────────────────────


class TestRegister:
    @pytest.mark.asyncio
    async def test_stores_hash_not_plaintext(self, hasher, tokens):
        store = _mock_store()
        service = AuthService(store, hasher, tokens)

        user = await service.register("alice", "s3cr3t!")

        username, stored_hash = store.create.await_args.args
        assert username == "alice"
        assert stored_hash != "s3cr3t!"
        assert hasher.verify("s3cr3t!", stored_hash)
        assert user.username == "alice"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username,password,field", [
        ("", "pw", "username"),
        ("   ", "pw", "username"),
        (None, "pw", "username"),
        ("alice", "", "password"),
        ("alice", None, "password"),
        ("a" * 65, "pw", "username"),
        ("alice", "p" * 73, "password"),
    ])
    async def test_invalid_input_rejected_before_hashing(self, tokens, username, password, field):
        store = _mock_store()
        hasher = MagicMock()
        service = AuthService(store, hasher, tokens)

        with pytest.raises(ValidationError) as exc_info:
            await service.register(username, password)

        assert [e["field"] for e in exc_info.value.errors] == [field]
        hasher.hash.assert_not_called()
        store.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_both_fields_reported(self, hasher, tokens):
        service = AuthService(_mock_store(), hasher, tokens)
        with pytest.raises(ValidationError) as exc_info:
            await service.register("", "")
        assert {e["field"] for e in exc_info.value.errors} == {"username", "password"}

    @pytest.mark.asyncio
    async def test_duplicate_username(self, hasher, tokens):
        store = _mock_store()
        store.create = AsyncMock(side_effect=UsernameExistsError("alice"))
        service = AuthService(store, hasher, tokens)

        with pytest.raises(DuplicateUsername) as exc_info:
            await service.register("alice", "pw")
        assert exc_info.value.message == "Username already taken"

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic(self, hasher, tokens, caplog):
        store = _mock_store()
        store.create = AsyncMock(side_effect=StoreError("connection reset by peer"))
        service = AuthService(store, hasher, tokens)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(InternalError) as exc_info:
                await service.register("alice", "pw")

        assert exc_info.value.message == "Internal server error"
        assert "connection reset" not in exc_info.value.message
        assert "connection reset by peer" in caplog.text

    @pytest.mark.asyncio
    async def test_uses_injected_logger(self, hasher, tokens):
        logger = MagicMock(spec=logging.Logger)
        service = AuthService(_mock_store(), hasher, tokens, logger=logger)
        await service.register("alice", "pw")
        logger.info.assert_called_once()
        assert "pw" not in str(logger.info.call_args)


# ── login ──────────────────────────────────────────────────────────────────────


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_issues_token_for_user_id(self, hasher, tokens):
        user = UserCredential(id="user-7", username="alice", password_hash=hasher.hash("s3cr3t!"))
        service = AuthService(_mock_store(user), hasher, tokens)

        token = await service.login("alice", "s3cr3t!")

        assert tokens.verify(token.value).subject == "user-7"

    @pytest.mark.asyncio
    async def test_unknown_user_and_wrong_password_are_identical(self, hasher, tokens):
        user = UserCredential(id="user-7", username="alice", password_hash=hasher.hash("s3cr3t!"))

        with pytest.raises(InvalidCredentials) as wrong_password:
            await AuthService(_mock_store(user), hasher, tokens).login("alice", "wrong")
        with pytest.raises(InvalidCredentials) as unknown_user:
            await AuthService(_mock_store(None), hasher, tokens).login("mallory", "wrong")

        assert type(wrong_password.value) is type(unknown_user.value)
        assert wrong_password.value.message == unknown_user.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_user_still_runs_a_verification(self, tokens):
        hasher = MagicMock()
        hasher.hash.return_value = "$2b$04$dummy"
        hasher.verify.return_value = False
        service = AuthService(_mock_store(None), hasher, tokens)

        with pytest.raises(InvalidCredentials):
            await service.login("mallory", "pw")
        hasher.verify.assert_called_once_with("pw", "$2b$04$dummy")

    @pytest.mark.asyncio
    async def test_corrupt_stored_hash_is_rejection(self, hasher, tokens):
        user = UserCredential(id="user-7", username="alice", password_hash="garbage")
        service = AuthService(_mock_store(user), hasher, tokens)
        with pytest.raises(InvalidCredentials):
            await service.login("alice", "pw")

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic(self, hasher, tokens):
        store = _mock_store()
        store.find_by_username = AsyncMock(side_effect=StoreError("timeout"))
        service = AuthService(store, hasher, tokens)
        with pytest.raises(InternalError):
            await service.login("alice", "pw")

    @pytest.mark.asyncio
    async def test_empty_input_rejected(self, hasher, tokens):
        store = _mock_store()
        service = AuthService(store, hasher, tokens)
        with pytest.raises(ValidationError):
            await service.login("", "")
        store.find_by_username.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_overlong_password_is_a_mismatch(self, hasher, tokens):
        user = UserCredential(id="user-7", username="alice", password_hash=hasher.hash("s3cr3t!"))
        store = _mock_store(user)
        service = AuthService(store, hasher, tokens)

        with pytest.raises(InvalidCredentials):
            await service.login("alice", "p" * 100)
        store.find_by_username.assert_awaited_once_with("alice")

    @pytest.mark.asyncio
    async def test_overlong_username_is_a_mismatch(self, hasher, tokens):
        store = _mock_store(None)
        service = AuthService(store, hasher, tokens)

        with pytest.raises(InvalidCredentials):
            await service.login("a" * 65, "pw")
        store.find_by_username.assert_awaited_once()


# ── with a real store ──────────────────────────────────────────────────────────


class TestWithStore:
    @pytest.mark.asyncio
    async def test_register_then_login(self, store, hasher, tokens):
        service = AuthService(store, hasher, tokens)
        user = await service.register("alice", "s3cr3t!")
        token = await service.login("alice", "s3cr3t!")
        assert tokens.verify(token).subject == user.id

    @pytest.mark.asyncio
    async def test_second_registration_fails(self, store, hasher, tokens):
        service = AuthService(store, hasher, tokens)
        await service.register("alice", "first")
        with pytest.raises(DuplicateUsername):
            await service.register("alice", "second")
        await service.login("alice", "first")

    @pytest.mark.asyncio
    async def test_concurrent_registration(self, store, hasher, tokens):
        service = AuthService(store, hasher, tokens)
        results = await asyncio.gather(
            service.register("carol", "pw-one"),
            service.register("carol", "pw-two"),
            return_exceptions=True,
        )
        assert sum(isinstance(r, UserCredential) for r in results) == 1
        assert sum(isinstance(r, DuplicateUsername) for r in results) == 1
