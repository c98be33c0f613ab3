"""
Authentication service — registration and login.

Orchestrates the password hasher, the user store and the token service,
and is the only layer that turns internal failures into user-facing
errors (see ``auth.errors``).  bcrypt work is pushed onto worker threads
with ``asyncio.to_thread`` so a slow hash never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from auth.errors import (
    CorruptHashError,
    DuplicateUsername,
    EncodingError,
    InternalError,
    InvalidCredentials,
    StoreError,
    UsernameExistsError,
    ValidationError,
)
from auth.jwt import AuthToken, TokenService
from auth.models import UserCredential
from auth.password import HashedCredential, PasswordHasher
from database.user_store import UserStore
from utils.validators import validate_credentials, validate_login


class AuthService:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._logger = logger or logging.getLogger(__name__)
        self._dummy_hash: Optional[HashedCredential] = None

    async def register(self, username: str, password: str) -> UserCredential:
        """
        Create a new account.

        Raises ``ValidationError`` for missing/oversized input,
        ``DuplicateUsername`` when the name is taken and ``InternalError``
        for anything else.
        """
        errors = validate_credentials(username, password)
        if errors:
            raise ValidationError(errors)

        try:
            password_hash = await asyncio.to_thread(self._hasher.hash, password)
        except EncodingError as exc:
            self._logger.warning("Rejected password for %s: %s", username, exc)
            raise ValidationError(
                [{"field": "password", "message": "Password could not be processed"}]
            ) from exc

        try:
            user = await self._store.create(username, password_hash)
        except UsernameExistsError as exc:
            self._logger.warning("Registration rejected, username taken: %s", username)
            raise DuplicateUsername() from exc
        except StoreError as exc:
            self._logger.error("Error during registration of %s: %s", username, exc, exc_info=True)
            raise InternalError() from exc

        self._logger.info("User registered: %s (%s)", username, user.id)
        return user

    async def login(self, username: str, password: str) -> AuthToken:
        """
        Exchange a username/password pair for a signed token.

        Unknown usernames and wrong passwords raise the same
        ``InvalidCredentials``.
        """
        errors = validate_login(username, password)
        if errors:
            raise ValidationError(errors)

        try:
            user = await self._store.find_by_username(username)
        except StoreError as exc:
            self._logger.error("Error during login of %s: %s", username, exc, exc_info=True)
            raise InternalError() from exc

        if user is None:
            # Burn the same bcrypt time as a real check.
            await asyncio.to_thread(self._hasher.verify, password, await self._get_dummy_hash())
            self._logger.warning("Login attempt failed for non-existent user: %s", username)
            raise InvalidCredentials()

        try:
            valid = await asyncio.to_thread(self._hasher.verify, password, user.password_hash)
        except CorruptHashError:
            self._logger.error("Stored password hash is corrupt for user %s", user.id)
            raise InvalidCredentials()

        if not valid:
            self._logger.warning("Invalid password attempt for user: %s", username)
            raise InvalidCredentials()

        token = self._tokens.issue(user.id)
        self._logger.info("User logged in: %s (%s)", username, user.id)
        return token

    async def _get_dummy_hash(self) -> HashedCredential:
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(
                self._hasher.hash, "dummy-password-for-timing"
            )
        return self._dummy_hash
