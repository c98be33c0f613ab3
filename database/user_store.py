"""
User record store — persists and looks up credential records.

``UserStore`` is the contract the authentication service depends on;
``SQLAlchemyUserStore`` implements it on an async SQLAlchemy engine and
relies on the ``users.username`` unique constraint for atomic
insert-if-absent.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from auth.errors import StoreError, UsernameExistsError
from auth.models import UserCredential
from database.health import ConnectionHealth
from database.models import Base, User
from database.session import create_session_factory

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Storage contract for credential records."""

    health: ConnectionHealth

    @abstractmethod
    async def create(self, username: str, password_hash: str) -> UserCredential:
        """
        Insert a new record.

        Raises ``UsernameExistsError`` if ``username`` is taken, even when
        two inserts race; ``StoreError`` for any other storage failure.
        """
        ...

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[UserCredential]:
        """Return the record for ``username`` or None."""
        ...


def _to_credential(row: User) -> UserCredential:
    return UserCredential(
        id=str(row.user_id),
        username=row.username,
        password_hash=row.password_hash,
    )


class SQLAlchemyUserStore(UserStore):
    def __init__(self, engine: AsyncEngine, health: Optional[ConnectionHealth] = None) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self.health = health or ConnectionHealth()

    async def initialize(self) -> None:
        """Create the schema if needed; also serves as the connectivity check."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            self.health.mark_disconnected(exc)
            raise StoreError("could not initialize user store") from exc
        self.health.mark_connected()

    async def check_connection(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            self.health.mark_disconnected(exc)
            return False
        self.health.mark_connected()
        return True

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("User store connection closed")

    async def create(self, username: str, password_hash: str) -> UserCredential:
        async with self._session_factory() as session:
            row = User(username=username, password_hash=password_hash)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                self.health.mark_connected()
                raise UsernameExistsError(username) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                self._record_failure(exc)
                raise StoreError("failed to insert user record") from exc
        self.health.mark_connected()
        return _to_credential(row)

    async def find_by_username(self, username: str) -> Optional[UserCredential]:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    select(User).where(User.username == username)
                )
            except SQLAlchemyError as exc:
                self._record_failure(exc)
                raise StoreError("failed to look up user record") from exc
            row = result.scalar_one_or_none()
        self.health.mark_connected()
        return _to_credential(row) if row is not None else None

    def _record_failure(self, exc: SQLAlchemyError) -> None:
        # Statement-level failures (missing table, lock timeout) leave the
        # connection usable; only a driver-classified disconnect counts.
        if isinstance(exc, DBAPIError) and exc.connection_invalidated:
            self.health.mark_disconnected(exc)
