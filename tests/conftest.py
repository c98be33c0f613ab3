"""Shared fixtures: settings pointing at a throwaway SQLite database."""

import pytest
import pytest_asyncio

from auth.jwt import TokenService
from auth.password import PasswordHasher
from config.settings import Settings
from database.session import create_engine
from database.user_store import SQLAlchemyUserStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret="test-secret-key",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        bcrypt_rounds=4,
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService("test-secret-key")


@pytest_asyncio.fixture
async def store(settings):
    user_store = SQLAlchemyUserStore(create_engine(settings))
    await user_store.initialize()
    yield user_store
    await user_store.close()
