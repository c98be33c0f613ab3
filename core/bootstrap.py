"""
Service wiring and startup/shutdown for the authentication backend.

Everything the app needs is constructed here from a ``Settings`` object and
passed down explicitly.  Startup failures surface as ``StartupError``; the
entry point decides what to do with them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import pydantic

from auth.errors import StoreError
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.service import AuthService
from config.settings import Settings
from database.session import create_engine
from database.user_store import SQLAlchemyUserStore

logger = logging.getLogger(__name__)


class StartupError(Exception):
    """Configuration or infrastructure problem that prevents serving."""


@dataclass
class Services:
    settings: Settings
    store: SQLAlchemyUserStore
    hasher: PasswordHasher
    tokens: TokenService
    auth: AuthService


def load_settings(**overrides: Any) -> Settings:
    try:
        settings = Settings(**overrides)
    except pydantic.ValidationError as exc:
        raise StartupError(f"Invalid configuration: {exc}") from exc
    logger.debug("Configuration loaded (environment=%s)", settings.environment)
    return settings


def build_services(settings: Settings) -> Services:
    store = SQLAlchemyUserStore(create_engine(settings))
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    tokens = TokenService(
        settings.jwt_secret,
        default_ttl=timedelta(seconds=settings.jwt_expiry_seconds),
    )
    auth = AuthService(store, hasher, tokens, logger=logging.getLogger("auth"))
    return Services(settings=settings, store=store, hasher=hasher, tokens=tokens, auth=auth)


async def start(services: Services) -> None:
    try:
        await services.store.initialize()
    except StoreError as exc:
        logger.error("Database unavailable at startup: %s", exc.__cause__ or exc)
        raise StartupError("Could not connect to the database") from exc
    logger.info("User store ready")


async def stop(services: Services) -> None:
    await services.store.close()
