"""Credential record as seen by the authentication service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserCredential(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    # Opaque bcrypt output; kept out of repr so it never lands in a log line.
    password_hash: str = Field(repr=False)
