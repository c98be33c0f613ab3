"""
Error taxonomy for the authentication core.

Two families live here:

* **User-facing** errors (``AuthError`` subclasses) carry a ``message`` that
  is safe to return to clients.  Only ``AuthService`` raises them.
* **Component** errors (hasher, token, store) describe what went wrong
  internally and never carry text meant for end users.
"""

from __future__ import annotations

from typing import Dict, List, Optional


# ── User-facing ────────────────────────────────────────────────────────


class AuthError(Exception):
    """Base for outcomes the service reports back to the caller."""

    message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Missing or malformed input, caught before any hashing happens."""

    message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        self.errors = errors
        super().__init__()


class DuplicateUsername(AuthError):
    message = "Username already taken"


class InvalidCredentials(AuthError):
    """Same outcome for an unknown username and for a wrong password."""

    message = "Invalid credentials"


class InternalError(AuthError):
    message = "Internal server error"


# ── Credential hasher ──────────────────────────────────────────────────


class EncodingError(Exception):
    """Plaintext that cannot be fed to the hash function."""


class CorruptHashError(Exception):
    """A stored hash that is not a well-formed bcrypt string."""


# ── Tokens ─────────────────────────────────────────────────────────────


class TokenError(Exception):
    """Base for every reason a token is rejected."""


class InvalidSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class MalformedToken(TokenError):
    pass


# ── User record store ──────────────────────────────────────────────────


class StoreError(Exception):
    """Storage or connectivity failure inside the user store."""


class UsernameExistsError(StoreError):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"username {username!r} already exists")
