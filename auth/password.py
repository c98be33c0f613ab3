"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import hmac

import bcrypt

from auth.errors import CorruptHashError, EncodingError

HashedCredential = str

# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72
DEFAULT_ROUNDS = 10


class PasswordHasher:
    """Salted one-way hashing with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds

    def hash(self, plaintext: str) -> HashedCredential:
        """Hash ``plaintext`` with a fresh salt embedded in the result."""
        if not isinstance(plaintext, str):
            raise EncodingError(
                f"password must be str, not {type(plaintext).__name__}"
            )
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise EncodingError(
                f"password exceeds {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
            )
        try:
            hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except ValueError as exc:
            raise EncodingError(str(exc)) from exc
        return hashed.decode("ascii")

    def verify(self, plaintext: str, hashed: HashedCredential) -> bool:
        """
        Recompute the hash with the salt stored in ``hashed`` and compare
        in constant time.

        Returns False for any mismatch.  Raises ``CorruptHashError`` only
        when ``hashed`` itself is unusable.
        """
        hashed_bytes = _hash_bytes(hashed)
        if not isinstance(plaintext, str):
            return False
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            candidate = bcrypt.hashpw(encoded, hashed_bytes)
        except ValueError as exc:
            raise CorruptHashError("stored hash is not a valid bcrypt hash") from exc
        return hmac.compare_digest(candidate, hashed_bytes)


def _hash_bytes(hashed: HashedCredential) -> bytes:
    if not isinstance(hashed, str):
        raise CorruptHashError(f"hash must be str, not {type(hashed).__name__}")
    try:
        hashed_bytes = hashed.encode("ascii")
    except UnicodeEncodeError as exc:
        raise CorruptHashError("stored hash contains non-ASCII characters") from exc
    # $2b$10$ + 22 chars of salt + 31 chars of digest
    if len(hashed_bytes) != 60 or not hashed_bytes.startswith((b"$2a$", b"$2b$", b"$2y$")):
        raise CorruptHashError("stored hash is not a valid bcrypt hash")
    return hashed_bytes
