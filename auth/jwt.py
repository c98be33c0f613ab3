"""
JWT-style token creation and verification.

Tokens are compact ``header.payload.signature`` strings: base64url-encoded
JSON segments signed with HMAC-SHA256 over ``header.payload``.  The secret
and the default lifetime are injected by the caller (see
``config.settings.Settings.jwt_secret`` / ``jwt_expiry_seconds``).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel

from auth.errors import InvalidSignature, MalformedToken, TokenExpired

ALGORITHM = "HS256"
_HEADER = {"alg": ALGORITHM, "typ": "JWT"}


class TokenClaims(BaseModel):
    """Identity asserted by a verified token."""

    subject: str
    issued_at: int
    expires_at: int


class AuthToken(TokenClaims):
    """A freshly issued token together with its compact encoding."""

    signature: str
    value: str

    def __str__(self) -> str:
        return self.value


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _encode_json(data: Dict[str, Any]) -> str:
    return _b64encode(json.dumps(data, separators=(",", ":"), sort_keys=True).encode())


def _decode_json(segment: str) -> Dict[str, Any]:
    try:
        data = json.loads(_b64decode(segment))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise MalformedToken("segment is not base64url-encoded JSON") from exc
    if not isinstance(data, dict):
        raise MalformedToken("segment is not a JSON object")
    return data


class TokenService:
    """Issues and verifies stateless, expiring identity tokens."""

    def __init__(
        self,
        secret: str,
        default_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        if default_ttl < timedelta(0):
            raise ValueError("default token ttl must not be negative")
        self._secret = secret.encode("utf-8")
        self.default_ttl = default_ttl
        self._clock = clock

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(self._secret, signing_input.encode("utf-8"), hashlib.sha256).digest()
        return _b64encode(digest)

    def issue(self, subject: str, ttl: Optional[timedelta] = None) -> AuthToken:
        """Create a signed token for ``subject`` valid until ``now + ttl``."""
        if ttl is None:
            ttl = self.default_ttl
        if ttl < timedelta(0):
            raise ValueError("token ttl must not be negative")

        issued_at = int(self._clock())
        expires_at = issued_at + int(ttl.total_seconds())
        payload = {"sub": str(subject), "iat": issued_at, "exp": expires_at}

        signing_input = _encode_json(_HEADER) + "." + _encode_json(payload)
        signature = self._sign(signing_input)
        return AuthToken(
            subject=str(subject),
            issued_at=issued_at,
            expires_at=expires_at,
            signature=signature,
            value=signing_input + "." + signature,
        )

    def verify(self, token: Union[str, AuthToken]) -> TokenClaims:
        """
        Check signature, structure and expiry of ``token``.

        Raises ``MalformedToken``, ``InvalidSignature`` or ``TokenExpired``;
        returns the claims only when every check passes.
        """
        if isinstance(token, AuthToken):
            token = token.value
        if not isinstance(token, str):
            raise MalformedToken("token must be a string")

        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            raise MalformedToken("token must have three non-empty segments")
        header_b64, payload_b64, signature = parts

        expected = self._sign(header_b64 + "." + payload_b64)
        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            raise InvalidSignature("signature does not match payload")

        header = _decode_json(header_b64)
        if header.get("alg") != ALGORITHM:
            raise MalformedToken(f"unsupported algorithm {header.get('alg')!r}")

        payload = _decode_json(payload_b64)
        subject = payload.get("sub")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not isinstance(subject, str) or not subject:
            raise MalformedToken("missing subject claim")
        for name, value in (("iat", issued_at), ("exp", expires_at)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise MalformedToken(f"claim {name!r} must be an integer timestamp")

        if self._clock() >= expires_at:
            raise TokenExpired("token expired")

        return TokenClaims(subject=subject, issued_at=issued_at, expires_at=expires_at)
