"""
Input validators for credential payloads.

They run before any hashing or storage work so bad input is rejected
cheaply.  Each returns a list of ``{"field", "message"}`` dicts; empty
means valid.
"""

from __future__ import annotations

from typing import Any, Dict, List

from auth.password import MAX_PASSWORD_BYTES

MAX_USERNAME_LENGTH = 64


def validate_username(username: Any) -> List[Dict[str, str]]:
    if not isinstance(username, str) or not username.strip():
        return [{"field": "username", "message": "Username is required"}]
    if len(username) > MAX_USERNAME_LENGTH:
        return [{
            "field": "username",
            "message": f"Username must be at most {MAX_USERNAME_LENGTH} characters",
        }]
    return []


def validate_password(password: Any) -> List[Dict[str, str]]:
    if not isinstance(password, str) or not password:
        return [{"field": "password", "message": "Password is required"}]
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return [{
            "field": "password",
            "message": f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
        }]
    return []


def validate_credentials(username: Any, password: Any) -> List[Dict[str, str]]:
    return validate_username(username) + validate_password(password)


def validate_login(username: Any, password: Any) -> List[Dict[str, str]]:
    """
    Presence checks only.  Length limits belong to registration; at login
    an over-long value just fails to match a stored record.
    """
    errors = []
    if not isinstance(username, str) or not username.strip():
        errors.append({"field": "username", "message": "Username is required"})
    if not isinstance(password, str) or not password:
        errors.append({"field": "password", "message": "Password is required"})
    return errors
