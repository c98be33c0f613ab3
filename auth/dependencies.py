"""
FastAPI dependencies for authentication.

Services live on ``app.state`` (set up in ``main.create_app``);
``get_current_user_id`` is what protected routes in other services use to
turn a Bearer token into a user id.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.errors import TokenError
from auth.jwt import TokenService
from auth.service import AuthService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.services.auth


def get_token_service(request: Request) -> TokenService:
    return request.app.state.services.tokens


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Extract and verify the Bearer token, returning the authenticated
    user id.  Every rejection reason maps to the same 401.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token",
        )
    try:
        claims = tokens.verify(credentials.credentials)
    except TokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return claims.subject
