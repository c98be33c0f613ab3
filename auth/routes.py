"""
Auth API routes — register, login.
"""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from auth.dependencies import get_auth_service
from auth.service import AuthService

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class CredentialsRequest(BaseModel):
    username: str
    password: str


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: CredentialsRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, str]:
    """Register a new user."""
    await auth.register(req.username, req.password)
    return {"message": "User registered successfully"}


@router.post("/login", response_model=TokenResponse)
async def login(
    req: CredentialsRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, str]:
    """Login with username + password."""
    token = await auth.login(req.username, req.password)
    return {"token": token.value}
