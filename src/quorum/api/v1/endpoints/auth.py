# src/quorum/api/v1/endpoints/auth.py
"""Authentication endpoints for the Quorum API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from quorum.core.security import create_access_token
from quorum.db.session import commit_or_raise
from quorum.schemas.user import LoginRequest, ProfileResponse, SignupRequest, TokenResponse
from quorum.services import user_service
from quorum.services.reputation import profile_out

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, db: SessionDep) -> TokenResponse:
    """Register a member and sign them in."""
    user = user_service.create_user(db, data)
    commit_or_raise(db)
    return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: SessionDep) -> TokenResponse:
    user = user_service.authenticate(db, data.email, data.password)
    commit_or_raise(db)
    logger.info("User %s logged in", user.id)
    return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)


@router.get("/me", response_model=ProfileResponse)
async def read_me(current_user: CurrentUserDep) -> ProfileResponse:
    """Return the signed-in member's profile."""
    return profile_out(current_user)
