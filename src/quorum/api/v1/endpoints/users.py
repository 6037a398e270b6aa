# src/quorum/api/v1/endpoints/users.py
"""Member profile, badge and leaderboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from quorum.db.session import commit_or_raise
from quorum.schemas.question import QuestionOut
from quorum.schemas.user import (
    BadgeResponse,
    LeaderboardEntry,
    ProfileResponse,
    ProfileUpdate,
    UserAnswer,
)
from quorum.services import reputation, user_service
from quorum.services.listing import question_out

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    db: SessionDep,
    limit: int = Query(10, ge=1, le=50),
) -> list[LeaderboardEntry]:
    """Top members by reputation; banned members are not listed."""
    return [LeaderboardEntry(**row) for row in reputation.leaderboard(db, limit=limit)]


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    update_data: ProfileUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ProfileResponse:
    """Update the signed-in member's username or avatar."""
    user = user_service.update_profile(db, current_user, update_data)
    commit_or_raise(db)
    return reputation.profile_out(user)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: int, db: SessionDep) -> ProfileResponse:
    return reputation.profile_out(user_service.get_user(db, user_id))


@router.get("/{user_id}/badges", response_model=list[BadgeResponse])
async def get_badges(
    user_id: int,
    db: SessionDep,
    limit: int = Query(3, ge=1, le=50),
) -> list[BadgeResponse]:
    """Most recently earned badges, newest first."""
    user_service.get_user(db, user_id)
    return [reputation.badge_out(earned) for earned in reputation.user_badges(db, user_id, limit)]


@router.get(
    "/{user_id}/questions",
    response_model=list[QuestionOut],
    response_model_exclude_unset=True,
)
async def get_user_questions(user_id: int, db: SessionDep) -> list[QuestionOut]:
    """The member's most recent questions."""
    user_service.get_user(db, user_id)
    return [question_out(question) for question in reputation.user_questions(db, user_id)]


@router.get("/{user_id}/answers", response_model=list[UserAnswer])
async def get_user_answers(user_id: int, db: SessionDep) -> list[UserAnswer]:
    user_service.get_user(db, user_id)
    return reputation.user_answers(db, user_id)
