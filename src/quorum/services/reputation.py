"""Reputation tiers, the leaderboard, earned badges and a member's own posts."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quorum.core.settings import settings
from quorum.models import Answer, Question, User, UserBadge
from quorum.models.user import ROLE_BANNED
from quorum.schemas.user import BadgeResponse, ProfileResponse, UserAnswer

# Lower bounds, highest first.
REPUTATION_TIERS: tuple[tuple[int, str], ...] = (
    (2000, "legend"),
    (500, "expert"),
    (100, "trusted"),
    (15, "member"),
)
DEFAULT_TIER = "newcomer"


def tier_for(reputation: int) -> str:
    """Return the display tier for a reputation score."""
    for floor, name in REPUTATION_TIERS:
        if reputation >= floor:
            return name
    return DEFAULT_TIER


def profile_out(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        username=user.username,
        avatar_url=user.avatar_url,
        role=user.role,
        reputation=user.reputation,
        reputation_tier=tier_for(user.reputation),
        created_at=user.created_at,
    )


def leaderboard(db: Session, limit: int = 10) -> list[dict[str, object]]:
    """Members ranked by reputation, with their accepted answer counts.

    Banned members are left out. Ties keep the earlier sign-up first.
    """
    accepted = (
        select(Answer.author_id, func.count(Answer.id).label("accepted"))
        .where(Answer.is_accepted.is_(True))
        .group_by(Answer.author_id)
        .subquery()
    )
    rows = db.execute(
        select(User, func.coalesce(accepted.c.accepted, 0))
        .outerjoin(accepted, accepted.c.author_id == User.id)
        .where(User.role != ROLE_BANNED)
        .order_by(User.reputation.desc(), User.created_at.asc(), User.id.asc())
        .limit(limit)
    ).all()
    return [
        {
            "rank": rank,
            "id": user.id,
            "username": user.username,
            "avatar_url": user.avatar_url,
            "reputation": user.reputation,
            "reputation_tier": tier_for(user.reputation),
            "accepted_answers": int(accepted_count),
        }
        for rank, (user, accepted_count) in enumerate(rows, start=1)
    ]


def user_badges(db: Session, user_id: int, limit: int = 3) -> Sequence[UserBadge]:
    """Return the member's most recently earned badges."""
    return list(
        db.execute(
            select(UserBadge)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.earned_at.desc())
            .limit(limit)
        )
        .unique()
        .scalars()
    )


def badge_out(earned: UserBadge) -> BadgeResponse:
    return BadgeResponse(
        name=earned.badge.name,
        description=earned.badge.description,
        icon=earned.badge.icon,
        badge_type=earned.badge.badge_type,
        earned_at=earned.earned_at,
    )


def user_questions(db: Session, user_id: int, limit: int | None = None) -> list[Question]:
    """Questions asked by the member, newest first."""
    return list(
        db.execute(
            select(Question)
            .where(Question.author_id == user_id)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .limit(limit or settings.profile_content_limit)
        )
        .unique()
        .scalars()
    )


def user_answers(db: Session, user_id: int, limit: int | None = None) -> list[UserAnswer]:
    """Answers posted by the member with the title of each question, newest first."""
    rows = db.execute(
        select(Answer, Question.title)
        .join(Question, Question.id == Answer.question_id)
        .where(Answer.author_id == user_id)
        .order_by(Answer.created_at.desc(), Answer.id.desc())
        .limit(limit or settings.profile_content_limit)
    ).unique()
    return [
        UserAnswer(
            id=answer.id,
            question_id=answer.question_id,
            question_title=title,
            content=answer.content,
            vote_count=answer.vote_count,
            is_accepted=answer.is_accepted,
            created_at=answer.created_at,
        )
        for answer, title in rows
    ]
