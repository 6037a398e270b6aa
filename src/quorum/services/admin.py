"""Admin dashboard operations: site stats, moderation lists and announcements."""
from __future__ import annotations

import logging
from datetime import datetime, time, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quorum.core.errors import NotFound
from quorum.core.settings import settings
from quorum.db.time import utcnow
from quorum.models import Announcement, Answer, Question, User
from quorum.schemas.admin import AdminAnswer, AdminQuestion, AdminStats
from quorum.schemas.question import QuestionUpdate
from quorum.services.answers import get_answer_or_404, remove_answer
from quorum.services.questions import apply_question_changes, get_question_or_404

logger = logging.getLogger(__name__)


def _count(db: Session, column, *conditions) -> int:
    return int(db.execute(select(func.count(column)).where(*conditions)).scalar_one())


def start_of_today(now: datetime | None = None) -> datetime:
    """Midnight UTC of the current day."""
    now = now or utcnow()
    return datetime.combine(now.astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)


def site_stats(db: Session, *, now: datetime | None = None) -> AdminStats:
    return AdminStats(
        total_users=_count(db, User.id),
        total_questions=_count(db, Question.id),
        total_answers=_count(db, Answer.id),
        today_questions=_count(db, Question.id, Question.created_at >= start_of_today(now)),
    )


def recent_users(db: Session, limit: int | None = None) -> list[User]:
    return list(
        db.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(limit or settings.admin_list_limit)
        ).scalars()
    )


def recent_questions(db: Session, limit: int | None = None) -> list[AdminQuestion]:
    questions = (
        db.execute(
            select(Question)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .limit(limit or settings.admin_list_limit)
        )
        .unique()
        .scalars()
    )
    return [
        AdminQuestion(
            id=question.id,
            title=question.title,
            author_username=question.author.username if question.author else None,
            vote_count=question.vote_count,
            answer_count=question.answer_count,
            created_at=question.created_at,
        )
        for question in questions
    ]


def recent_answers(db: Session, limit: int | None = None) -> list[AdminAnswer]:
    rows = db.execute(
        select(Answer, Question.title)
        .join(Question, Question.id == Answer.question_id)
        .order_by(Answer.created_at.desc(), Answer.id.desc())
        .limit(limit or settings.admin_list_limit)
    ).unique()
    return [
        AdminAnswer(
            id=answer.id,
            question_id=answer.question_id,
            question_title=title,
            content=answer.content,
            author_username=answer.author.username if answer.author else None,
            vote_count=answer.vote_count,
            is_accepted=answer.is_accepted,
            created_at=answer.created_at,
        )
        for answer, title in rows
    ]


def edit_question(db: Session, question_id: int, data: QuestionUpdate) -> Question:
    """Edit any question regardless of author."""
    question = get_question_or_404(db, question_id)
    apply_question_changes(question, data)
    db.flush()
    return question


def purge_question(db: Session, question_id: int) -> None:
    """Delete any question together with its answers and votes."""
    question = get_question_or_404(db, question_id)
    db.delete(question)
    db.flush()
    logger.info("Question %s removed from the admin dashboard", question_id)


def purge_answer(db: Session, answer_id: int) -> int:
    answer = get_answer_or_404(db, answer_id)
    question_id = answer.question_id
    remove_answer(db, answer)
    logger.info("Answer %s removed from the admin dashboard", answer_id)
    return question_id


def list_announcements(db: Session, *, active_only: bool = False) -> list[Announcement]:
    stmt = select(Announcement)
    if active_only:
        stmt = stmt.where(Announcement.is_active.is_(True))
    stmt = stmt.order_by(Announcement.created_at.desc(), Announcement.id.desc())
    return list(db.execute(stmt).scalars())


def create_announcement(
    db: Session, *, title: str, body: str, author_id: int | None = None
) -> Announcement:
    announcement = Announcement(title=title.strip(), body=body.strip(), author_id=author_id)
    db.add(announcement)
    db.flush()
    return announcement


def _get_announcement(db: Session, announcement_id: int) -> Announcement:
    announcement = db.get(Announcement, announcement_id)
    if announcement is None:
        raise NotFound("Announcement not found")
    return announcement


def toggle_announcement(db: Session, announcement_id: int) -> Announcement:
    """Flip an announcement between active and hidden."""
    announcement = _get_announcement(db, announcement_id)
    announcement.is_active = not announcement.is_active
    db.flush()
    return announcement


def delete_announcement(db: Session, announcement_id: int) -> None:
    db.delete(_get_announcement(db, announcement_id))
    db.flush()
