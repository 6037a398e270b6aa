"""Service-level helpers for asking, reading, editing and deleting questions."""
from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from quorum.core.errors import NotFound
from quorum.models import Question
from quorum.schemas.question import QuestionCreate, QuestionUpdate
from quorum.services.authz import ensure_active, ensure_can_modify
from quorum.services.session import SessionContext

logger = logging.getLogger(__name__)

__all__ = [
    "get_question_or_404",
    "create_question",
    "view_question",
    "update_question",
    "apply_question_changes",
    "delete_question",
]


def get_question_or_404(db: Session, question_id: int) -> Question:
    question = db.get(Question, question_id)
    if question is None:
        raise NotFound("Question not found")
    return question


def create_question(db: Session, session: SessionContext, data: QuestionCreate) -> Question:
    """Persist a new question authored by the session's identity."""
    identity = ensure_active(session)
    question = Question(
        title=data.title.strip(),
        description=data.description,
        author_id=identity.id,
    )
    question.tags = data.tags
    db.add(question)
    db.flush()
    logger.info("Question %s asked by user %s", question.id, identity.id)
    return question


def view_question(db: Session, question_id: int) -> Question:
    """Return a question and count the view."""
    question = get_question_or_404(db, question_id)
    db.execute(
        update(Question)
        .where(Question.id == question_id)
        .values(view_count=Question.view_count + 1)
    )
    db.flush()
    return question


def update_question(
    db: Session,
    session: SessionContext,
    question_id: int,
    data: QuestionUpdate,
) -> Question:
    """Apply a partial edit; only the author or an admin may edit."""
    question = get_question_or_404(db, question_id)
    ensure_can_modify(session, question.author_id)
    apply_question_changes(question, data)
    db.flush()
    return question


def apply_question_changes(question: Question, data: QuestionUpdate) -> None:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "title" in changes:
        question.title = changes["title"].strip()
    if "description" in changes:
        question.description = changes["description"]
    if "tags" in changes:
        question.tags = changes["tags"]


def delete_question(db: Session, session: SessionContext, question_id: int) -> None:
    """Delete a question with its answers and votes; author or admin only."""
    question = get_question_or_404(db, question_id)
    identity = ensure_can_modify(session, question.author_id)
    db.delete(question)
    db.flush()
    logger.info("Question %s deleted by user %s", question_id, identity.id)
