"""Answer lifecycle: posting, accepting and removing answers."""
from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from quorum.core.errors import AuthzDenied, NotFound
from quorum.models import Answer, Question
from quorum.services.authz import ensure_active, ensure_can_modify
from quorum.services.notifications import notify
from quorum.services.questions import get_question_or_404
from quorum.services.session import SessionContext

logger = logging.getLogger(__name__)


def get_answer_or_404(db: Session, answer_id: int) -> Answer:
    answer = db.get(Answer, answer_id)
    if answer is None:
        raise NotFound("Answer not found")
    return answer


def _bump_answer_count(db: Session, question_id: int, delta: int) -> None:
    db.execute(
        update(Question)
        .where(Question.id == question_id)
        .values(answer_count=Question.answer_count + delta)
    )


def create_answer(
    db: Session,
    session: SessionContext,
    question_id: int,
    content: str,
) -> Answer:
    """Post an answer and notify the question author."""
    identity = ensure_active(session)
    question = get_question_or_404(db, question_id)
    answer = Answer(question_id=question.id, content=content, author_id=identity.id)
    db.add(answer)
    _bump_answer_count(db, question.id, 1)
    notify(
        db,
        user_id=question.author_id,
        type_="answer",
        title="New answer",
        message=f"{identity.username} answered \"{question.title}\"",
        related_question_id=question.id,
        actor_id=identity.id,
    )
    db.flush()
    return answer


def toggle_accept(db: Session, session: SessionContext, answer_id: int) -> Answer:
    """Accept or unaccept an answer.

    Only the question author may do this. Accepting an answer clears any
    previously accepted answer on the same question.
    """
    identity = ensure_active(session)
    answer = get_answer_or_404(db, answer_id)
    question = get_question_or_404(db, answer.question_id)
    if identity.id != question.author_id:
        raise AuthzDenied("Only the question author can accept an answer")

    accept = not answer.is_accepted
    if accept:
        db.execute(
            update(Answer)
            .where(Answer.question_id == question.id, Answer.id != answer.id)
            .values(is_accepted=False)
        )
    answer.is_accepted = accept
    if accept:
        notify(
            db,
            user_id=answer.author_id,
            type_="accepted",
            title="Answer accepted",
            message=f"Your answer to \"{question.title}\" was accepted",
            related_question_id=question.id,
            actor_id=identity.id,
        )
    db.flush()
    return answer


def delete_answer(db: Session, session: SessionContext, answer_id: int) -> int:
    """Delete an answer (author or admin) and return its question id."""
    answer = get_answer_or_404(db, answer_id)
    identity = ensure_can_modify(session, answer.author_id)
    question_id = answer.question_id
    remove_answer(db, answer)
    logger.info("Answer %s deleted by user %s", answer_id, identity.id)
    return question_id


def remove_answer(db: Session, answer: Answer) -> None:
    """Delete an answer row and keep the question's answer counter in step."""
    question_id = answer.question_id
    db.delete(answer)
    _bump_answer_count(db, question_id, -1)
    db.flush()
