# src/quorum/api/v1/endpoints/questions.py
"""Question endpoints for the Quorum API."""

from fastapi import APIRouter, Query, Response, status

from quorum.core.settings import settings
from quorum.db.session import commit_or_raise
from quorum.schemas.question import (
    AnswerCreate,
    AnswerOut,
    QuestionCreate,
    QuestionOut,
    QuestionPage,
    QuestionUpdate,
)
from quorum.services import answers as answer_service
from quorum.services import questions as question_service
from quorum.services.changes import QUESTIONS_TOPIC, answers_topic, notifications_topic
from quorum.services.listing import QuestionListing, answer_out, question_out
from quorum.services.session import SessionContext
from quorum.services.votes import SqlVoteStore, VoteTarget

from ..dependencies import ChangeFeedDep, SessionContextDep, SessionDep

router = APIRouter(prefix="/questions", tags=["questions"])


def _annotated(db, session: SessionContext, question) -> QuestionOut:
    identity = session.identity
    if identity is None:
        return question_out(question)
    vote = SqlVoteStore(db, VoteTarget.QUESTION).find_vote(question.id, identity.id)
    return question_out(question, annotate=True, user_vote=vote)


@router.get("", response_model=QuestionPage, response_model_exclude_unset=True)
async def list_questions(
    db: SessionDep,
    session: SessionContextDep,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=settings.max_page_size),
    q: str | None = Query(None, max_length=200),
    sort: str = Query("newest"),
) -> QuestionPage:
    """List questions with search, sort and pagination.

    Unknown sort keys fall back to newest first. ``user_vote`` is only
    included when the request is authenticated.
    """
    result = QuestionListing(db).query(
        session, page=page, page_size=page_size, search=q, sort=sort
    )
    return QuestionPage(
        items=result.items,
        total=result.total,
        page=result.page,
        page_size=result.page_size,
    )


@router.post("", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def ask_question(
    data: QuestionCreate,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> QuestionOut:
    question = question_service.create_question(db, session, data)
    commit_or_raise(db)
    feed.publish(QUESTIONS_TOPIC, "created")
    return question_out(question, annotate=True)


@router.get("/{question_id}", response_model=QuestionOut, response_model_exclude_unset=True)
async def get_question(question_id: int, db: SessionDep, session: SessionContextDep) -> QuestionOut:
    """Return a single question and count the view."""
    question = question_service.view_question(db, question_id)
    commit_or_raise(db)
    return _annotated(db, session, question)


@router.patch("/{question_id}", response_model=QuestionOut, response_model_exclude_unset=True)
async def edit_question(
    question_id: int,
    data: QuestionUpdate,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> QuestionOut:
    question = question_service.update_question(db, session, question_id, data)
    commit_or_raise(db)
    feed.publish(QUESTIONS_TOPIC, "updated")
    return _annotated(db, session, question)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> Response:
    question_service.delete_question(db, session, question_id)
    commit_or_raise(db)
    feed.publish(QUESTIONS_TOPIC, "deleted")
    feed.publish(answers_topic(question_id), "deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{question_id}/answers",
    response_model=list[AnswerOut],
    response_model_exclude_unset=True,
)
async def list_answers(question_id: int, db: SessionDep, session: SessionContextDep) -> list[AnswerOut]:
    """Answers ordered accepted first, then by votes, then oldest first."""
    question_service.get_question_or_404(db, question_id)
    return QuestionListing(db).answers_for(question_id, session)


@router.post(
    "/{question_id}/answers",
    response_model=AnswerOut,
    status_code=status.HTTP_201_CREATED,
)
async def post_answer(
    question_id: int,
    data: AnswerCreate,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> AnswerOut:
    answer = answer_service.create_answer(db, session, question_id, data.content)
    question_author_id = answer.question.author_id
    commit_or_raise(db)
    feed.publish(answers_topic(question_id), "created")
    feed.publish(QUESTIONS_TOPIC, "updated")
    if question_author_id != answer.author_id:
        feed.publish(notifications_topic(question_author_id), "created")
    return answer_out(answer, annotate=True)
