# src/quorum/api/v1/endpoints/answers.py
"""Answer endpoints for the Quorum API."""

from fastapi import APIRouter, Response, status

from quorum.db.session import commit_or_raise
from quorum.schemas.question import AnswerOut
from quorum.services import answers as answer_service
from quorum.services.changes import QUESTIONS_TOPIC, answers_topic, notifications_topic
from quorum.services.listing import answer_out
from quorum.services.votes import SqlVoteStore, VoteTarget

from ..dependencies import ChangeFeedDep, SessionContextDep, SessionDep

router = APIRouter(prefix="/answers", tags=["answers"])


@router.post("/{answer_id}/accept", response_model=AnswerOut)
async def accept_answer(
    answer_id: int,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> AnswerOut:
    """Toggle the accepted mark; only the question author may do this."""
    answer = answer_service.toggle_accept(db, session, answer_id)
    commit_or_raise(db)
    feed.publish(answers_topic(answer.question_id), "updated")
    if answer.is_accepted and answer.author_id != session.identity.id:
        feed.publish(notifications_topic(answer.author_id), "created")
    vote = SqlVoteStore(db, VoteTarget.ANSWER).find_vote(answer.id, session.identity.id)
    return answer_out(answer, annotate=True, user_vote=vote)


@router.delete("/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> Response:
    question_id = answer_service.delete_answer(db, session, answer_id)
    commit_or_raise(db)
    feed.publish(answers_topic(question_id), "deleted")
    feed.publish(QUESTIONS_TOPIC, "updated")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
