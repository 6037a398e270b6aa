# src/quorum/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Quorum API."""

from fastapi import APIRouter

from quorum.db.session import commit_or_raise
from quorum.models import Answer
from quorum.schemas.vote import MyVoteResponse, VoteRequest, VoteResponse
from quorum.services.changes import QUESTIONS_TOPIC, answers_topic
from quorum.services.votes import SqlVoteStore, VoteDirection, VoteOutcome, VoteTarget, get_reconciler

from ..dependencies import ChangeFeedDep, CurrentUserDep, SessionContextDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


def _vote_response(outcome: VoteOutcome) -> VoteResponse:
    return VoteResponse(
        vote_count=outcome.vote_count,
        user_vote=str(outcome.user_vote) if outcome.user_vote else None,
        action=str(outcome.action),
    )


@router.post("/questions/{question_id}", response_model=VoteResponse)
async def vote_question(
    question_id: int,
    vote_data: VoteRequest,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> VoteResponse:
    """Cast, switch or remove the caller's vote on a question.

    Repeating the current direction removes the vote.
    """
    outcome = get_reconciler(db, VoteTarget.QUESTION).apply_vote(
        question_id, session, VoteDirection(vote_data.direction)
    )
    commit_or_raise(db)
    feed.publish(QUESTIONS_TOPIC, "voted")
    return _vote_response(outcome)


@router.post("/answers/{answer_id}", response_model=VoteResponse)
async def vote_answer(
    answer_id: int,
    vote_data: VoteRequest,
    db: SessionDep,
    session: SessionContextDep,
    feed: ChangeFeedDep,
) -> VoteResponse:
    """Cast, switch or remove the caller's vote on an answer."""
    outcome = get_reconciler(db, VoteTarget.ANSWER).apply_vote(
        answer_id, session, VoteDirection(vote_data.direction)
    )
    commit_or_raise(db)
    answer = db.get(Answer, answer_id)
    if answer is not None:
        feed.publish(answers_topic(answer.question_id), "voted")
    return _vote_response(outcome)


@router.get("/questions/{question_id}/my-vote", response_model=MyVoteResponse)
async def get_my_question_vote(
    question_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    """Get current user's vote on a specific question."""
    vote = SqlVoteStore(db, VoteTarget.QUESTION).find_vote(question_id, current_user.id)
    return MyVoteResponse(user_vote=str(vote) if vote else None)


@router.get("/answers/{answer_id}/my-vote", response_model=MyVoteResponse)
async def get_my_answer_vote(
    answer_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    vote = SqlVoteStore(db, VoteTarget.ANSWER).find_vote(answer_id, current_user.id)
    return MyVoteResponse(user_vote=str(vote) if vote else None)
