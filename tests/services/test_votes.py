# tests/services/test_votes.py
"""Tests for the vote reconciler and its SQL store."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from quorum.core.errors import AuthRequired, AuthzDenied, NotFound, StoreError
from quorum.models import AnswerVote, QuestionVote
from quorum.services.session import Identity, Role, SessionContext
from quorum.services.votes import (
    SqlVoteStore,
    VoteAction,
    VoteDirection,
    VoteReconciler,
    VoteTarget,
    get_reconciler,
    plan_vote,
)
from tests.conftest import session_for

UP = VoteDirection.UP
DOWN = VoteDirection.DOWN


class InMemoryVoteStore:
    """Vote store keeping votes and counters in dictionaries."""

    def __init__(self, counters: dict[int, int] | None = None) -> None:
        self.votes: dict[tuple[int, int], VoteDirection] = {}
        self.counters = dict(counters or {1: 0})
        self.calls: list[str] = []

    def find_vote(self, target_id, user_id):
        self.calls.append("find_vote")
        return self.votes.get((target_id, user_id))

    def create_vote(self, target_id, user_id, direction):
        self.calls.append("create_vote")
        self.votes[(target_id, user_id)] = direction

    def update_vote(self, target_id, user_id, direction):
        self.calls.append("update_vote")
        self.votes[(target_id, user_id)] = direction

    def delete_vote(self, target_id, user_id):
        self.calls.append("delete_vote")
        del self.votes[(target_id, user_id)]

    def get_counter(self, target_id):
        self.calls.append("get_counter")
        return self.counters[target_id]

    def adjust_counter(self, target_id, delta):
        self.calls.append("adjust_counter")
        self.counters[target_id] += delta


@pytest.fixture()
def member() -> SessionContext:
    return SessionContext(Identity(id=7, username="alice", role=Role.USER))


@pytest.mark.parametrize(
    ("prior", "requested", "action", "delta", "new_vote"),
    [
        (None, UP, VoteAction.CREATED, 1, UP),
        (None, DOWN, VoteAction.CREATED, -1, DOWN),
        (UP, UP, VoteAction.DELETED, -1, None),
        (DOWN, DOWN, VoteAction.DELETED, 1, None),
        (UP, DOWN, VoteAction.UPDATED, -2, DOWN),
        (DOWN, UP, VoteAction.UPDATED, 2, UP),
    ],
)
def test_plan_vote_decision_table(prior, requested, action, delta, new_vote) -> None:
    plan = plan_vote(prior, requested)
    assert plan.action is action
    assert plan.delta == delta
    assert plan.new_vote == new_vote


@pytest.mark.parametrize(
    ("prior", "requested", "expected_call"),
    [
        (None, UP, "create_vote"),
        (UP, UP, "delete_vote"),
        (UP, DOWN, "update_vote"),
    ],
)
def test_apply_vote_issues_one_mutation_then_one_counter_write(
    member, prior, requested, expected_call
) -> None:
    store = InMemoryVoteStore({1: 5})
    if prior is not None:
        store.votes[(1, 7)] = prior

    VoteReconciler(store).apply_vote(1, member, requested, prior_vote=prior, prior_count=5)

    assert store.calls == [expected_call, "adjust_counter"]


def test_upvote_then_repeat_returns_to_baseline(member) -> None:
    store = InMemoryVoteStore({1: 3})
    reconciler = VoteReconciler(store)

    first = reconciler.apply_vote(1, member, UP)
    assert (first.user_vote, first.vote_count) == (UP, 4)

    second = reconciler.apply_vote(1, member, UP)
    assert (second.user_vote, second.vote_count) == (None, 3)
    assert store.votes == {}


def test_switching_up_to_down_moves_count_by_two(member) -> None:
    store = InMemoryVoteStore({1: 0})
    reconciler = VoteReconciler(store)

    first = reconciler.apply_vote(1, member, UP)
    outcome = reconciler.apply_vote(1, member, DOWN)

    assert outcome.user_vote is DOWN
    assert outcome.delta == -2
    assert outcome.vote_count == first.vote_count - 2 == -1
    assert store.counters[1] == -1


def test_identical_clicks_alternate_vote_state(member) -> None:
    reconciler = VoteReconciler(InMemoryVoteStore())
    states = [reconciler.apply_vote(1, member, UP).user_vote for _ in range(3)]
    assert states == [UP, None, UP]


def test_full_cycle_of_opposite_votes_returns_to_initial_state(member) -> None:
    store = InMemoryVoteStore({1: 10})
    reconciler = VoteReconciler(store)

    up = reconciler.apply_vote(1, member, UP)
    assert (up.vote_count, up.user_vote) == (11, UP)
    down = reconciler.apply_vote(1, member, DOWN)
    assert (down.vote_count, down.user_vote) == (9, DOWN)
    cleared = reconciler.apply_vote(1, member, DOWN)
    assert (cleared.vote_count, cleared.user_vote) == (10, None)
    assert store.counters[1] == 10
    assert store.votes == {}


def test_count_is_derived_from_supplied_prior_count(member) -> None:
    store = InMemoryVoteStore({1: 100})
    outcome = VoteReconciler(store).apply_vote(1, member, UP, prior_vote=None, prior_count=10)
    assert outcome.vote_count == 11
    assert "get_counter" not in store.calls


def test_guest_vote_fails_without_store_calls() -> None:
    store = MagicMock()
    with pytest.raises(AuthRequired):
        VoteReconciler(store).apply_vote(1, SessionContext(), UP)
    assert store.mock_calls == []


def test_banned_member_cannot_vote() -> None:
    store = MagicMock()
    banned = SessionContext(Identity(id=3, username="mallory", role=Role.BANNED))
    with pytest.raises(AuthzDenied):
        VoteReconciler(store).apply_vote(1, banned, DOWN)
    assert store.mock_calls == []


def test_store_failure_after_vote_write_keeps_vote(member) -> None:
    store = InMemoryVoteStore({1: 0})

    def broken_counter(target_id, delta):
        raise StoreError()

    store.adjust_counter = broken_counter
    with pytest.raises(StoreError):
        VoteReconciler(store).apply_vote(1, member, UP)
    # No rollback of the first write.
    assert store.votes == {(1, 7): UP}
    assert store.counters[1] == 0


def test_sql_question_vote_cycle(db_session, test_question, other_user) -> None:
    session = session_for(other_user)
    reconciler = get_reconciler(db_session, VoteTarget.QUESTION)

    created = reconciler.apply_vote(test_question.id, session, UP)
    assert created.action is VoteAction.CREATED
    db_session.refresh(test_question)
    assert test_question.vote_count == 1

    switched = reconciler.apply_vote(test_question.id, session, DOWN)
    assert switched.action is VoteAction.UPDATED
    assert switched.vote_count == -1
    vote = db_session.get(QuestionVote, (test_question.id, other_user.id))
    assert vote.vote_type == "down"

    removed = reconciler.apply_vote(test_question.id, session, DOWN)
    assert removed.action is VoteAction.DELETED
    db_session.refresh(test_question)
    assert test_question.vote_count == 0
    assert db_session.get(QuestionVote, (test_question.id, other_user.id)) is None


def test_sql_answer_votes_are_separate_from_question_votes(
    db_session, test_question, test_answer, test_user
) -> None:
    session = session_for(test_user)
    get_reconciler(db_session, VoteTarget.ANSWER).apply_vote(test_answer.id, session, UP)

    db_session.refresh(test_answer)
    db_session.refresh(test_question)
    assert test_answer.vote_count == 1
    assert test_question.vote_count == 0
    assert db_session.get(AnswerVote, (test_answer.id, test_user.id)).vote_type == "up"


def test_sql_store_missing_target_raises_not_found(db_session, test_user) -> None:
    with pytest.raises(NotFound):
        get_reconciler(db_session, VoteTarget.QUESTION).apply_vote(
            999, session_for(test_user), UP
        )


def test_sql_find_votes_returns_only_member_votes(
    db_session, make_question, test_user, other_user
) -> None:
    first = make_question(test_user)
    second = make_question(test_user)
    reconciler = get_reconciler(db_session, VoteTarget.QUESTION)
    reconciler.apply_vote(first.id, session_for(other_user), DOWN)
    reconciler.apply_vote(second.id, session_for(test_user), UP)

    store = SqlVoteStore(db_session, VoteTarget.QUESTION)
    assert store.find_votes([first.id, second.id], other_user.id) == {first.id: DOWN}
    assert store.find_votes([], other_user.id) == {}


def test_sql_store_wraps_driver_errors() -> None:
    db = MagicMock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))
    store = SqlVoteStore(db, VoteTarget.QUESTION)
    with pytest.raises(StoreError):
        store.find_vote(1, 7)
