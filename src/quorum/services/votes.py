"""Vote reconciliation for questions and answers.

A member holds at most one vote per target. Clicking a direction either
creates that vote, switches an opposite vote, or removes an identical one,
and the target's denormalized ``vote_count`` is moved by the matching delta:

    prior  requested  action   delta
    none   up         create   +1
    none   down       create   -1
    up     up         delete   -1
    down   down       delete   +1
    up     down       update   -2
    down   up         update   +2

The vote row is written before the counter. The new count is derived from
the prior count plus the delta; the authoritative sum is never re-read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Final, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quorum.core.errors import NotFound, StoreError
from quorum.models import Answer, AnswerVote, Question, QuestionVote
from quorum.services.authz import ensure_active
from quorum.services.session import SessionContext

logger = logging.getLogger(__name__)


class VoteDirection(StrEnum):
    UP = "up"
    DOWN = "down"

    @property
    def weight(self) -> int:
        return 1 if self is VoteDirection.UP else -1


class VoteAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class VoteTarget(StrEnum):
    QUESTION = "question"
    ANSWER = "answer"


@dataclass(frozen=True)
class VotePlan:
    action: VoteAction
    delta: int
    new_vote: VoteDirection | None


@dataclass(frozen=True)
class VoteOutcome:
    """Result reported back to the caller after both writes complete."""

    vote_count: int
    user_vote: VoteDirection | None
    delta: int
    action: VoteAction


def plan_vote(prior: VoteDirection | None, requested: VoteDirection) -> VotePlan:
    """Return the store action and counter delta for a click."""
    if prior is None:
        return VotePlan(VoteAction.CREATED, requested.weight, requested)
    if prior is requested:
        return VotePlan(VoteAction.DELETED, -prior.weight, None)
    return VotePlan(VoteAction.UPDATED, requested.weight - prior.weight, requested)


class VoteStore(Protocol):
    """Data-store operations the reconciler depends on."""

    def find_vote(self, target_id: int, user_id: int) -> VoteDirection | None: ...

    def create_vote(self, target_id: int, user_id: int, direction: VoteDirection) -> None: ...

    def update_vote(self, target_id: int, user_id: int, direction: VoteDirection) -> None: ...

    def delete_vote(self, target_id: int, user_id: int) -> None: ...

    def get_counter(self, target_id: int) -> int: ...

    def adjust_counter(self, target_id: int, delta: int) -> None: ...


class _Unknown:
    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN: Final = _Unknown()


class VoteReconciler:
    """Converges stored vote state with the direction a member clicked."""

    def __init__(self, store: VoteStore) -> None:
        self._store = store

    def apply_vote(
        self,
        target_id: int,
        session: SessionContext,
        requested: VoteDirection,
        *,
        prior_vote: VoteDirection | None | _Unknown = UNKNOWN,
        prior_count: int | None = None,
    ) -> VoteOutcome:
        """Apply one vote click for the session's identity.

        Args:
            target_id: Question or answer identifier.
            session: Request context; must hold a non-banned identity.
            requested: Direction that was clicked.
            prior_vote: Vote the caller already knows about. Looked up in the
                store when omitted.
            prior_count: Counter value the caller already displays. Read from
                the store when omitted.

        Raises:
            AuthRequired: No identity; nothing is written.
            AuthzDenied: Identity is banned; nothing is written.
            StoreError: A store call failed. Earlier writes are kept.
        """
        identity = ensure_active(session)
        requested = VoteDirection(requested)

        if isinstance(prior_vote, _Unknown):
            prior_vote = self._store.find_vote(target_id, identity.id)
        if prior_count is None:
            prior_count = self._store.get_counter(target_id)

        plan = plan_vote(prior_vote, requested)
        if plan.action is VoteAction.CREATED:
            self._store.create_vote(target_id, identity.id, requested)
        elif plan.action is VoteAction.DELETED:
            self._store.delete_vote(target_id, identity.id)
        else:
            self._store.update_vote(target_id, identity.id, requested)

        self._store.adjust_counter(target_id, plan.delta)

        logger.debug(
            "Vote %s on %s by user %s (delta %+d)",
            plan.action,
            target_id,
            identity.id,
            plan.delta,
        )
        return VoteOutcome(
            vote_count=prior_count + plan.delta,
            user_vote=plan.new_vote,
            delta=plan.delta,
            action=plan.action,
        )


class SqlVoteStore:
    """SQLAlchemy-backed :class:`VoteStore` for one kind of target.

    The counter is moved with an in-database increment and shares the
    session's unit of work with the vote row, so a commit lands both or
    neither.
    """

    _MODELS = {
        VoteTarget.QUESTION: (Question, QuestionVote, "question_id"),
        VoteTarget.ANSWER: (Answer, AnswerVote, "answer_id"),
    }

    def __init__(self, db: Session, target: VoteTarget) -> None:
        self.db = db
        self.target = VoteTarget(target)
        self._target_model, self._vote_model, self._fk = self._MODELS[self.target]

    def _vote_query(self, target_id: int, user_id: int):
        return select(self._vote_model).where(
            getattr(self._vote_model, self._fk) == target_id,
            self._vote_model.user_id == user_id,
        )

    def _fail(self, operation: str, err: SQLAlchemyError) -> StoreError:
        logger.error("Vote store %s failed for %s: %s", operation, self.target, err)
        return StoreError()

    def find_vote(self, target_id: int, user_id: int) -> VoteDirection | None:
        try:
            vote = self.db.execute(self._vote_query(target_id, user_id)).scalars().first()
        except SQLAlchemyError as err:
            raise self._fail("find_vote", err) from err
        return VoteDirection(vote.vote_type) if vote else None

    def find_votes(self, target_ids: list[int], user_id: int) -> dict[int, VoteDirection]:
        """Return the member's votes for many targets keyed by target id."""
        if not target_ids:
            return {}
        fk_column = getattr(self._vote_model, self._fk)
        try:
            rows = self.db.execute(
                select(fk_column, self._vote_model.vote_type).where(
                    self._vote_model.user_id == user_id,
                    fk_column.in_(target_ids),
                )
            ).all()
        except SQLAlchemyError as err:
            raise self._fail("find_votes", err) from err
        return {target_id: VoteDirection(vote_type) for target_id, vote_type in rows}

    def create_vote(self, target_id: int, user_id: int, direction: VoteDirection) -> None:
        vote = self._vote_model(user_id=user_id, vote_type=str(direction))
        setattr(vote, self._fk, target_id)
        try:
            self.db.add(vote)
            self.db.flush()
        except SQLAlchemyError as err:
            raise self._fail("create_vote", err) from err

    def update_vote(self, target_id: int, user_id: int, direction: VoteDirection) -> None:
        try:
            vote = self.db.execute(self._vote_query(target_id, user_id)).scalars().first()
            if vote is None:
                raise StoreError("Vote changed concurrently. Please try again.")
            vote.vote_type = str(direction)
            self.db.flush()
        except SQLAlchemyError as err:
            raise self._fail("update_vote", err) from err

    def delete_vote(self, target_id: int, user_id: int) -> None:
        try:
            vote = self.db.execute(self._vote_query(target_id, user_id)).scalars().first()
            if vote is not None:
                self.db.delete(vote)
                self.db.flush()
        except SQLAlchemyError as err:
            raise self._fail("delete_vote", err) from err

    def get_counter(self, target_id: int) -> int:
        try:
            count = self.db.execute(
                select(self._target_model.vote_count).where(self._target_model.id == target_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as err:
            raise self._fail("get_counter", err) from err
        if count is None:
            raise NotFound(f"{self.target.capitalize()} not found")
        return int(count)

    def adjust_counter(self, target_id: int, delta: int) -> None:
        try:
            self.db.execute(
                update(self._target_model)
                .where(self._target_model.id == target_id)
                .values(vote_count=self._target_model.vote_count + delta)
            )
            self.db.flush()
        except SQLAlchemyError as err:
            raise self._fail("adjust_counter", err) from err


def get_reconciler(db: Session, target: VoteTarget) -> VoteReconciler:
    """Return a reconciler bound to the SQL store for ``target``."""
    return VoteReconciler(SqlVoteStore(db, target))
