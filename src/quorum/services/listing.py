"""Paginated question listings annotated with the viewer's votes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quorum.core.errors import StoreError
from quorum.core.settings import settings
from quorum.models import Answer, Question, QuestionTag
from quorum.schemas.question import AnswerOut, AuthorSummary, QuestionOut
from quorum.services.session import SessionContext
from quorum.services.votes import SqlVoteStore, VoteDirection, VoteTarget

logger = logging.getLogger(__name__)

SORT_NEWEST = "newest"
SORT_UNANSWERED = "unanswered"
SORT_MOST_VOTED = "most-voted"
SORT_KEYS = (SORT_NEWEST, SORT_UNANSWERED, SORT_MOST_VOTED)


@dataclass
class ListingPage:
    items: list[QuestionOut]
    total: int
    page: int
    page_size: int


def _author(obj: Question | Answer) -> AuthorSummary | None:
    return AuthorSummary.model_validate(obj.author) if obj.author is not None else None


def question_out(
    question: Question,
    *,
    annotate: bool = False,
    user_vote: VoteDirection | None = None,
) -> QuestionOut:
    """Build the response model; ``user_vote`` is only set when annotating."""
    data = {
        "id": question.id,
        "title": question.title,
        "description": question.description,
        "tags": question.tags,
        "author_id": question.author_id,
        "vote_count": question.vote_count,
        "view_count": question.view_count,
        "answer_count": question.answer_count,
        "created_at": question.created_at,
        "updated_at": question.updated_at,
        "author": _author(question),
    }
    if annotate:
        data["user_vote"] = str(user_vote) if user_vote else None
    return QuestionOut(**data)


def answer_out(
    answer: Answer,
    *,
    annotate: bool = False,
    user_vote: VoteDirection | None = None,
) -> AnswerOut:
    data = {
        "id": answer.id,
        "question_id": answer.question_id,
        "content": answer.content,
        "author_id": answer.author_id,
        "vote_count": answer.vote_count,
        "is_accepted": answer.is_accepted,
        "created_at": answer.created_at,
        "updated_at": answer.updated_at,
        "author": _author(answer),
    }
    if annotate:
        data["user_vote"] = str(user_vote) if user_vote else None
    return AnswerOut(**data)


class QuestionListing:
    """Composes search, sort and pagination into one query."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _conditions(search: str | None, sort: str) -> list:
        conditions = []
        term = (search or "").strip()
        if term:
            tag_match = select(QuestionTag.question_id).where(QuestionTag.tag == term.lower())
            conditions.append(
                or_(
                    Question.title.icontains(term, autoescape=True),
                    Question.description.icontains(term, autoescape=True),
                    Question.id.in_(tag_match),
                )
            )
        if sort == SORT_UNANSWERED:
            conditions.append(Question.answer_count == 0)
        return conditions

    def query(
        self,
        session: SessionContext,
        *,
        page: int = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort: str = SORT_NEWEST,
    ) -> ListingPage:
        """Return one page of questions.

        Unknown sort keys fall back to newest-first. Guests get no vote
        annotation at all; members get ``user_vote`` on every row.
        """
        page = max(page, 1)
        page_size = min(max(page_size or settings.questions_per_page, 1), settings.max_page_size)
        if sort not in SORT_KEYS:
            sort = SORT_NEWEST

        conditions = self._conditions(search, sort)
        stmt = select(Question).where(*conditions)
        if sort == SORT_MOST_VOTED:
            stmt = stmt.order_by(Question.vote_count.desc(), Question.created_at.desc())
        else:
            stmt = stmt.order_by(Question.created_at.desc())
        stmt = stmt.order_by(Question.id.desc())

        try:
            total = self.db.execute(
                select(func.count(Question.id)).where(*conditions)
            ).scalar_one()
            questions = list(
                self.db.execute(stmt.offset((page - 1) * page_size).limit(page_size))
                .unique()
                .scalars()
            )
        except SQLAlchemyError as err:
            logger.error("Question listing failed: %s", err)
            raise StoreError() from err

        identity = session.identity
        if identity is None:
            items = [question_out(question) for question in questions]
        else:
            votes = SqlVoteStore(self.db, VoteTarget.QUESTION).find_votes(
                [question.id for question in questions], identity.id
            )
            items = [
                question_out(question, annotate=True, user_vote=votes.get(question.id))
                for question in questions
            ]
        return ListingPage(items=items, total=int(total), page=page, page_size=page_size)

    def answers_for(self, question_id: int, session: SessionContext) -> list[AnswerOut]:
        """Answers for a question: accepted first, then by votes, then oldest."""
        try:
            answers = list(
                self.db.execute(
                    select(Answer)
                    .where(Answer.question_id == question_id)
                    .order_by(
                        Answer.is_accepted.desc(),
                        Answer.vote_count.desc(),
                        Answer.created_at.asc(),
                        Answer.id.asc(),
                    )
                )
                .unique()
                .scalars()
            )
        except SQLAlchemyError as err:
            logger.error("Answer listing failed for question %s: %s", question_id, err)
            raise StoreError() from err

        identity = session.identity
        if identity is None:
            return [answer_out(answer) for answer in answers]
        votes = SqlVoteStore(self.db, VoteTarget.ANSWER).find_votes(
            [answer.id for answer in answers], identity.id
        )
        return [
            answer_out(answer, annotate=True, user_vote=votes.get(answer.id)) for answer in answers
        ]
