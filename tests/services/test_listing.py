# tests/services/test_listing.py
"""Tests for question listings and answer ordering."""

from quorum.services.listing import QuestionListing
from quorum.services.session import SessionContext
from quorum.services.votes import VoteDirection, VoteTarget, get_reconciler
from tests.conftest import session_for


def test_unanswered_returns_only_zero_answer_questions_newest_first(
    db_session, make_question, test_user
) -> None:
    oldest = make_question(test_user, minutes=1)
    make_question(test_user, minutes=2, answer_count=3)
    newest = make_question(test_user, minutes=3)

    page = QuestionListing(db_session).query(SessionContext(), sort="unanswered")

    assert [item.id for item in page.items] == [newest.id, oldest.id]
    assert all(item.answer_count == 0 for item in page.items)
    assert page.total == 2


def test_newest_and_unknown_sort_share_ordering(db_session, make_question, test_user) -> None:
    first = make_question(test_user, minutes=1)
    second = make_question(test_user, minutes=2)
    listing = QuestionListing(db_session)

    newest = listing.query(SessionContext(), sort="newest")
    fallback = listing.query(SessionContext(), sort="trending")

    assert [item.id for item in newest.items] == [second.id, first.id]
    assert [item.id for item in fallback.items] == [second.id, first.id]


def test_most_voted_orders_by_vote_count(db_session, make_question, test_user) -> None:
    low = make_question(test_user, minutes=3, vote_count=1)
    high = make_question(test_user, minutes=1, vote_count=7)
    tied_older = make_question(test_user, minutes=2, vote_count=1)

    page = QuestionListing(db_session).query(SessionContext(), sort="most-voted")

    assert [item.id for item in page.items] == [high.id, low.id, tied_older.id]


def test_search_matches_title_description_or_exact_tag(db_session, make_question, test_user) -> None:
    by_title = make_question(test_user, title="Sorting dictionaries by value quickly")
    by_body = make_question(test_user, description="My generator keeps SORTING things oddly.")
    by_tag = make_question(test_user, tags=["sorting"])
    make_question(test_user, tags=["sort"], title="Unrelated question about lists")

    page = QuestionListing(db_session).query(SessionContext(), search="sorting")

    assert {item.id for item in page.items} == {by_title.id, by_body.id, by_tag.id}
    assert page.total == 3


def test_pagination_reports_total(db_session, make_question, test_user) -> None:
    for minute in range(5):
        make_question(test_user, minutes=minute)

    page = QuestionListing(db_session).query(SessionContext(), page=2, page_size=2)

    assert page.total == 5
    assert page.page == 2
    assert len(page.items) == 2


def test_guest_items_have_no_vote_annotation(db_session, test_question) -> None:
    page = QuestionListing(db_session).query(SessionContext())
    dumped = page.items[0].model_dump(exclude_unset=True)
    assert "user_vote" not in dumped
    assert dumped["author"]["username"] == "alice"


def test_member_items_carry_vote_state(db_session, make_question, test_user, other_user) -> None:
    voted = make_question(test_user, minutes=2)
    untouched = make_question(test_user, minutes=1)
    get_reconciler(db_session, VoteTarget.QUESTION).apply_vote(
        voted.id, session_for(other_user), VoteDirection.DOWN
    )

    page = QuestionListing(db_session).query(session_for(other_user))
    votes = {item.id: item.model_dump(exclude_unset=True)["user_vote"] for item in page.items}

    assert votes == {voted.id: "down", untouched.id: None}


def test_answers_accepted_first_then_votes_then_oldest(
    db_session, test_question, make_answer, test_user, other_user
) -> None:
    first = make_answer(test_question, other_user, "First answer")
    second = make_answer(test_question, other_user, "Second answer")
    accepted = make_answer(test_question, other_user, "Accepted answer")
    accepted.is_accepted = True
    second.vote_count = 4
    db_session.flush()

    answers = QuestionListing(db_session).answers_for(test_question.id, session_for(test_user))

    assert [answer.id for answer in answers] == [accepted.id, second.id, first.id]
    assert all(answer.user_vote is None for answer in answers)
