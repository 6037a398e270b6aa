# src/quorum/api/v1/endpoints/admin.py
"""Admin dashboard endpoints.

Every route except the session endpoints requires :func:`require_admin`: an
admin account, or a valid ``X-Admin-Session`` obtained from ``/admin/login``.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Response, status

from quorum.core.errors import AdminCredentialMismatch
from quorum.core.settings import settings
from quorum.db.session import commit_or_raise
from quorum.models.user import ROLE_ADMIN, ROLE_BANNED, ROLE_USER
from quorum.schemas.admin import (
    AdminAnswer,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminQuestion,
    AdminSessionStatus,
    AdminStats,
    AdminUser,
    AnnouncementCreate,
    AnnouncementOut,
)
from quorum.schemas.question import QuestionOut, QuestionUpdate
from quorum.services import admin as admin_service
from quorum.services import user_service
from quorum.services.admin_session import AdminGrant, AdminSessionGuard, AdminSessionState
from quorum.services.changes import ANNOUNCEMENTS_TOPIC, QUESTIONS_TOPIC, answers_topic
from quorum.services.listing import question_out

from ..dependencies import (
    AdminDep,
    AdminSessionHeader,
    ChangeFeedDep,
    KeyValueStoreDep,
    SessionDep,
)

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(
    credentials: AdminLoginRequest,
    store: KeyValueStoreDep,
    admin_session: AdminSessionHeader = None,
) -> AdminLoginResponse:
    """Check the dashboard credential pair and open an admin session.

    The returned ``session_id`` names the client's key namespace and must be
    sent back as ``X-Admin-Session``. A rejected attempt leaves any existing
    session untouched.
    """
    session_id = admin_session or secrets.token_urlsafe(24)
    guard = AdminSessionGuard(store.namespace(session_id))
    if guard.grant(credentials.username, credentials.password) is AdminGrant.DENIED:
        raise AdminCredentialMismatch()
    return AdminLoginResponse(
        session_id=session_id,
        expires_in_seconds=settings.admin_session_ttl_seconds,
    )


@router.post("/logout")
async def admin_logout(
    store: KeyValueStoreDep,
    admin_session: AdminSessionHeader = None,
) -> dict[str, str]:
    if admin_session:
        AdminSessionGuard(store.namespace(admin_session)).revoke()
    return {"status": "logged_out"}


@router.get("/session", response_model=AdminSessionStatus)
async def admin_session_status(
    store: KeyValueStoreDep,
    admin_session: AdminSessionHeader = None,
) -> AdminSessionStatus:
    """Report whether the presented admin session is valid, expired or absent."""
    if not admin_session:
        return AdminSessionStatus(state=AdminSessionState.ABSENT)
    return AdminSessionStatus(state=AdminSessionGuard(store.namespace(admin_session)).check())


@router.get("/stats", response_model=AdminStats)
async def get_stats(_: AdminDep, db: SessionDep) -> AdminStats:
    return admin_service.site_stats(db)


@router.get("/users", response_model=list[AdminUser])
async def list_users(_: AdminDep, db: SessionDep) -> list[AdminUser]:
    return [AdminUser.model_validate(user) for user in admin_service.recent_users(db)]


@router.get("/questions", response_model=list[AdminQuestion])
async def list_questions(_: AdminDep, db: SessionDep) -> list[AdminQuestion]:
    return admin_service.recent_questions(db)


@router.get("/answers", response_model=list[AdminAnswer])
async def list_answers(_: AdminDep, db: SessionDep) -> list[AdminAnswer]:
    return admin_service.recent_answers(db)


def _change_role(db, user_id: int, role: str, actor) -> AdminUser:
    user = user_service.set_role(db, user_id, role)
    commit_or_raise(db)
    logger.info("Role change for user %s made via %s gate", user_id, actor.source)
    return AdminUser.model_validate(user)


@router.post("/users/{user_id}/ban", response_model=AdminUser)
async def ban_user(user_id: int, actor: AdminDep, db: SessionDep) -> AdminUser:
    return _change_role(db, user_id, ROLE_BANNED, actor)


@router.post("/users/{user_id}/unban", response_model=AdminUser)
async def unban_user(user_id: int, actor: AdminDep, db: SessionDep) -> AdminUser:
    return _change_role(db, user_id, ROLE_USER, actor)


@router.post("/users/{user_id}/promote", response_model=AdminUser)
async def promote_user(user_id: int, actor: AdminDep, db: SessionDep) -> AdminUser:
    return _change_role(db, user_id, ROLE_ADMIN, actor)


@router.patch("/questions/{question_id}", response_model=QuestionOut)
async def edit_question(
    question_id: int,
    data: QuestionUpdate,
    _: AdminDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> QuestionOut:
    question = admin_service.edit_question(db, question_id, data)
    commit_or_raise(db)
    feed.publish(QUESTIONS_TOPIC, "updated")
    return question_out(question)


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    _: AdminDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> Response:
    admin_service.purge_question(db, question_id)
    commit_or_raise(db)
    feed.publish(QUESTIONS_TOPIC, "deleted")
    feed.publish(answers_topic(question_id), "deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/answers/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    _: AdminDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> Response:
    question_id = admin_service.purge_answer(db, answer_id)
    commit_or_raise(db)
    feed.publish(answers_topic(question_id), "deleted")
    feed.publish(QUESTIONS_TOPIC, "updated")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/announcements", response_model=list[AnnouncementOut])
async def list_announcements(_: AdminDep, db: SessionDep) -> list[AnnouncementOut]:
    """All announcements, including hidden ones."""
    return [AnnouncementOut.model_validate(item) for item in admin_service.list_announcements(db)]


@router.post(
    "/announcements",
    response_model=AnnouncementOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_announcement(
    data: AnnouncementCreate,
    actor: AdminDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> AnnouncementOut:
    announcement = admin_service.create_announcement(
        db, title=data.title, body=data.body, author_id=actor.author_id
    )
    commit_or_raise(db)
    feed.publish(ANNOUNCEMENTS_TOPIC, "created")
    return AnnouncementOut.model_validate(announcement)


@router.post("/announcements/{announcement_id}/toggle", response_model=AnnouncementOut)
async def toggle_announcement(
    announcement_id: int,
    _: AdminDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> AnnouncementOut:
    announcement = admin_service.toggle_announcement(db, announcement_id)
    commit_or_raise(db)
    feed.publish(ANNOUNCEMENTS_TOPIC, "updated")
    return AnnouncementOut.model_validate(announcement)


@router.delete("/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: int,
    _: AdminDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> Response:
    admin_service.delete_announcement(db, announcement_id)
    commit_or_raise(db)
    feed.publish(ANNOUNCEMENTS_TOPIC, "deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
