# tests/v1/test_admin.py
"""Tests for the admin dashboard gates and operations."""

import pytest
from fastapi import status

from quorum.core.settings import settings
from quorum.models import User
from quorum.services.admin_session import SESSION_ISSUED_KEY
from quorum.services.kvstore import KeyValueStore


@pytest.fixture()
def admin_session(client) -> dict[str, str]:
    """Log in through the shared credential pair and return the session header."""
    response = client.post(
        "/api/v1/admin/login",
        json={"username": settings.admin_username, "password": settings.admin_password},
    )
    assert response.status_code == status.HTTP_200_OK
    return {"X-Admin-Session": response.json()["session_id"]}


def test_login_grants_session(client, admin_session) -> None:
    response = client.get("/api/v1/admin/session", headers=admin_session)
    assert response.json() == {"state": "valid"}


def test_login_with_wrong_password(client) -> None:
    response = client.post(
        "/api/v1/admin/login", json={"username": settings.admin_username, "password": "guess"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid admin credentials"


def test_failed_login_keeps_existing_session(client, admin_session) -> None:
    client.post(
        "/api/v1/admin/login",
        json={"username": "admin", "password": "wrong"},
        headers=admin_session,
    )
    assert client.get("/api/v1/admin/session", headers=admin_session).json() == {"state": "valid"}


def test_session_without_header_is_absent(client) -> None:
    assert client.get("/api/v1/admin/session").json() == {"state": "absent"}


def test_expired_session_is_rejected_and_cleared(client, admin_session) -> None:
    namespace = KeyValueStore(redis_url="").namespace(admin_session["X-Admin-Session"])
    issued = int(namespace.get(SESSION_ISSUED_KEY))
    namespace.set(SESSION_ISSUED_KEY, str(issued - settings.admin_session_ttl_ms - 1))

    response = client.get("/api/v1/admin/stats", headers=admin_session)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Admin session expired"
    assert client.get("/api/v1/admin/session", headers=admin_session).json() == {"state": "absent"}


def test_logout_revokes_session(client, admin_session) -> None:
    client.post("/api/v1/admin/logout", headers=admin_session)
    response = client.get("/api/v1/admin/stats", headers=admin_session)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_routes_reject_callers_without_either_gate(client) -> None:
    response = client.get("/api/v1/admin/stats")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_member_without_session_is_forbidden(client, auth_token) -> None:
    response = client.get("/api/v1/admin/users", headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_unknown_session_id_is_not_admitted(client) -> None:
    response = client.get("/api/v1/admin/stats", headers={"X-Admin-Session": "made-up"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_admin_role_passes_without_session(client, admin_auth_token, test_question) -> None:
    response = client.get("/api/v1/admin/stats", headers=admin_auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total_questions"] == 1
    assert response.json()["total_users"] == 2


def test_session_gate_lists_content(client, admin_session, test_question, test_answer) -> None:
    users = client.get("/api/v1/admin/users", headers=admin_session).json()
    questions = client.get("/api/v1/admin/questions", headers=admin_session).json()
    answers = client.get("/api/v1/admin/answers", headers=admin_session).json()

    assert {user["username"] for user in users} == {"alice", "bob"}
    assert users[0]["username"] == "bob"
    assert questions[0]["author_username"] == "alice"
    assert answers[0]["question_title"] == test_question.title
    assert answers[0]["author_username"] == "bob"


def test_ban_unban_and_promote(client, db_session, admin_session, other_user) -> None:
    banned = client.post(f"/api/v1/admin/users/{other_user.id}/ban", headers=admin_session)
    assert banned.json()["role"] == "banned"

    unbanned = client.post(f"/api/v1/admin/users/{other_user.id}/unban", headers=admin_session)
    assert unbanned.json()["role"] == "user"

    promoted = client.post(f"/api/v1/admin/users/{other_user.id}/promote", headers=admin_session)
    assert promoted.json()["role"] == "admin"
    assert db_session.get(User, other_user.id).role == "admin"


def test_banned_member_loses_write_access(client, admin_session, other_user, other_auth_token, test_question) -> None:
    client.post(f"/api/v1/admin/users/{other_user.id}/ban", headers=admin_session)
    response = client.post(
        f"/api/v1/votes/questions/{test_question.id}",
        json={"direction": "up"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_ban_missing_user(client, admin_session) -> None:
    response = client.post("/api/v1/admin/users/9999/ban", headers=admin_session)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_admin_edits_and_deletes_question(client, admin_session, test_question) -> None:
    edited = client.patch(
        f"/api/v1/admin/questions/{test_question.id}",
        json={"title": "Edited by the moderators"},
        headers=admin_session,
    )
    assert edited.status_code == status.HTTP_200_OK
    assert edited.json()["title"] == "Edited by the moderators"

    deleted = client.delete(f"/api/v1/admin/questions/{test_question.id}", headers=admin_session)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/questions/{test_question.id}").status_code == status.HTTP_404_NOT_FOUND


def test_admin_deletes_answer(client, admin_session, test_question, test_answer) -> None:
    response = client.delete(f"/api/v1/admin/answers/{test_answer.id}", headers=admin_session)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/questions/{test_question.id}/answers").json() == []


def test_announcement_lifecycle(client, admin_session, admin_auth_token, admin_user) -> None:
    via_session = client.post(
        "/api/v1/admin/announcements",
        json={"title": "Maintenance", "body": "Down for an hour on Sunday."},
        headers=admin_session,
    )
    assert via_session.status_code == status.HTTP_201_CREATED
    assert via_session.json()["author_id"] is None

    via_role = client.post(
        "/api/v1/admin/announcements",
        json={"title": "Welcome", "body": "Say hello to the new moderators."},
        headers=admin_auth_token,
    )
    assert via_role.json()["author_id"] == admin_user.id

    hidden_id = via_session.json()["id"]
    toggled = client.post(f"/api/v1/admin/announcements/{hidden_id}/toggle", headers=admin_session)
    assert toggled.json()["is_active"] is False

    public = client.get("/api/v1/announcements").json()
    assert [item["title"] for item in public] == ["Welcome"]
    assert len(client.get("/api/v1/admin/announcements", headers=admin_session).json()) == 2

    removed = client.delete(f"/api/v1/admin/announcements/{hidden_id}", headers=admin_session)
    assert removed.status_code == status.HTTP_204_NO_CONTENT
    missing = client.post(f"/api/v1/admin/announcements/{hidden_id}/toggle", headers=admin_session)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_stale_login_token_does_not_block_admin_session(client, admin_session) -> None:
    headers = {**admin_session, "Authorization": "Bearer not-a-jwt"}
    response = client.get("/api/v1/admin/stats", headers=headers)
    assert response.status_code == status.HTTP_200_OK


def test_stale_login_token_without_session_is_unauthorized(client) -> None:
    response = client.get("/api/v1/admin/stats", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
