# src/quorum/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    announcements_router,
    answers_router,
    auth_router,
    changes_router,
    notifications_router,
    questions_router,
    users_router,
    votes_router,
)

__all__ = [
    "auth_router",
    "questions_router",
    "answers_router",
    "votes_router",
    "notifications_router",
    "users_router",
    "announcements_router",
    "admin_router",
    "changes_router",
]
