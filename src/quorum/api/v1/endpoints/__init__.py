# src/quorum/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .announcements import router as announcements_router
from .answers import router as answers_router
from .auth import router as auth_router
from .changes import router as changes_router
from .notifications import router as notifications_router
from .questions import router as questions_router
from .users import router as users_router
from .votes import router as votes_router

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
