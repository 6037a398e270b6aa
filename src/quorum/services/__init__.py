# src/quorum/services/__init__.py
"""Business logic services for the Quorum application."""

from .admin_session import AdminSessionGuard
from .changes import ChangeFeed
from .kvstore import KeyValueStore
from .listing import QuestionListing
from .session import Identity, SessionContext
from .votes import VoteReconciler

__all__ = [
    "AdminSessionGuard",
    "ChangeFeed",
    "Identity",
    "KeyValueStore",
    "QuestionListing",
    "SessionContext",
    "VoteReconciler",
]
