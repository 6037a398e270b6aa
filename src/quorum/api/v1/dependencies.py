"""Shared API dependencies for authentication and common functionality."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from quorum.core.errors import AuthRequired, AuthzDenied
from quorum.core.settings import settings
from quorum.db.session import get_db
from quorum.models import User
from quorum.services.admin_session import AdminSessionGuard, AdminSessionState
from quorum.services.changes import ChangeFeed, get_change_feed
from quorum.services.kvstore import KeyValueStore, get_kv_store
from quorum.services.session import Identity, SessionContext

# HTTP Bearer scheme for JWT authentication; guests simply send no header
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _user_id_from_token(token: str) -> int:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise AuthRequired("Could not validate credentials") from err
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError) as err:
        raise AuthRequired("Could not validate credentials") from err


def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Resolve the bearer token to a user, or ``None`` for guests.

    A token that is present but invalid is rejected rather than treated as a
    guest request.

    Raises:
        AuthRequired: If the token cannot be decoded or names no user.
    """
    if credentials is None:
        return None
    user = db.get(User, _user_id_from_token(credentials.credentials))
    if user is None:
        raise AuthRequired("User not found")
    return user


OptionalUserDep = Annotated[User | None, Depends(get_current_user_optional)]


def get_current_user(user: OptionalUserDep) -> User:
    """Get the current authenticated user from JWT token."""
    if user is None:
        raise AuthRequired()
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_session_context(user: OptionalUserDep) -> SessionContext:
    """Build the per-request identity context handed to services."""
    return SessionContext(Identity.from_user(user) if user is not None else None)


SessionContextDep = Annotated[SessionContext, Depends(get_session_context)]


def get_admin_candidate(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> SessionContext:
    """Identity for the admin gate; an unusable token counts as a guest.

    The admin session header stands on its own, so a stale login token must
    not block it.
    """
    if credentials is None:
        return SessionContext()
    try:
        user = db.get(User, _user_id_from_token(credentials.credentials))
    except AuthRequired:
        return SessionContext()
    return SessionContext(Identity.from_user(user) if user is not None else None)


def get_kv_store_dep() -> KeyValueStore:
    """Return the shared key/value store."""
    return get_kv_store()


def get_change_feed_dep() -> ChangeFeed:
    return get_change_feed()


KeyValueStoreDep = Annotated[KeyValueStore, Depends(get_kv_store_dep)]
ChangeFeedDep = Annotated[ChangeFeed, Depends(get_change_feed_dep)]
AdminSessionHeader = Annotated[str | None, Header(alias="X-Admin-Session")]


@dataclass(frozen=True)
class AdminActor:
    """Who passed the admin gate: an admin account or the shared admin session."""

    source: str
    identity: Identity | None = None

    @property
    def author_id(self) -> int | None:
        return self.identity.id if self.source == "role" and self.identity else None


def require_admin(
    session: Annotated[SessionContext, Depends(get_admin_candidate)],
    store: KeyValueStoreDep,
    admin_session: AdminSessionHeader = None,
) -> AdminActor:
    """Admit admin-role members or holders of a valid admin session.

    Raises:
        AuthRequired: Neither gate passed and there is no identity, or the
            presented admin session has expired.
        AuthzDenied: A non-admin member without a valid admin session.
    """
    identity = session.identity
    if identity is not None and identity.is_admin:
        return AdminActor(source="role", identity=identity)

    if admin_session:
        state = AdminSessionGuard(store.namespace(admin_session)).check()
        if state is AdminSessionState.VALID:
            return AdminActor(source="session", identity=identity)
        if state is AdminSessionState.EXPIRED:
            raise AuthRequired("Admin session expired")

    if identity is None:
        raise AuthRequired()
    raise AuthzDenied("Admin access required")


AdminDep = Annotated[AdminActor, Depends(require_admin)]
