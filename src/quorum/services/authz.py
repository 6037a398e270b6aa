"""Role and ownership checks for the primary identity gate."""

from __future__ import annotations

from quorum.core.errors import AuthzDenied
from quorum.services.session import Identity, Role, SessionContext


def ensure_active(session: SessionContext) -> Identity:
    """Return the acting identity, rejecting guests and banned members."""
    identity = session.require_identity()
    if identity.is_banned:
        raise AuthzDenied("Your account has been banned")
    return identity


def require_role(session: SessionContext, role: Role) -> Identity:
    identity = session.require_identity()
    if identity.role is not role:
        raise AuthzDenied()
    return identity


def can_modify(identity: Identity | None, author_id: int) -> bool:
    """Only the author or an admin may edit or delete content."""
    if identity is None or identity.is_banned:
        return False
    return identity.id == author_id or identity.is_admin


def ensure_can_modify(session: SessionContext, author_id: int) -> Identity:
    identity = session.require_identity()
    if not can_modify(identity, author_id):
        raise AuthzDenied()
    return identity
