"""Per-request identity context.

The context is built once per request by the API dependencies and handed to
every service that needs to know who is acting. Nothing reads identity from
module state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from quorum.core.errors import AuthRequired
from quorum.models import User


class Role(StrEnum):
    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"
    BANNED = "banned"


@dataclass(frozen=True)
class Identity:
    """Authenticated member and the profile fields derived from it."""

    id: int
    username: str
    role: Role
    reputation: int = 0
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> Identity:
        return cls(
            id=user.id,
            username=user.username,
            role=Role(user.role),
            reputation=user.reputation,
            avatar_url=user.avatar_url,
        )

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_banned(self) -> bool:
        return self.role is Role.BANNED


class SessionContext:
    """Holds the current identity, if any, for the lifetime of a request."""

    def __init__(self, identity: Identity | None = None) -> None:
        self._identity = identity

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def role(self) -> Role:
        return self._identity.role if self._identity else Role.GUEST

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def sign_in(self, identity: Identity) -> None:
        """Replace the identity after an auth-state change."""
        self._identity = identity

    def sign_out(self) -> None:
        self._identity = None

    def require_identity(self) -> Identity:
        """Return the identity or raise :class:`AuthRequired`."""
        if self._identity is None:
            raise AuthRequired()
        return self._identity
