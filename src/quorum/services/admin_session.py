"""Admin dashboard session gate.

This gate is independent of member roles. A shared credential pair unlocks a
flag plus an issuance timestamp stored in the client's key/value namespace;
the flag is honoured for a fixed window and checked lazily on every access.

States: ``absent`` -> ``valid`` on a successful grant, ``valid`` ->
``expired`` once the window elapses, ``expired`` -> ``absent`` on the check
that observed it (the keys are cleared), anything -> ``absent`` on logout.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from quorum.core.security import constant_time_equals
from quorum.core.settings import settings
from quorum.db.time import epoch_ms
from quorum.services.kvstore import KeyValueNamespace

logger = logging.getLogger(__name__)

SESSION_FLAG_KEY = "adminSession"
SESSION_ISSUED_KEY = "adminLoginTime"
# Keys outlive the window so the expired state can still be observed once.
KEY_RETENTION_FACTOR = 2


class AdminSessionState(StrEnum):
    VALID = "valid"
    EXPIRED = "expired"
    ABSENT = "absent"


class AdminGrant(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"


class AdminSessionGuard:
    """Checks, grants and revokes the admin session flag for one client."""

    def __init__(
        self,
        storage: KeyValueNamespace,
        *,
        username: str | None = None,
        password: str | None = None,
        ttl_ms: int | None = None,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self._storage = storage
        self._username = username if username is not None else settings.admin_username
        self._password = password if password is not None else settings.admin_password
        self._ttl_ms = ttl_ms if ttl_ms is not None else settings.admin_session_ttl_ms
        self._clock = clock

    def check(self) -> AdminSessionState:
        """Return the current state, clearing an expired flag."""
        flag = self._storage.get(SESSION_FLAG_KEY)
        issued_raw = self._storage.get(SESSION_ISSUED_KEY)
        if flag != "true" or issued_raw is None:
            return AdminSessionState.ABSENT

        try:
            issued_at = int(issued_raw)
        except ValueError:
            logger.warning("Discarding malformed admin session timestamp for %s", self._storage.scope)
            self.revoke()
            return AdminSessionState.ABSENT

        if self._clock() - issued_at > self._ttl_ms:
            self.revoke()
            return AdminSessionState.EXPIRED
        return AdminSessionState.VALID

    def grant(self, username: str, password: str) -> AdminGrant:
        """Persist the flag if the credentials match; otherwise change nothing."""
        username_ok = constant_time_equals(username, self._username)
        password_ok = constant_time_equals(password, self._password)
        if not (username_ok and password_ok):
            logger.warning("Rejected admin login attempt for username %r", username)
            return AdminGrant.DENIED

        retention = max(1, self._ttl_ms * KEY_RETENTION_FACTOR // 1000)
        self._storage.set(SESSION_FLAG_KEY, "true", ttl_seconds=retention)
        self._storage.set(SESSION_ISSUED_KEY, str(self._clock()), ttl_seconds=retention)
        logger.info("Admin session granted for %s", self._storage.scope)
        return AdminGrant.GRANTED

    def revoke(self) -> None:
        self._storage.remove(SESSION_FLAG_KEY, SESSION_ISSUED_KEY)
