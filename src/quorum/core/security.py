"""Password hashing and access token helpers."""
from __future__ import annotations

import hmac
from datetime import UTC, datetime, timedelta

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import jwt

from quorum.core.settings import settings

# Argon2id; cost parameters come from settings so tests can lower them.
PASSWORD_HASHER = PasswordHasher(
    time_cost=settings.password_hash_time_cost,
    memory_cost=settings.password_hash_memory_kib,
    parallelism=settings.password_hash_parallelism,
)


def hash_password(password: str) -> str:
    """Hash a password with Argon2id."""
    return PASSWORD_HASHER.hash(password)


def verify_password(password: str, encoded: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    try:
        return PASSWORD_HASHER.verify(encoded, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(encoded: str) -> bool:
    """True when ``encoded`` was made with different cost parameters."""
    return PASSWORD_HASHER.check_needs_rehash(encoded)


def constant_time_equals(left: str, right: str) -> bool:
    """Compare two strings without leaking timing information."""
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def create_access_token(subject: int | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for user authentication."""
    to_encode: dict[str, object] = {"sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt
