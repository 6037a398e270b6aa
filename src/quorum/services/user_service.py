"""CRUD-style helpers for managing member accounts."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quorum.core import security
from quorum.core.errors import AuthRequired, NotFound, QuorumError
from quorum.models import User
from quorum.schemas.user import ProfileUpdate, SignupRequest

logger = logging.getLogger(__name__)

__all__ = [
    "AccountConflict",
    "get_user",
    "create_user",
    "authenticate",
    "update_profile",
    "set_role",
]


class AccountConflict(QuorumError):
    status_code = 409
    default_detail = "Username or email is already taken"


def get_user(db: Session, user_id: int) -> User:
    """Return a single user by primary key."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def create_user(db: Session, data: SignupRequest) -> User:
    """Persist a new member with a hashed password."""
    taken = db.execute(
        select(User.id).where((User.username == data.username) | (User.email == data.email))
    ).first()
    if taken is not None:
        raise AccountConflict()

    user = User(
        username=data.username,
        email=data.email,
        password_hash=security.hash_password(data.password),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as err:
        db.rollback()
        raise AccountConflict() from err
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    if user is None or not security.verify_password(password, user.password_hash):
        raise AuthRequired("Invalid email or password")
    if security.needs_rehash(user.password_hash):
        user.password_hash = security.hash_password(password)
        db.flush()
    return user


def update_profile(db: Session, user: User, update_data: ProfileUpdate) -> User:
    """Apply partial updates to the member's own profile."""
    changes = update_data.model_dump(exclude_unset=True)
    new_username = changes.get("username")
    if new_username and new_username != user.username:
        clash = db.execute(select(User.id).where(User.username == new_username)).first()
        if clash is not None:
            raise AccountConflict("Username is already taken")
    for key, value in changes.items():
        if key == "username" and not value:
            continue
        setattr(user, key, value)
    db.flush()
    return user


def set_role(db: Session, user_id: int, role: str) -> User:
    """Change a member's role (ban, unban, promote)."""
    user = get_user(db, user_id)
    previous = user.role
    user.role = role
    db.flush()
    logger.info("User %s role changed from %s to %s", user_id, previous, role)
    return user
