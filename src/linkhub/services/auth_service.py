"""
Accounts and sessions.

Passwords are hashed with argon2. Session tokens are random and only their
SHA-256 digest is stored, so a leaked sessions table cannot be replayed.
"""
from __future__ import annotations
from datetime import timedelta
import hashlib
import logging
import secrets
from typing import Any, Mapping, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from linkhub.core.config import settings
from linkhub.core.errors import Conflict, Unauthorized, ValidationFailed
from linkhub.core.validation import normalize_username, sanitize_string, validate_registration_data
from linkhub.db.models import Profile, User, UserSession, utcnow
from linkhub.db.session import store_errors

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def hash_token(raw_token: str) -> str:
    # SHA-256 hex digest (64 chars)
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def _normalize_email(email: Any) -> Any:
    return email.strip().lower() if isinstance(email, str) else email


def create_session(db: Session, user: User) -> str:
    """Persist a new session for user and return the plaintext token (shown once)."""
    raw = generate_token()
    with store_errors(db):
        db.add(
            UserSession(
                user_id=user.id,
                token_hash=hash_token(raw),
                expires_at=utcnow() + timedelta(days=settings.session_ttl_days),
            )
        )
        db.commit()
    return raw


def register(db: Session, data: Mapping[str, Any]) -> tuple[User, Profile, str]:
    candidate = {
        "email": _normalize_email(data.get("email")),
        "password": data.get("password"),
        # lowercased here, at the boundary; the validator itself is strict
        "username": normalize_username(data.get("username")),
        "display_name": data.get("display_name"),
    }
    errors = validate_registration_data(candidate)
    if errors:
        raise ValidationFailed(errors)

    with store_errors(db):
        if db.scalar(select(User.id).where(User.email == candidate["email"])) is not None:
            raise Conflict("Email already registered")
        if db.scalar(select(Profile.id).where(Profile.username == candidate["username"])) is not None:
            raise Conflict("Username already taken")

        user = User(email=candidate["email"], password_hash=hash_password(candidate["password"]))
        db.add(user)
        db.flush()

        display_name = candidate["display_name"]
        profile = Profile(
            user_id=user.id,
            username=candidate["username"],
            display_name=sanitize_string(display_name) if display_name else candidate["username"],
        )
        db.add(profile)
        db.commit()

    token = create_session(db, user)
    logger.info("Registered user %s", profile.username, extra={"user_id": user.id})
    return user, profile, token


def login(db: Session, email: Any, password: Any) -> tuple[User, str]:
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise Unauthorized("Invalid credentials")

    with store_errors(db):
        user = db.scalar(select(User).where(User.email == _normalize_email(email)))

    # same error for unknown email and wrong password
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid credentials")

    return user, create_session(db, user)


def logout(db: Session, raw_token: Optional[str]) -> None:
    if not raw_token:
        return
    with store_errors(db):
        db.execute(delete(UserSession).where(UserSession.token_hash == hash_token(raw_token)))
        db.commit()


def resolve_session(db: Session, raw_token: Optional[str]) -> Optional[User]:
    """User behind an unexpired session token, or None."""
    if not raw_token:
        return None

    with store_errors(db):
        return db.scalar(
            select(User)
            .join(UserSession, UserSession.user_id == User.id)
            .where(
                UserSession.token_hash == hash_token(raw_token),
                UserSession.expires_at > utcnow(),
            )
        )
