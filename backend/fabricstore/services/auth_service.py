# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Every action must be attributable. Passwords are hashed with bcrypt
(cost factor 12); sessions are opaque bearer tokens (see session_service).

Login failures are deliberately indistinguishable to the caller: unknown
email, wrong password, inactive or deleted account all yield AUTH_INVALID.
"""

from __future__ import annotations

import logging

import bcrypt

from ..errors import AuthError
from ..models import User
from ..rules import validate_password_strength
from ..time_utils import utcnow
from .concurrency import commit_or_conflict
from .session_service import find_session, new_session

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

# bcrypt cost factor
BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """Validate strength, then bcrypt-hash."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Over-long input or a malformed stored hash
        return False


class AuthService:
    def __init__(self, session, audit, ttl_hours: int = 24):
        self.session = session
        self.audit = audit
        self.ttl_hours = ttl_hours

    def login(
        self,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[User, str]:
        if not email or not password:
            raise AuthError(INVALID_CREDENTIALS, "AUTH_INVALID")

        user = (
            self.session.query(User)
            .filter(User.email == email.strip().lower())
            .first()
        )
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise AuthError(INVALID_CREDENTIALS, "AUTH_INVALID")
        if not user.is_active:
            logger.info("Login refused for inactive account %s", user.id)
            raise AuthError("Account is inactive", "AUTH_INVALID")

        record, token = new_session(user.id, self.ttl_hours, user_agent, ip_address)
        self.session.add(record)
        user.last_login_at = utcnow()
        self.audit.log_login(user.id, ip_address)
        commit_or_conflict(self.session)

        logger.info("User logged in id=%s", user.id)
        return user, token

    def resolve_token(self, token: str | None) -> User:
        """Return the session's user or raise AUTH_INVALID / AUTH_EXPIRED."""
        if not token:
            raise AuthError("Authentication required")

        record = find_session(self.session, token)
        if record is None or record.revoked_at is not None:
            raise AuthError("Invalid or expired token", "AUTH_INVALID")

        now = utcnow()
        if record.expires_at <= now:
            raise AuthError("Session expired", "AUTH_EXPIRED")

        user = record.user
        if user is None or not user.is_active:
            raise AuthError("Invalid or expired token", "AUTH_INVALID")

        record.last_used_at = now
        commit_or_conflict(self.session)
        return user

    def logout(self, token: str) -> None:
        record = find_session(self.session, token)
        if record is None or record.revoked_at is not None:
            raise AuthError("Invalid or expired token", "AUTH_INVALID")

        record.revoked_at = utcnow()
        self.audit.log_logout(record.user_id)
        commit_or_conflict(self.session)

        logger.info("User logged out id=%s", record.user_id)
