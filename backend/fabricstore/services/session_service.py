# Overview: Bearer token generation, hashing and lookup.

"""
Session Token Management

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout of SESSION_TTL_HOURS
- Revocable on logout
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta

from ..models import SessionToken
from ..time_utils import utcnow


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string. This is the plaintext token sent to the
    client; it is never stored.
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    SHA-256 hex digest for database storage.

    Tokens are already high-entropy, so a fast hash is sufficient (unlike passwords).
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_session(
    user_id: str,
    ttl_hours: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """Build (unsaved) session record and its plaintext token."""
    plaintext = generate_token()
    now = utcnow()
    record = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext),
        created_at=now,
        last_used_at=now,
        expires_at=now + timedelta(hours=ttl_hours),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
    )
    return record, plaintext


def find_session(db_session, token: str) -> SessionToken | None:
    return (
        db_session.query(SessionToken)
        .filter_by(token_hash=hash_token(token))
        .first()
    )


def revoke_user_sessions(db_session, user_id: str) -> int:
    """Revoke every live session of a user. Staged only; the caller commits."""
    return (
        db_session.query(SessionToken)
        .filter(SessionToken.user_id == user_id, SessionToken.revoked_at.is_(None))
        .update({SessionToken.revoked_at: utcnow()}, synchronize_session=False)
    )
