# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

Tokens are cryptographically secure, hashed in database, and time-limited.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_TTL_HOURS) and idle timeout (SESSION_IDLE_HOURS)
- Revocable on logout
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta, timezone

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from ..time_utils import utcnow


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy). Sent to the client, never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy (unlike passwords), so a fast hash is
    sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _naive_utc(dt):
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def create_session(user_id: int) -> tuple[SessionToken, str]:
    """
    Create new session token for a user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise ValueError("User not found")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + timedelta(hours=current_app.config.get("SESSION_TTL_HOURS", 24)),
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def validate_session(token: str) -> User | None:
    """
    Return the user for a live token, or None.

    None when the token is unknown, revoked, past its absolute expiry, idle
    too long, or belongs to a deactivated user. Idle and deactivated sessions
    are revoked on the way out. Updates last_used_at on success.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if _naive_utc(session.expires_at) < now:
        return None

    idle_limit = timedelta(hours=current_app.config.get("SESSION_IDLE_HOURS", 2))
    if now - _naive_utc(session.last_used_at) > idle_limit:
        revoke(session, "Idle timeout")
        return None

    user = session.user
    if not user or not user.is_active:
        revoke(session, "User account deactivated")
        return None

    session.last_used_at = now
    db.session.commit()
    return user


def revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def revoke_token(token: str, reason: str = "User logout") -> bool:
    """Revoke by plaintext token. Returns False if no live session matches."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not session:
        return False
    revoke(session, reason)
    return True


def revoke_user_sessions(user_id: int, reason: str) -> int:
    """Revoke every live session of a user (deactivation, role change)."""
    sessions = db.session.query(SessionToken).filter_by(user_id=user_id, is_revoked=False).all()
    now = utcnow()
    for session in sessions:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason
    db.session.commit()
    return len(sessions)
