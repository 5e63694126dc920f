# Overview: Service-layer operations for session tokens; issue, validate and revoke bearer sessions.

"""
Session Token Management

Tokens are 32 random bytes (hex) handed to the client once; the database only
keeps their SHA-256 hash. A session carries the company id captured at login,
so every authenticated request is scoped without re-deriving the tenant.

A session is rejected when it is unknown, revoked, past its absolute
lifetime (SESSION_HOURS), or its user has been deactivated.
"""

import hashlib
import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from ..time_utils import utcnow


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy); never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_lifetime() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_HOURS", 24))


def create_session(
    user: User,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create a new session for `user` and return (session_record, plaintext_token).

    Adds the session to the current transaction; the caller commits.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user.id,
        company_id=user.company_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _session_lifetime(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    return session, plaintext_token


def validate_session(token: str) -> SessionToken | None:
    """
    Return the live session for `token`, or None.

    Sessions belonging to deactivated users are revoked on sight.
    Updates last_used_at on success.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    user = session.user
    if not user or not user.is_active or user.company_id != session.company_id:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = "User account deactivated"
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()
    return session


def revoke_session(session: SessionToken, reason: str = "User logout") -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def revoke_all_user_sessions(user_id: int, reason: str, keep_session_id: int | None = None) -> int:
    """
    Revoke every active session of a user (password change, deactivation).

    Returns count of sessions revoked. Does not commit.
    """
    now = utcnow()
    query = db.session.query(SessionToken).filter_by(user_id=user_id, is_revoked=False)
    if keep_session_id is not None:
        query = query.filter(SessionToken.id != keep_session_id)

    count = 0
    for session in query.all():
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason
        count += 1
    return count
