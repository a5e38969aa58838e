"""
Actor resolution: bearer token → display name used as ``requested_by``.

Tokens are stored hashed (sha256) in ``user_sessions``.  Resolution never
falls back to a placeholder identity; any failure is an ``AuthError``.
"""

from __future__ import annotations

import hashlib
import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, Header
from sqlmodel import Session

from app.core.clock import utcnow
from app.core.database import get_session
from app.core.errors import AuthError
from app.models import UserSession

logger = logging.getLogger(__name__)

SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))


@dataclass(frozen=True)
class Actor:
    display_name: str


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def open_session(
    session: Session,
    display_name: str,
    *,
    email: Optional[str] = None,
    ttl_hours: Optional[int] = None,
    now: Optional[datetime] = None,
) -> str:
    """セッションを発行して生トークンを返す（DB にはハッシュのみ保存）。"""
    if not (display_name or "").strip():
        raise AuthError("display_name is required to open a session")
    issued = now or utcnow()
    token = secrets.token_urlsafe(32)
    row = UserSession(
        token=hash_token(token),
        display_name=display_name.strip(),
        email=email,
        created_at=issued,
        expires_at=issued + timedelta(hours=ttl_hours or SESSION_TTL_HOURS),
    )
    session.add(row)
    session.commit()
    logger.info("session opened for %s (expires %s)", row.display_name, row.expires_at)
    return token


def revoke_session(session: Session, token: str, *, now: Optional[datetime] = None) -> None:
    row = session.get(UserSession, hash_token(token))
    if row is None or row.revoked_at is not None:
        raise AuthError("Unknown or already revoked session")
    row.revoked_at = now or utcnow()
    session.add(row)
    session.commit()


def resolve_actor(
    session: Session,
    token: Optional[str],
    *,
    now: Optional[datetime] = None,
) -> Actor:
    if not token:
        raise AuthError("Missing session token")
    row = session.get(UserSession, hash_token(token))
    if row is None:
        raise AuthError("Unknown session token")
    if row.revoked_at is not None:
        raise AuthError("Session has been revoked")
    if row.expires_at <= (now or utcnow()):
        raise AuthError("Session has expired")
    if not (row.display_name or "").strip():
        raise AuthError("Session has no display name")
    return Actor(display_name=row.display_name)


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def current_actor(
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> Actor:
    """FastAPI dependency: ``Authorization: Bearer <token>`` → Actor"""
    return resolve_actor(session, _bearer(authorization))
