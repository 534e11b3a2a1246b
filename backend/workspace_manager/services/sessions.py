"""
Login session service.

Login is a mock identity provider: any syntactically valid email and
password is accepted (validation lives in LoginRequest). The first login
for an email creates the User; every login issues a fresh session token.
"""

from __future__ import annotations

import datetime
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.auth.hashing import generate_session_token, hash_session_token
from workspace_manager.core.config import settings
from workspace_manager.models.user import User, UserSession

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """
    A token did not resolve to a live session.

    The message names the reason for the logs; callers answer with a
    generic 401 regardless.
    """


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _as_aware(value: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


async def login(session: AsyncSession, email: str) -> tuple[User, str]:
    """
    Sign in `email`, creating the user on first login.

    Returns:
        (user, raw_token) — raw_token is shown once and never stored.
    """
    email = email.strip()
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(email=email, name=email.split("@")[0])
        session.add(user)
        await session.flush()  # get user.id
        logger.info("Created user %s", user.id)

    raw_token, token_hash = generate_session_token()
    session.add(
        UserSession(
            user_id=user.id,
            token_hash=token_hash,
            expires_at=_utcnow() + datetime.timedelta(days=settings.SESSION_TTL_DAYS),
        )
    )
    await session.commit()
    return user, raw_token


async def resolve_session(session: AsyncSession, raw_token: str) -> UserSession:
    """Look up a live session by raw token. Raises AuthenticationError."""
    stmt = select(UserSession).where(
        UserSession.token_hash == hash_session_token(raw_token)
    )
    result = await session.execute(stmt)
    user_session = result.scalar_one_or_none()

    if user_session is None:
        raise AuthenticationError("unknown session token")
    if _as_aware(user_session.expires_at) <= _utcnow():
        raise AuthenticationError(f"session {user_session.id} expired")
    return user_session


async def revoke_session(session: AsyncSession, session_id: str) -> None:
    """Delete a session row (logout). Missing rows are ignored."""
    await session.execute(delete(UserSession).where(UserSession.id == session_id))
    await session.commit()
