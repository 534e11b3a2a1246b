"""
FastAPI dependency for session authentication.

Flow:
  1. Take the token from the Authorization header (Bearer) or, failing
     that, from the auth-token cookie set at login
  2. Hash the token (SHA-256) and look up the session by hash
  3. Reject expired sessions
  4. Return AuthContext (user + session id)

Security:
  • Generic 401 for ALL failure modes (missing, unknown, expired)
  • Raw tokens are NEVER logged
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.core.constants import AUTH_COOKIE
from workspace_manager.core.database import get_db_session
from workspace_manager.models.user import User
from workspace_manager.services.sessions import AuthenticationError, resolve_session

logger = logging.getLogger(__name__)

# Generic 401: same message for all auth failures to avoid leaking info
_AUTH_FAILED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Not authenticated.",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Authenticated request context injected into every protected route.

    Attributes:
        user:       The signed-in User.
        session_id: The session row backing this request; logout deletes it.
    """

    user: User
    session_id: str


def _extract_token(authorization: str | None, cookie_token: str | None) -> str | None:
    if authorization:
        parts = authorization.split(" ", maxsplit=1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None
        return parts[1]
    return cookie_token or None


async def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    auth_token: str | None = Cookie(default=None, alias=AUTH_COOKIE),
    session: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    """
    FastAPI dependency — resolves a session token to an AuthContext.

    Usage in routers:
        Auth = Annotated[AuthContext, Depends(get_current_user)]
    """
    raw_token = _extract_token(authorization, auth_token)
    if raw_token is None:
        raise _AUTH_FAILED

    try:
        user_session = await resolve_session(session, raw_token)
    except AuthenticationError as exc:
        logger.info("Rejected session: %s", exc)
        raise _AUTH_FAILED

    return AuthContext(user=user_session.user, session_id=user_session.id)
