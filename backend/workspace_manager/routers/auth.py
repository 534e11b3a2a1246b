"""
Auth router — mock login backed by real, revocable sessions.

POST /auth/login   — validate credentials, create a session, set cookie
POST /auth/logout  — revoke the current session, clear cookie
GET  /auth/me      — the signed-in user
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.auth.dependencies import AuthContext, get_current_user
from workspace_manager.core.config import settings
from workspace_manager.core.constants import AUTH_COOKIE
from workspace_manager.core.database import get_db_session
from workspace_manager.schemas.auth import LoginRequest, LoginResponse, UserOut
from workspace_manager.services import sessions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Auth = Annotated[AuthContext, Depends(get_current_user)]


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Sign in and start a session",
)
async def login(
    payload: LoginRequest,
    response: Response,
    session: DbSession,
) -> LoginResponse:
    """
    Any valid email + password (≥ 6 chars) signs in; the first login for
    an email creates the user. The raw token is returned once and also set
    as the auth-token cookie.
    """
    try:
        user, raw_token = await sessions.login(session, payload.email)
    except Exception:
        await session.rollback()
        logger.exception("Failed to create session")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed",
        )

    response.set_cookie(
        AUTH_COOKIE,
        raw_token,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return LoginResponse(user=UserOut.model_validate(user), token=raw_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End the current session",
)
async def logout(response: Response, session: DbSession, auth: Auth) -> None:
    await sessions.revoke_session(session, auth.session_id)
    response.delete_cookie(AUTH_COOKIE, path="/")


@router.get("/me", response_model=UserOut, summary="Current user")
async def me(auth: Auth) -> UserOut:
    return UserOut.model_validate(auth.user)
