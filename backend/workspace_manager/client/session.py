"""
Client session context and route guard.

The session is an explicit object handed to whatever needs it, with
distinct lifecycle calls: initialize() restores it from cookies,
login() establishes it, teardown() ends it. resolve_redirect() is the
route guard: given a path and a session it says where to go instead,
or None to stay.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from urllib.parse import quote, unquote

from pydantic import ValidationError

from workspace_manager.client.api import ApiError
from workspace_manager.core.constants import AUTH_COOKIE, USER_COOKIE
from workspace_manager.schemas.auth import LoginRequest, LoginResponse, UserOut
from workspace_manager.schemas.common import field_errors

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/projects"
PROTECTED_PREFIXES = ("/projects", "/settings")

LoginCall = Callable[[str, str], Awaitable[LoginResponse]]
LogoutCall = Callable[[], Awaitable[None]]


class SessionContext:
    """Who is signed in, and the token that proves it."""

    def __init__(
        self,
        *,
        login_call: LoginCall | None = None,
        logout_call: LogoutCall | None = None,
    ) -> None:
        self._login_call = login_call
        self._logout_call = logout_call
        self.user: UserOut | None = None
        self.token: str | None = None
        self.is_loading = True
        self.server_error = ""
        self.errors: dict[str, str] = {}

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def initialize(self, cookies: Mapping[str, str]) -> None:
        """Restore the session from the `user` and `auth-token` cookies."""
        raw_user = cookies.get(USER_COOKIE)
        token = cookies.get(AUTH_COOKIE)
        self.user, self.token = None, None

        if raw_user and token:
            try:
                self.user = UserOut.model_validate(json.loads(unquote(raw_user)))
                self.token = token
            except (ValueError, ValidationError):
                logger.warning("Ignoring malformed session cookie")
        self.is_loading = False

    def cookies(self) -> dict[str, str]:
        """Cookies that persist this session; empty when signed out."""
        if self.user is None or self.token is None:
            return {}
        return {
            USER_COOKIE: quote(self.user.model_dump_json(by_alias=True)),
            AUTH_COOKIE: self.token,
        }

    async def login(self, email: str, password: str) -> bool:
        """
        Validate, then sign in through the login collaborator.

        Field problems land in `errors`; a rejected or failed call lands in
        `server_error` (the error's own message when it has one).
        """
        self.server_error = ""
        try:
            credentials = LoginRequest(email=email, password=password)
        except ValidationError as exc:
            self.errors = field_errors(exc, LoginRequest)
            return False
        self.errors = {}

        if self._login_call is None:
            raise RuntimeError("SessionContext has no login collaborator")

        self.is_loading = True
        try:
            result = await self._login_call(credentials.email, credentials.password)
        except ApiError as exc:
            self.server_error = exc.message or "Login failed"
            self.user, self.token = None, None
            return False
        except Exception as exc:
            logger.exception("Login failed")
            self.server_error = str(exc) or "Login failed"
            self.user, self.token = None, None
            return False
        finally:
            self.is_loading = False

        self.user, self.token = result.user, result.token
        return True

    async def teardown(self) -> str:
        """End the session and return where to navigate next."""
        if self.token is not None and self._logout_call is not None:
            try:
                await self._logout_call()
            except Exception:
                # Local sign-out still happens; the server session just expires.
                logger.warning("Server-side logout failed", exc_info=True)
        self.user, self.token = None, None
        self.is_loading = False
        return LOGIN_PATH


def is_protected(pathname: str) -> bool:
    return pathname.startswith(PROTECTED_PREFIXES)


def resolve_redirect(pathname: str, session: SessionContext) -> str | None:
    """Route guard. None means the current path may render."""
    if session.is_loading:
        return None
    if pathname == "/":
        return HOME_PATH if session.is_authenticated else LOGIN_PATH
    if is_protected(pathname) and not session.is_authenticated:
        return LOGIN_PATH
    if pathname == LOGIN_PATH and session.is_authenticated:
        return HOME_PATH
    return None
