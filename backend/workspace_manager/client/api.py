"""
Async HTTP client for the workspace API.

Uses httpx. Every non-2xx response becomes an ApiError carrying the
server's `detail` (or `error`) message; transport failures become a
WorkspaceClientError. Controllers catch these at the call site.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from workspace_manager.core.config import settings
from workspace_manager.schemas.auth import LoginResponse, UserOut
from workspace_manager.schemas.billing import (
    BillingData,
    BillingRecordOut,
    BillingSaveResponse,
)
from workspace_manager.schemas.project import (
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectOut,
    ProjectUpdateResponse,
)

logger = logging.getLogger(__name__)


class WorkspaceClientError(Exception):
    """Base error for every failure talking to the API."""


class ApiError(WorkspaceClientError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class NotFoundError(ApiError):
    """The API answered 404."""


@dataclass(frozen=True, slots=True)
class ProjectQuery:
    """One settled combination of the projects list filters."""

    page: int = 1
    limit: int = 10
    status: str = "all"
    search: str = ""

    def to_params(self) -> dict[str, str]:
        """Query params: status only when not "all", search only when non-empty."""
        params = {"page": str(self.page), "limit": str(self.limit)}
        if self.status != "all":
            params["status"] = self.status
        if self.search:
            params["search"] = self.search
        return params


def normalize_billing_records(payload: Any) -> list[BillingRecordOut]:
    """
    Accept every shape the billing endpoint has ever returned:
    {"data": [...]}, {"data": {...}}, a bare list, or a bare record.
    """
    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = [payload]
    return [BillingRecordOut.model_validate(item) for item in payload]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if isinstance(detail, str):
            return detail
    return response.reason_phrase or f"HTTP {response.status_code}"


class WorkspaceClient:
    """
    Thin async wrapper over the workspace API.

    Pass `http` to reuse a configured httpx.AsyncClient (tests hand in one
    bound to the ASGI app); otherwise one is created for `base_url`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout,
        )
        self.token = token

    async def __aenter__(self) -> WorkspaceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise WorkspaceClientError("Network error") from exc

        if response.status_code == 404:
            raise NotFoundError(404, _error_message(response))
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ── Auth ────────────────────────────────────────────────
    async def login(self, email: str, password: str) -> LoginResponse:
        body = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        result = LoginResponse.model_validate(body)
        self.token = result.token
        return result

    async def logout(self) -> None:
        try:
            await self._request("POST", "/auth/logout")
        finally:
            self.token = None

    async def me(self) -> UserOut:
        return UserOut.model_validate(await self._request("GET", "/auth/me"))

    # ── Projects ────────────────────────────────────────────
    async def list_projects(self, query: ProjectQuery) -> ProjectListResponse:
        body = await self._request("GET", "/projects", params=query.to_params())
        return ProjectListResponse.model_validate(body)

    async def get_project(self, project_id: str) -> ProjectDetailResponse:
        body = await self._request("GET", f"/projects/{project_id}")
        return ProjectDetailResponse.model_validate(body)

    async def update_project(self, project_id: str, patch: dict[str, Any]) -> ProjectOut:
        body = await self._request("PATCH", f"/projects/{project_id}", json=patch)
        return ProjectUpdateResponse.model_validate(body).project

    # ── Billing ─────────────────────────────────────────────
    async def get_billing(self) -> list[BillingRecordOut]:
        return normalize_billing_records(await self._request("GET", "/billing"))

    async def save_billing(self, data: BillingData) -> BillingSaveResponse:
        body = await self._request(
            "POST", "/billing", json=data.model_dump(mode="json", by_alias=True)
        )
        return BillingSaveResponse.model_validate(body)

    async def delete_payment_method(self, method_id: str) -> None:
        await self._request("DELETE", "/billing", json={"id": method_id})
