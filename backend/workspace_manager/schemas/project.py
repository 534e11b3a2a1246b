"""
Pydantic v2 schemas for projects, members and activities.

Separation:
  • ProjectUpdate       — what the CLIENT may PATCH (no id, no timestamps).
  • Project*Response    — what the SERVER returns.

The same response models are used by the client-side core to parse API
payloads, so the two sides cannot drift apart.
"""

from __future__ import annotations

import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from workspace_manager.schemas.common import CamelModel

ProjectStatus = Literal["Active", "Paused", "Archived"]
StatusFilter = Literal["all", "Active", "Paused", "Archived"]

PROJECT_STATUSES: tuple[ProjectStatus, ...] = ("Active", "Paused", "Archived")


class ProjectOut(CamelModel):
    id: str
    name: str
    description: str
    status: ProjectStatus
    owner: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class MemberOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    avatar: str | None = None


class ActivityOut(CamelModel):
    id: str
    type: str
    description: str
    user: str
    timestamp: datetime.datetime


class ProjectUpdate(CamelModel):
    """
    Partial update accepted by PATCH /projects/{id}.

    extra="forbid" rejects attempts to overwrite id or timestamps;
    updatedAt is always set by the server. An explicit null is rejected;
    defaults are not validated, so omitted fields stay unset.
    """

    model_config = ConfigDict(extra="forbid", validate_default=False)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: ProjectStatus | None = None
    owner: str | None = Field(default=None, min_length=1, max_length=200)

    @field_validator("name", "description", "status", "owner", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; every column is NOT NULL.
        if value is None:
            raise PydanticCustomError("not_null", "Field may not be null")
        return value


class PaginationOut(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    current_page: int


class ProjectListResponse(CamelModel):
    data: list[ProjectOut]
    pagination: PaginationOut


class ProjectDetailResponse(CamelModel):
    project: ProjectOut
    members: list[MemberOut] = Field(default_factory=list)
    activities: list[ActivityOut] = Field(default_factory=list)


class ProjectUpdateResponse(CamelModel):
    project: ProjectOut
    message: str = "Project updated successfully"
