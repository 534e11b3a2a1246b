"""
Project query and update service.

Filtering and pagination happen in SQL. Search is a case-insensitive
substring match on the project name; status "all" (or None) means no
status filter. Results are ordered by id (shorter ids first, so
numeric ids come out as 1, 2, ... 10) and pages are stable.
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from workspace_manager.models.project import Project
from workspace_manager.schemas.project import ProjectUpdate

logger = logging.getLogger(__name__)


class ProjectNotFound(Exception):
    """Raised when a project id has no row."""


@dataclass(frozen=True, slots=True)
class ProjectPage:
    items: list[Project]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


async def query_projects(
    session: AsyncSession,
    *,
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    search: str | None = None,
) -> ProjectPage:
    """Return one page of projects matching the filters."""
    conditions = []
    if status and status != "all":
        conditions.append(Project.status == status)
    if search:
        conditions.append(func.lower(Project.name).contains(search.lower(), autoescape=True))

    count_stmt = select(func.count()).select_from(Project).where(*conditions)
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        select(Project)
        .where(*conditions)
        .order_by(func.length(Project.id), Project.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return ProjectPage(
        items=list(result.scalars().all()),
        page=page,
        limit=limit,
        total=total,
    )


async def get_project(session: AsyncSession, project_id: str) -> Project:
    """Load a project with its members and activities. Raises ProjectNotFound."""
    stmt = (
        select(Project)
        .where(Project.id == project_id)
        .options(selectinload(Project.members), selectinload(Project.activities))
    )
    result = await session.execute(stmt)
    project = result.scalar_one_or_none()
    if project is None:
        raise ProjectNotFound(project_id)
    return project


async def update_project(
    session: AsyncSession,
    project_id: str,
    patch: ProjectUpdate,
) -> Project:
    """
    Apply a partial update and stamp updated_at.

    Only fields present in the payload are written. The caller handles
    commit failures; this function commits and refreshes on success.
    """
    project = await session.get(Project, project_id)
    if project is None:
        raise ProjectNotFound(project_id)

    for field, value in patch.model_dump(exclude_unset=True).items():
        setattr(project, field, value)
    project.updated_at = datetime.datetime.now(datetime.timezone.utc)

    await session.commit()
    await session.refresh(project)
    logger.info("Project %s updated (%s)", project_id, ", ".join(patch.model_fields_set) or "touch")
    return project
