"""
Projects router — list, detail and partial update.

GET   /projects         — filtered, paginated list
GET   /projects/{id}    — project + members + activities
PATCH /projects/{id}    — partial update; updatedAt set server-side
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.auth.dependencies import AuthContext, get_current_user
from workspace_manager.core.database import get_db_session
from workspace_manager.schemas.project import (
    ActivityOut,
    MemberOut,
    PaginationOut,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectOut,
    ProjectUpdate,
    ProjectUpdateResponse,
    StatusFilter,
)
from workspace_manager.services.projects import (
    ProjectNotFound,
    get_project,
    query_projects,
    update_project,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Projects"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Auth = Annotated[AuthContext, Depends(get_current_user)]

_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Project not found",
)


@router.get(
    "",
    response_model=ProjectListResponse,
    summary="List projects",
    description=(
        "Filters by status (omit or 'all' for every status) and by a "
        "case-insensitive substring of the name, then paginates."
    ),
)
async def list_projects(
    session: DbSession,
    _auth: Auth,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status_filter: StatusFilter | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=200),
) -> ProjectListResponse:
    result = await query_projects(
        session,
        page=page,
        limit=limit,
        status=status_filter,
        search=search,
    )
    return ProjectListResponse(
        data=[ProjectOut.model_validate(p) for p in result.items],
        pagination=PaginationOut(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
            current_page=result.page,
        ),
    )


@router.get(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Project detail with members and activity log",
)
async def project_detail(
    project_id: str,
    session: DbSession,
    _auth: Auth,
) -> ProjectDetailResponse:
    try:
        project = await get_project(session, project_id)
    except ProjectNotFound:
        raise _NOT_FOUND

    return ProjectDetailResponse(
        project=ProjectOut.model_validate(project),
        members=[MemberOut.model_validate(m) for m in project.members],
        activities=[ActivityOut.model_validate(a) for a in project.activities],
    )


@router.patch(
    "/{project_id}",
    response_model=ProjectUpdateResponse,
    summary="Partially update a project",
)
async def patch_project(
    project_id: str,
    payload: ProjectUpdate,
    session: DbSession,
    _auth: Auth,
) -> ProjectUpdateResponse:
    try:
        project = await update_project(session, project_id, payload)
    except ProjectNotFound:
        raise _NOT_FOUND
    except Exception:
        await session.rollback()
        logger.exception("Failed to persist project %s", project_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to persist project",
        )

    return ProjectUpdateResponse(project=ProjectOut.model_validate(project))
