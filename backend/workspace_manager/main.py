"""
FastAPI application for the workspace manager.

Routers:
  • /auth      login, logout, current user
  • /projects  list, detail, partial update
  • /billing   saved billing settings
  • /health    liveness probe

Startup creates any missing tables and, with SEED_ON_STARTUP, loads the
bundled project JSON into an empty database. Neither step is fatal: the
app still starts and requests fail until the database is reachable.

Run: uvicorn workspace_manager.main:app --reload
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from workspace_manager.core.config import settings
from workspace_manager.core.database import Base, async_session_factory, engine
from workspace_manager.routers.auth import router as auth_router
from workspace_manager.routers.billing import router as billing_router
from workspace_manager.routers.projects import router as projects_router
from workspace_manager.services.seed import seed_projects

# Register every table on Base.metadata before create_all
import workspace_manager.models.billing  # noqa: F401
import workspace_manager.models.project  # noqa: F401
import workspace_manager.models.user  # noqa: F401

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def _prepare_database() -> bool:
    """Create missing tables. Returns False when the database is unreachable."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception:
        logger.warning(
            "Could not prepare the database at startup; requests will fail "
            "until it is available.",
            exc_info=True,
        )
        return False
    logger.info("Database schema ready ✓")
    return True


async def _seed() -> None:
    try:
        async with async_session_factory() as session:
            inserted = await seed_projects(session, settings.DATA_DIR)
    except Exception:
        logger.exception("Startup seeding failed (non-fatal)")
        return
    if inserted:
        logger.info("Seeded %d projects ✓", inserted)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    if await _prepare_database() and settings.SEED_ON_STARTUP:
        await _seed()

    yield

    await engine.dispose()
    logger.info("Database engine disposed ✓")


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description="Projects, billing settings and login sessions.",
    lifespan=lifespan,
)

app.include_router(auth_router, prefix="/auth")
app.include_router(projects_router, prefix="/projects")
app.include_router(billing_router, prefix="/billing")


@app.get("/health", tags=["System"], summary="Liveness probe")
async def health_check() -> dict[str, str]:
    """Process is up; does not touch the database."""
    return {"status": "healthy"}
