"""
Storage wiring: async engine, session factory and the ORM base.

One engine per process, built from settings.DATABASE_URL. Any async
SQLAlchemy URL works; SQLite through aiosqlite is the default, and the
tests run it in memory. Request handlers receive a session from
get_db_session(); services commit their own writes, and nothing is
locked, so concurrent writers follow last-write-wins.
"""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from workspace_manager.core.config import settings


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for `url`.

    aiosqlite drives SQLite from a worker thread, so the same-thread check
    is turned off there; server databases get pre-ping on checkout instead.
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Response models read attributes after commit, so keep them loaded.
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
async_session_factory = build_session_factory(engine)


class Base(DeclarativeBase):
    """Declarative base for every model; Alembic autogenerates from its metadata."""


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request, closed when the request ends."""
    async with async_session_factory() as session:
        yield session
