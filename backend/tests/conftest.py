"""
Pytest configuration and fixtures.

API tests run the FastAPI app in-process through httpx.ASGITransport
against a fresh in-memory SQLite database seeded from the bundled JSON.
Client-core tests use ManualScheduler to drive debounce timers by hand.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable
from typing import Any

# Keep the app away from any real database file during tests.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SEED_ON_STARTUP", "false")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from workspace_manager.core.config import settings
from workspace_manager.core.database import Base, build_session_factory, get_db_session
from workspace_manager.main import app
from workspace_manager.services.seed import seed_projects


class _ManualHandle:
    def __init__(self, when_ms: int, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when_ms = when_ms
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """call_later() look-alike whose clock only moves on advance(ms)."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._handles: list[_ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> _ManualHandle:
        handle = _ManualHandle(self.now_ms + round(delay * 1000), callback, args)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when_ms)
            self._handles.remove(handle)
            self.now_ms = handle.when_ms
            handle.callback(*handle.args)
        self.now_ms = target


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest_asyncio.fixture()
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_session_factory(engine)
    async with factory() as session:
        await seed_projects(session, settings.DATA_DIR)

    yield factory
    await engine.dispose()


@pytest_asyncio.fixture()
async def http(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[httpx.AsyncClient]:
    """Unauthenticated client bound to the app."""

    async def _override() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def auth_http(http: httpx.AsyncClient) -> httpx.AsyncClient:
    """Client carrying a Bearer token for a freshly signed-in user."""
    response = await http.post(
        "/auth/login",
        json={"email": "jane@example.com", "password": "secret123"},
    )
    assert response.status_code == 200, response.text
    http.headers["Authorization"] = f"Bearer {response.json()['token']}"
    return http
