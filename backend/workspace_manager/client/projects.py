"""
Projects list and detail controllers.

ProjectsListController composes three independent filter axes (debounced
search text, status, page) into a ProjectQuery and fetches once per
settled combination. ProjectDetailController loads one project and
applies status changes optimistically.

Neither cancels in-flight requests. Instead every fetch is tagged with a
generation number and a response that is not from the latest generation
is dropped, so a slow stale response can never overwrite fresher state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from workspace_manager.client.api import NotFoundError, ProjectQuery
from workspace_manager.client.debounce import Debouncer, Scheduler
from workspace_manager.core.config import settings
from workspace_manager.schemas.project import (
    PROJECT_STATUSES,
    ActivityOut,
    MemberOut,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectOut,
)

logger = logging.getLogger(__name__)

FetchProjects = Callable[[ProjectQuery], Awaitable[ProjectListResponse]]
FetchProjectDetail = Callable[[str], Awaitable[ProjectDetailResponse]]
PatchProject = Callable[[str, dict[str, Any]], Awaitable[object]]

STATUS_FILTERS = ("all", *PROJECT_STATUSES)

LIST_FETCH_FAILED = "Failed to fetch projects"
DETAIL_FETCH_FAILED = "Failed to fetch project"
STATUS_UPDATE_FAILED = "Failed to update status"


class ProjectsListController:
    """
    Filter/search/paginate state for the projects list.

    Search goes through a Debouncer; status and page apply immediately.
    With reset_page_on_filter_change (the default) a search or status change
    also moves back to page 1, inside the same single fetch.
    """

    def __init__(
        self,
        fetch: FetchProjects,
        *,
        page_size: int = settings.PAGE_SIZE,
        debounce_ms: int = settings.SEARCH_DEBOUNCE_MS,
        scheduler: Scheduler | None = None,
        reset_page_on_filter_change: bool = True,
    ) -> None:
        self._fetch = fetch
        self.page_size = page_size
        self.reset_page_on_filter_change = reset_page_on_filter_change

        self.search = ""
        self.status = "all"
        self.current_page = 1

        self.projects: list[ProjectOut] = []
        self.total_pages = 1
        self.loading = False
        self.error: str | None = None

        self._debounced_search = Debouncer(
            "",
            debounce_ms,
            on_settle=self._on_search_settled,
            scheduler=scheduler,
        )
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()

    # ── Derived state ───────────────────────────────────────
    @property
    def debounced_search(self) -> str:
        return self._debounced_search.value

    def query(self) -> ProjectQuery:
        return ProjectQuery(
            page=self.current_page,
            limit=self.page_size,
            status=self.status,
            search=self.debounced_search,
        )

    @property
    def show_pagination(self) -> bool:
        return self.total_pages > 1

    @property
    def has_previous(self) -> bool:
        return self.current_page != 1

    @property
    def has_next(self) -> bool:
        return self.current_page != self.total_pages

    # ── Inputs ──────────────────────────────────────────────
    async def load(self) -> None:
        """Fetch the current combination (initial mount or explicit refresh)."""
        await self._refresh()

    def set_search(self, text: str) -> None:
        """Record a keystroke; the fetch happens once the text settles."""
        self.search = text
        self._debounced_search.update(text)

    async def set_status(self, status: str) -> None:
        if status not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {status!r}")
        if status == self.status:
            return
        self.status = status
        if self.reset_page_on_filter_change:
            self.current_page = 1
        await self._refresh()

    async def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError("page must be >= 1")
        if page == self.current_page:
            return
        self.current_page = page
        await self._refresh()

    async def next_page(self) -> None:
        # has_next alone is true on an empty result (page 1 of 0)
        if self.has_next and self.current_page < self.total_pages:
            await self.set_page(self.current_page + 1)

    async def previous_page(self) -> None:
        if self.has_previous:
            await self.set_page(self.current_page - 1)

    async def wait_idle(self) -> None:
        """Wait for fetches started by settled search text."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        """Tear down: no debounced search will fire after this."""
        self._debounced_search.close()

    # ── Fetching ────────────────────────────────────────────
    def _on_search_settled(self, _value: str) -> None:
        if self.reset_page_on_filter_change:
            self.current_page = 1
        self._spawn(self._refresh())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh(self) -> None:
        self._generation += 1
        generation = self._generation
        query = self.query()
        self.loading = True
        try:
            response = await self._fetch(query)
        except Exception:
            logger.exception("Failed to fetch projects for %s", query)
            if generation == self._generation:
                self.error = LIST_FETCH_FAILED
            return
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("Discarding stale projects response for %s", query)
            return

        self.projects = list(response.data)
        self.total_pages = response.pagination.total_pages
        self.error = None


class ProjectDetailController:
    """One project's detail view with optimistic status changes."""

    def __init__(
        self,
        project_id: str,
        *,
        fetch_detail: FetchProjectDetail,
        patch_project: PatchProject,
    ) -> None:
        self.project_id = project_id
        self._fetch_detail = fetch_detail
        self._patch_project = patch_project

        self.project: ProjectOut | None = None
        self.members: list[MemberOut] = []
        self.activities: list[ActivityOut] = []
        self.loading = False
        self.updating = False
        self.not_found = False
        self.error: str | None = None

        self._generation = 0
        self._status_generation = 0
        self._pending_changes = 0
        self._confirmed_status: str | None = None
        self._latest_change_failed = False

    async def load(self) -> None:
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            detail = await self._fetch_detail(self.project_id)
        except NotFoundError:
            if generation == self._generation:
                self.not_found = True
                self.project = None
            return
        except Exception:
            logger.exception("Failed to fetch project %s", self.project_id)
            if generation == self._generation:
                self.error = DETAIL_FETCH_FAILED
            return
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("Discarding stale detail response for %s", self.project_id)
            return

        self.project = detail.project
        self.members = list(detail.members)
        self.activities = list(detail.activities)
        self.not_found = False
        self.error = None

    async def change_status(self, status: str) -> bool:
        """
        Show the new status at once, then PATCH it.

        On failure the last confirmed status is restored exactly; on success
        the full record is re-fetched instead of trusting the optimistic value.
        When changes overlap, only the newest one decides what is shown; once
        the last of them settles the record is re-fetched, unless that last
        one is the newest and it failed, which reverts as above.
        """
        if self.project is None:
            return False
        if status not in PROJECT_STATUSES:
            raise ValueError(f"Unknown project status: {status!r}")

        if not self._pending_changes:
            self._confirmed_status = self.project.status
        self._status_generation += 1
        change = self._status_generation
        # An in-flight load() must not overwrite the optimistic value.
        self._generation += 1
        self.loading = False
        self._pending_changes += 1

        self.project = self.project.model_copy(update={"status": status})
        self.updating = True
        try:
            await self._patch_project(self.project_id, {"status": status})
        except Exception:
            logger.exception("Failed to update status of project %s", self.project_id)
            ok = False
        else:
            ok = True
            self._confirmed_status = status
        finally:
            self._pending_changes -= 1

        latest = change == self._status_generation
        if latest:
            self._latest_change_failed = not ok
            self.error = None if ok else STATUS_UPDATE_FAILED
        if self._pending_changes:
            logger.debug(
                "Status change %d settled, %d still in flight",
                change,
                self._pending_changes,
            )
            return ok

        self.updating = False
        if latest and not ok:
            if self.project is not None:
                self.project = self.project.model_copy(
                    update={"status": self._confirmed_status}
                )
            return False

        await self.load()
        if self._latest_change_failed and self.error is None:
            self.error = STATUS_UPDATE_FAILED
        return ok
