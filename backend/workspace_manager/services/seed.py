"""
Idempotent seed loader.

Reads the bundled JSON seed files (projects.json, members.json,
activities.json) and inserts them when the projects table is empty.
Running it twice is a no-op; reset=True wipes projects (and their
members and activities) before loading.
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.models.project import Activity, Member, Project

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _parse_ts(value: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(value)


async def seed_projects(
    session: AsyncSession,
    data_dir: Path,
    *,
    reset: bool = False,
) -> int:
    """
    Load seed JSON from data_dir into the database.

    Returns the number of projects inserted (0 when already seeded).
    """
    if reset:
        await session.execute(delete(Activity))
        await session.execute(delete(Member))
        await session.execute(delete(Project))
    else:
        existing = (await session.execute(select(func.count()).select_from(Project))).scalar_one()
        if existing:
            logger.info("Projects already seeded (%d rows), skipping", existing)
            return 0

    projects = _read_json(data_dir / "projects.json")
    members = _read_json(data_dir / "members.json")
    activities = _read_json(data_dir / "activities.json")

    for raw in projects:
        project = Project(
            id=raw["id"],
            name=raw["name"],
            description=raw.get("description", ""),
            status=raw["status"],
            owner=raw["owner"],
            created_at=_parse_ts(raw["createdAt"]),
            updated_at=_parse_ts(raw["updatedAt"]),
        )
        project.members = [
            Member(
                id=m["id"],
                name=m["name"],
                email=m["email"],
                role=m["role"],
                avatar=m.get("avatar"),
            )
            for m in members.get(raw["id"], [])
        ]
        project.activities = [
            Activity(
                id=a["id"],
                type=a["type"],
                description=a["description"],
                user=a["user"],
                timestamp=_parse_ts(a["timestamp"]),
            )
            for a in activities.get(raw["id"], [])
        ]
        session.add(project)

    await session.commit()
    logger.info("Seeded %d projects from %s", len(projects), data_dir)
    return len(projects)
