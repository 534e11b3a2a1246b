"""
Dev seed script — (re)load the bundled project JSON into the database.

Usage:
    python -m scripts.seed_dev            # seed only if empty
    python -m scripts.seed_dev --reset    # wipe projects and reload

Creates tables first, so it also works against a fresh SQLite file.
"""

import argparse
import asyncio

from workspace_manager.core.config import settings
from workspace_manager.core.database import Base, async_session_factory, engine
from workspace_manager.services.seed import seed_projects

import workspace_manager.models.billing  # noqa: F401
import workspace_manager.models.project  # noqa: F401
import workspace_manager.models.user  # noqa: F401


async def main(reset: bool) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        inserted = await seed_projects(session, settings.DATA_DIR, reset=reset)

    await engine.dispose()

    print()
    print("=" * 60)
    print("  Dev Seed Complete")
    print("=" * 60)
    print()
    print(f"  Database:   {settings.DATABASE_URL}")
    print(f"  Seed data:  {settings.DATA_DIR}")
    print(f"  Inserted:   {inserted} projects")
    print()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--reset", action="store_true", help="wipe projects before loading")
    asyncio.run(main(parser.parse_args().reset))
