"""
Create tables if needed and insert the demo users, lab rooms and courses.
Run with: python -m scripts.seed_demo
Safe to run repeatedly; existing rows are left alone.
"""

import asyncio
from labmanager.config import get_settings
from labmanager.database import engine, Base, async_session
from labmanager.logging_config import configure_logging
from labmanager.seed import seed_demo_data
import labmanager.models  # noqa: F401


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_session() as session:
        await seed_demo_data(session)
    await engine.dispose()


if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    asyncio.run(main())
