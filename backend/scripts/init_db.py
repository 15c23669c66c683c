"""
Initialize the database: create all tables.
Run with: python -m scripts.init_db
"""

import asyncio
import logging
from labmanager.config import get_settings
from labmanager.database import engine, Base
from labmanager.logging_config import configure_logging
import labmanager.models  # noqa: F401

logger = logging.getLogger("scripts.init_db")


async def init():
    logger.info("Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("All tables created: %s", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    asyncio.run(init())
