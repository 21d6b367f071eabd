#!/usr/bin/env python3
"""Initialize affiliate database tables."""

import asyncio
import sys
from pathlib import Path


# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from tradehub.models import Base
from tradehub.utils.database import create_engine


# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database(database_url: str | None = None) -> None:
    """Create all affiliate tables (existing ones are kept)."""
    logger.info("Connecting to database...")
    engine = create_engine(database_url, echo=False)

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables (checkfirst=True)...")
            await conn.run_sync(
                Base.metadata.create_all,
                checkfirst=True
            )
    finally:
        await engine.dispose()

    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database(sys.argv[1] if len(sys.argv) > 1 else None))
