#!/usr/bin/env python3
"""
Audit affiliate earnings.

Reports affiliate programs whose earnings do not add up
(total != pending + paid) or contain a negative value. Read-only.

Usage:
    python scripts/audit_affiliate_earnings.py
"""

import asyncio
import sys
from pathlib import Path


# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool

from tradehub.config.settings import settings
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.utils.database import (
    create_engine,
    create_session_maker,
    session_scope,
)
from tradehub.utils.logging import setup_logging


async def find_drift(session: AsyncSession) -> list[dict]:
    """
    Collect inconsistent programs.

    Args:
        session: Database session

    Returns:
        One dict per inconsistent program
    """
    repo = AffiliateProgramRepository(session)
    programs = await repo.find_inconsistent()

    return [
        {
            "affiliate_program_id": program.id,
            "affiliate_code": program.affiliate_code,
            "total_earnings": program.total_earnings,
            "pending_earnings": program.pending_earnings,
            "paid_earnings": program.paid_earnings,
            "drift": program.earnings_drift,
        }
        for program in programs
    ]


async def audit_affiliate_earnings() -> int:
    """Run the audit and return the number of inconsistent programs."""
    logger.info("Starting affiliate earnings audit...")

    engine = create_engine(poolclass=NullPool)
    session_maker = create_session_maker(engine)

    try:
        async with session_scope(session_maker) as session:
            rows = await find_drift(session)
    finally:
        await engine.dispose()

    for row in rows:
        logger.warning(
            f"Program {row['affiliate_program_id']} ({row['affiliate_code']}): "
            f"total={row['total_earnings']} pending={row['pending_earnings']} "
            f"paid={row['paid_earnings']} drift={row['drift']}"
        )

    if rows:
        logger.error(f"Found {len(rows)} inconsistent affiliate programs")
    else:
        logger.success("All affiliate earnings are consistent")

    return len(rows)


if __name__ == "__main__":
    setup_logging(settings.log_level)
    sys.exit(1 if asyncio.run(audit_affiliate_earnings()) else 0)
