#!/usr/bin/env python3
"""Backfill end_date on legacy investments and complete the overdue ones."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from ledger_core.config.database import async_session_maker
from ledger_core.services.accrual import LegacyInvestmentRepair

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def repair() -> None:
    async with async_session_maker() as session:
        report = await LegacyInvestmentRepair(session).run()

    logger.info(
        f"Backfilled {report.backfilled}, completed {report.completed}, "
        f"failed {report.failed}"
    )
    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(repair())
