#!/usr/bin/env python3
"""Seed platform settings (row id=1) and the default plan catalog."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from ledger_core.config.database import async_session_maker, unit_of_work
from ledger_core.repositories.plan_repository import PlanRepository
from ledger_core.repositories.platform_settings_repository import (
    PlatformSettingsRepository,
)

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")

# (name, slug, min USD, max USD, daily bps, duration days)
DEFAULT_PLANS = [
    ("Standard", "standard", 200, 1_999, 500, 5),
    ("Professional", "professional", 2_000, 29_900, 1_500, 5),
    ("Premium Members", "premium", 30_000, 300_000, 3_000, 5),
    ("VIP Members", "vip", 301_000, 1_000_000, 4_500, 5),
    ("Joint Portfolio", "joint-portfolio", 3_000, 100_000, 1_500, 10),
]


async def seed() -> None:
    """Upsert settings row and plans by slug."""
    async with async_session_maker() as session:
        async with unit_of_work(session):
            settings_repo = PlatformSettingsRepository(session)
            config = await settings_repo.load()
            logger.info(
                f"Settings row ready: level1={config.level1_bps} bps, "
                f"level2={config.level2_bps} bps"
            )

            plan_repo = PlanRepository(session)
            for name, slug, min_usd, max_usd, bps, days in DEFAULT_PLANS:
                values = {
                    "name": name,
                    "min_amount_cents": min_usd * 100,
                    "max_amount_cents": max_usd * 100,
                    "daily_roi_bps": bps,
                    "duration_days": days,
                    "is_active": True,
                }
                plan = await plan_repo.get_by_slug(slug)
                if plan is None:
                    await plan_repo.create(slug=slug, **values)
                    logger.info(f"Created plan {slug}")
                else:
                    await plan_repo.update(plan.id, **values)
                    logger.info(f"Updated plan {slug}")

    logger.success("Seed complete")


if __name__ == "__main__":
    asyncio.run(seed())
