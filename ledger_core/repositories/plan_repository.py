"""
Plan repository.

Data access layer for Plan model.
"""

from collections.abc import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.plan import Plan
from ledger_core.repositories.base import BaseRepository


class PlanRepository(BaseRepository[Plan]):
    """Plan repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize plan repository."""
        super().__init__(Plan, session)

    async def get_by_slug(self, slug: str) -> Plan | None:
        return await self.get_by(slug=slug)

    async def find_matching(
        self, slug_candidates: Iterable[str], name: str
    ) -> list[Plan]:
        """
        Plans whose slug matches any candidate or whose name matches
        ``name``, both case-insensitively.

        Returns:
            Matches, active plans first
        """
        candidates = sorted({c.lower() for c in slug_candidates if c})
        conditions = [func.lower(Plan.name) == name.lower()]
        if candidates:
            conditions.append(func.lower(Plan.slug).in_(candidates))

        stmt = (
            select(Plan)
            .where(or_(*conditions))
            .order_by(Plan.is_active.desc(), Plan.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
