"""
Plan resolution.

Users refer to plans loosely ("Premium", "premium_plan", " VIP  Members ").
The resolver maps such input to one catalog plan.
"""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.plan import Plan
from ledger_core.repositories.plan_repository import PlanRepository
from ledger_core.utils.exceptions import PlanInactive, PlanNotFound

_SEPARATORS = re.compile(r"[\s_]+")
_DASH_RUNS = re.compile(r"-{2,}")
_PLAN_SUFFIX = "-plan"


def normalize_plan_slug(value: str) -> str:
    """
    Canonical slug form.

    Examples:
        >>> normalize_plan_slug("  Joint_Portfolio ")
        'joint-portfolio'
        >>> normalize_plan_slug("--VIP   Members--")
        'vip-members'
    """
    slug = value.strip().lower()
    slug = _SEPARATORS.sub("-", slug)
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-")


def slug_candidates(value: str) -> set[str]:
    """Raw input, normalised slug, and the slug with/without ``-plan``."""
    raw = value.strip()
    normalized = normalize_plan_slug(value)
    candidates = {raw, normalized}
    if normalized.endswith(_PLAN_SUFFIX):
        candidates.add(normalized[: -len(_PLAN_SUFFIX)])
    else:
        candidates.add(f"{normalized}{_PLAN_SUFFIX}")
    return {c for c in candidates if c}


class PlanResolver:
    """Resolves free-form plan references."""

    def __init__(self, session: AsyncSession) -> None:
        self.plan_repo = PlanRepository(session)

    async def resolve(self, plan_slug_or_name: str) -> Plan:
        """
        Find the plan for user input.

        Raises:
            PlanNotFound: Nothing matches
            PlanInactive: Only inactive plans match
        """
        raw = (plan_slug_or_name or "").strip()
        if not raw:
            raise PlanNotFound("Plan is required")

        matches = await self.plan_repo.find_matching(slug_candidates(raw), raw)
        if not matches:
            raise PlanNotFound(f"Plan '{raw}' not found")

        for plan in matches:
            if plan.is_active:
                return plan
        raise PlanInactive(f"Plan '{matches[0].name}' is not active")
