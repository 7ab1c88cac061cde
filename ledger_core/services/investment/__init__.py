"""Investment lifecycle and plan resolution."""

from ledger_core.services.investment.lifecycle import (
    InvestmentLifecycleManager,
)
from ledger_core.services.investment.plan_resolver import (
    PlanResolver,
    normalize_plan_slug,
    slug_candidates,
)

__all__ = [
    "InvestmentLifecycleManager",
    "PlanResolver",
    "normalize_plan_slug",
    "slug_candidates",
]
