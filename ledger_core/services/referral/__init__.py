"""Referral commission cascade and statistics."""

from ledger_core.services.referral.cascader import (
    Commission,
    ReferralCommissionCascader,
)
from ledger_core.services.referral.statistics import (
    ReferralStatsService,
    ReferralSummary,
)

__all__ = [
    "Commission",
    "ReferralCommissionCascader",
    "ReferralStatsService",
    "ReferralSummary",
]
