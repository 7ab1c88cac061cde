"""
Repositories.

Data access layer. Repositories flush, callers commit.
"""

from ledger_core.repositories.base import BaseRepository
from ledger_core.repositories.investment_repository import InvestmentRepository
from ledger_core.repositories.plan_repository import PlanRepository
from ledger_core.repositories.platform_settings_repository import (
    PlatformConfig,
    PlatformSettingsRepository,
)
from ledger_core.repositories.referral_earning_repository import (
    LeaderboardRow,
    ReferralEarningRepository,
)
from ledger_core.repositories.transaction_repository import (
    TransactionRepository,
)
from ledger_core.repositories.user_repository import UserRepository
from ledger_core.repositories.wallet_address_repository import (
    WalletAddressRepository,
)
from ledger_core.repositories.withdrawal_repository import (
    WithdrawalRepository,
)

__all__ = [
    "BaseRepository",
    "InvestmentRepository",
    "LeaderboardRow",
    "PlanRepository",
    "PlatformConfig",
    "PlatformSettingsRepository",
    "ReferralEarningRepository",
    "TransactionRepository",
    "UserRepository",
    "WalletAddressRepository",
    "WithdrawalRepository",
]
