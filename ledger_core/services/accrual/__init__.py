"""Yield accrual: calculations, engine and legacy repair."""

from ledger_core.services.accrual.calculator import (
    AccrualStep,
    calculate_daily_profit,
    calculate_profit,
    plan_accrual_step,
)
from ledger_core.services.accrual.engine import (
    AccrualReport,
    InvestmentAccrual,
    YieldAccrualEngine,
)
from ledger_core.services.accrual.legacy_repair import (
    LegacyInvestmentRepair,
    RepairReport,
)

__all__ = [
    "AccrualReport",
    "AccrualStep",
    "InvestmentAccrual",
    "LegacyInvestmentRepair",
    "RepairReport",
    "YieldAccrualEngine",
    "calculate_daily_profit",
    "calculate_profit",
    "plan_accrual_step",
]
