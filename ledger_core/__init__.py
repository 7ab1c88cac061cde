"""
Capital ledger core.

Balance guard, investment lifecycle, yield accrual, referral commissions
and deposit/withdrawal request workflows.
"""

__version__ = "1.0.0"
