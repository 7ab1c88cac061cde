"""
Business and operational constants.

Central location for ledger rules used across services and jobs.
All money is integer USD cents, all rates are integer basis points.
"""

# =============================================================================
# UNITS
# =============================================================================

# 1 bps = 0.01%, so a rate in bps is divided by this to get a fraction
BPS_DENOMINATOR = 10_000

CENTS_PER_DOLLAR = 100

SECONDS_PER_DAY = 24 * 60 * 60


# =============================================================================
# ASSETS & NETWORKS
# =============================================================================

SUPPORTED_ASSETS = ("BTC", "ETH", "USDT")

# Only USDT is routed over a sub-network; BTC/ETH addresses have no network
NETWORK_ASSETS = ("USDT",)
SUPPORTED_NETWORKS = ("TRC20", "BEP20", "ERC20")

# Asset recorded on internal ledger rows (USD-equivalent)
LEDGER_ASSET = "USDT"


# =============================================================================
# REFERRALS
# =============================================================================

# Commissions never cascade beyond two hops
REFERRAL_MAX_LEVEL = 2

# Singleton platform settings row
PLATFORM_SETTINGS_ID = 1


# =============================================================================
# LEDGER REFERENCES
# =============================================================================

ADMIN_ADJUSTMENT_REFERENCE = "ADMIN_ADJUSTMENT"
DEFAULT_DEPOSIT_REJECT_REASON = "Deposit rejected by admin"
DEFAULT_WITHDRAWAL_REJECT_REASON = "Withdrawal rejected by admin"


# =============================================================================
# DISTRIBUTED LOCKS
# =============================================================================

ACCRUAL_LOCK_KEY = "ledger:accrual_pass"
DEFAULT_LOCK_TIMEOUT_SECONDS = 60


# =============================================================================
# DRAMATIQ TIME LIMITS (milliseconds)
# =============================================================================

DRAMATIQ_TIME_LIMIT_ACCRUAL = 900_000  # 15 min
DRAMATIQ_TIME_LIMIT_NOTIFICATION = 60_000  # 1 min


# =============================================================================
# LISTING LIMITS
# =============================================================================

ADMIN_QUEUE_LIMIT = 200
REFERRAL_LEADERBOARD_LIMIT = 20
