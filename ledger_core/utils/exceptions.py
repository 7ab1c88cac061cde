"""
Domain exceptions.

Every business failure raised by the services is a ``LedgerError`` carrying
a stable ``code`` and a human-readable message. Infrastructure errors
(``sqlalchemy.exc.SQLAlchemyError``) are not wrapped and propagate as-is.
"""


class LedgerError(Exception):
    """Base class for business errors."""

    code = "LEDGER_ERROR"
    default_message = "Ledger operation failed"

    def __init__(self, message: str | None = None, **context) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializable form for API layers."""
        return {"code": self.code, "message": self.message, **self.context}


# =============================================================================
# Validation
# =============================================================================


class ValidationError(LedgerError):
    """Input rejected before touching any state."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class InvalidAmount(ValidationError):
    code = "INVALID_AMOUNT"
    default_message = "Amount must be a positive number"


class InvalidAction(ValidationError):
    code = "INVALID_ACTION"
    default_message = "Action must be DEPOSIT or WITHDRAW"


class UnsupportedAsset(ValidationError):
    code = "UNSUPPORTED_ASSET"
    default_message = "Unsupported asset"


class InvalidNetwork(ValidationError):
    code = "INVALID_NETWORK"
    default_message = "A supported network is required for this asset"


class AmountBelowMinimum(ValidationError):
    code = "AMOUNT_BELOW_MINIMUM"
    default_message = "Amount is below the plan minimum"


class AmountAboveMaximum(ValidationError):
    code = "AMOUNT_ABOVE_MAXIMUM"
    default_message = "Amount is above the plan maximum"


class PlanInactive(ValidationError):
    code = "PLAN_INACTIVE"
    default_message = "Plan is not active"


# =============================================================================
# State conflicts
# =============================================================================


class StateConflictError(LedgerError):
    """Operation conflicts with the current state."""

    code = "STATE_CONFLICT"
    default_message = "Operation conflicts with current state"


class NotPending(StateConflictError):
    code = "NOT_PENDING"
    default_message = "Request is not pending"


class PlanAlreadyUsed(StateConflictError):
    code = "PLAN_ALREADY_USED"
    default_message = "This plan has already been used by the user"


class InsufficientBalance(StateConflictError):
    code = "INSUFFICIENT_BALANCE"
    default_message = "Insufficient balance"


class InsufficientAvailableBalance(StateConflictError):
    code = "INSUFFICIENT_AVAILABLE_BALANCE"
    default_message = "Insufficient available balance (pending withdrawals)"


class NoSavedAddress(StateConflictError):
    code = "NO_SAVED_ADDRESS"
    default_message = "No saved wallet address for this asset"


# =============================================================================
# Not found
# =============================================================================


class NotFoundError(LedgerError):
    code = "NOT_FOUND"
    default_message = "Entity not found"


class NotFound(NotFoundError):
    pass


class PlanNotFound(NotFoundError):
    code = "PLAN_NOT_FOUND"
    default_message = "Plan not found"


class UserNotFound(NotFoundError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"
