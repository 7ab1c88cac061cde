"""
Notification events.

Plain data handed to a notifier after a unit of work commits.
"""

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any


class NotificationKind(StrEnum):
    """What happened."""

    INVESTMENT_STARTED = "INVESTMENT_STARTED"
    INVESTMENT_COMPLETED = "INVESTMENT_COMPLETED"
    REFERRAL_COMMISSION = "REFERRAL_COMMISSION"
    DEPOSIT_REQUESTED = "DEPOSIT_REQUESTED"  # admin
    DEPOSIT_APPROVED = "DEPOSIT_APPROVED"
    DEPOSIT_REJECTED = "DEPOSIT_REJECTED"
    WITHDRAWAL_REQUESTED = "WITHDRAWAL_REQUESTED"  # admin
    WITHDRAWAL_APPROVED = "WITHDRAWAL_APPROVED"
    WITHDRAWAL_REJECTED = "WITHDRAWAL_REJECTED"
    BALANCE_ADJUSTED = "BALANCE_ADJUSTED"


@dataclass(frozen=True)
class NotificationEvent:
    """
    Notification payload.

    Attributes:
        kind: Event kind
        recipient_email: Destination (None for admin events with no admin
            address configured; such events are only logged)
        recipient_name: Display name for templates
        amounts: Money values in cents keyed by role, e.g. {"profit": 2500}
        context: Extra JSON-safe identifiers (investment_id, plan name, ...)
    """

    kind: NotificationKind
    recipient_email: str | None
    recipient_name: str | None = None
    amounts: dict[str, int] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe form for queue transport."""
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationEvent":
        return cls(
            kind=NotificationKind(data["kind"]),
            recipient_email=data.get("recipient_email"),
            recipient_name=data.get("recipient_name"),
            amounts=dict(data.get("amounts") or {}),
            context=dict(data.get("context") or {}),
        )
