"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Self


class TicketStatus(Enum):
    """Lifecycle states of a ticket."""

    FREE = "FREE"
    PENDING = "PENDING"
    TO_BE_PAID = "TO_BE_PAID"
    ACQUIRED = "ACQUIRED"
    CANCELLED = "CANCELLED"
    CHECKED_IN = "CHECKED_IN"
    EXPIRED = "EXPIRED"
    INVALIDATED = "INVALIDATED"
    RELEASED = "RELEASED"
    PRE_RESERVED = "PRE_RESERVED"


# Statuses of tickets that have an attendee and may show up at the entrance.
ASSIGNED_STATUSES = frozenset(
    {TicketStatus.ACQUIRED, TicketStatus.CHECKED_IN, TicketStatus.TO_BE_PAID}
)


class CheckInStatus(Enum):
    """Verdicts returned by a check-in attempt."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    EMPTY_TICKET_CODE = "EMPTY_TICKET_CODE"
    INVALID_TICKET_CODE = "INVALID_TICKET_CODE"
    INVALID_TICKET_STATE = "INVALID_TICKET_STATE"
    INVALID_TICKET_CATEGORY_CHECK_IN_DATE = "INVALID_TICKET_CATEGORY_CHECK_IN_DATE"
    ALREADY_CHECK_IN = "ALREADY_CHECK_IN"
    MUST_PAY = "MUST_PAY"
    OK_READY_TO_BE_CHECKED_IN = "OK_READY_TO_BE_CHECKED_IN"
    SUCCESS = "SUCCESS"


class PaymentMethod(Enum):
    """How a reservation was (or will be) paid."""

    STRIPE = "STRIPE"
    ON_SITE = "ON_SITE"
    OFFLINE = "OFFLINE"
    NONE = "NONE"
    ADMIN = "ADMIN"
    PAYPAL = "PAYPAL"


class ScanOperation(Enum):
    SCAN = "SCAN"
    REVERT = "REVERT"
    MANUAL = "MANUAL"


class AuditEventType(Enum):
    CHECK_IN = "CHECK_IN"
    MANUAL_CHECK_IN = "MANUAL_CHECK_IN"
    REVERT_CHECK_IN = "REVERT_CHECK_IN"


class AuditEntityType(Enum):
    TICKET = "TICKET"


class ConfigurationKey(Enum):
    """Per-event feature flags."""

    SCANNER_INTEGRATION_ENABLED = "SCANNER_INTEGRATION_ENABLED"
    OFFLINE_CHECKIN_ENABLED = "OFFLINE_CHECKIN_ENABLED"
    LABEL_PRINTING_ENABLED = "LABEL_PRINTING_ENABLED"


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def from_cents(cls, cents: int) -> Self:
        return cls(amount=(Decimal(cents) / 100).quantize(Decimal("0.01")))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"
