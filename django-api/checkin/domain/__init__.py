from checkin.domain.models import (
    AuditEvent,
    Event,
    FullTicketInfo,
    Reservation,
    ScanAuditEntry,
    Ticket,
    TicketCategory,
)
from checkin.domain.outcomes import CheckInOutcome
from checkin.domain.value_objects import (
    AuditEntityType,
    AuditEventType,
    CheckInStatus,
    ConfigurationKey,
    Money,
    PaymentMethod,
    ScanOperation,
    TicketStatus,
)

__all__ = [
    "Event",
    "Ticket",
    "TicketCategory",
    "Reservation",
    "FullTicketInfo",
    "ScanAuditEntry",
    "AuditEvent",
    "CheckInOutcome",
    "CheckInStatus",
    "TicketStatus",
    "PaymentMethod",
    "ScanOperation",
    "AuditEventType",
    "AuditEntityType",
    "ConfigurationKey",
    "Money",
]
