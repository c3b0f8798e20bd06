"""Domain models representing persisted state.

These are pure domain objects with no persistence rules.
Django ORM models are in checkin/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from checkin.domain.value_objects import (
    AuditEntityType,
    AuditEventType,
    CheckInStatus,
    PaymentMethod,
    ScanOperation,
    TicketStatus,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: int
    short_name: str
    private_key: str
    time_zone: str
    currency: str

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)


@dataclass(frozen=True)
class TicketCategory:
    """Domain representation of a TicketCategory.

    The check-in bounds are aware datetimes; either may be missing, meaning the
    window is open on that side.
    """

    id: int
    event_id: int
    name: str
    valid_check_in_from: datetime | None = None
    valid_check_in_to: datetime | None = None

    def valid_check_in_from_in(self, zone: ZoneInfo) -> datetime | None:
        if self.valid_check_in_from is None:
            return None
        return self.valid_check_in_from.astimezone(zone)

    def valid_check_in_to_in(self, zone: ZoneInfo) -> datetime | None:
        if self.valid_check_in_to is None:
            return None
        return self.valid_check_in_to.astimezone(zone)

    def has_valid_check_in(self, now: datetime, zone: ZoneInfo) -> bool:
        """Both bounds are inclusive."""
        start = self.valid_check_in_from_in(zone)
        end = self.valid_check_in_to_in(zone)
        return (start is None or start <= now) and (end is None or end >= now)


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a Reservation."""

    id: str
    payment_method: PaymentMethod


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a Ticket."""

    id: int
    uuid: str
    event_id: int
    category_id: int
    reservation_id: str
    status: TicketStatus
    final_price_cts: int
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    email: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class FullTicketInfo:
    """A ticket together with its category."""

    ticket: Ticket
    category: TicketCategory


@dataclass(frozen=True)
class ScanAuditEntry:
    """Append-only record of a scan, manual check-in or revert."""

    ticket_uuid: str
    event_id: int
    scanned_at: datetime
    username: str
    status: CheckInStatus
    operation: ScanOperation


@dataclass(frozen=True)
class AuditEvent:
    """Append-only domain audit record."""

    reservation_id: str
    username: str
    event_id: int
    event_type: AuditEventType
    created_at: datetime
    entity_id: str
    entity_type: AuditEntityType = AuditEntityType.TICKET
