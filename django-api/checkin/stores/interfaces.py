"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every write issued while a
``TicketStore.locked`` scope is open belongs to that scope's transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import datetime

from checkin.domain import (
    AuditEvent,
    ConfigurationKey,
    Event,
    FullTicketInfo,
    Reservation,
    ScanAuditEntry,
    Ticket,
    TicketCategory,
    TicketStatus,
)


class EventStore(ABC):
    """Interface for event and category lookups."""

    @abstractmethod
    def get_event(self, event_id: int) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def get_event_by_short_name(self, short_name: str) -> Event | None:
        """Return an event by its short name, or None if not found."""
        ...

    @abstractmethod
    def get_category(self, category_id: int) -> TicketCategory | None:
        """Return a ticket category by ID, or None if not found."""
        ...


class TicketStore(ABC):
    """Interface for ticket persistence operations."""

    @abstractmethod
    def find_by_uuid(self, ticket_uuid: str) -> Ticket | None:
        """Return a ticket without locking it, or None if not found."""
        ...

    @abstractmethod
    def locked(self, ticket_uuid: str) -> AbstractContextManager[Ticket | None]:
        """Open a transaction holding an exclusive lock on the ticket.

        Yields the ticket as read under the lock (None if it does not exist).
        The transaction commits when the block exits normally and rolls back
        when it raises.
        """
        ...

    @abstractmethod
    def update_status(self, ticket_uuid: str, status: TicketStatus) -> None:
        """Persist a new status for the ticket."""
        ...

    @abstractmethod
    def toggle_category_lock(self, ticket_id: int, category_id: int, locked: bool) -> None:
        """Mark the ticket as locked (or unlocked) within its category."""
        ...

    @abstractmethod
    def find_reservation(self, reservation_id: str) -> Reservation | None:
        """Return the reservation owning a ticket, or None if not found."""
        ...

    @abstractmethod
    def find_assigned_ids(self, event_id: int, changed_since: datetime | None) -> list[int]:
        """Return IDs of assigned tickets, optionally only those updated since a date."""
        ...

    @abstractmethod
    def find_assigned(self, event_id: int, ids: Iterable[int] | None = None) -> list[FullTicketInfo]:
        """Return assigned tickets of an event with their categories, ordered by ID."""
        ...

    @abstractmethod
    def find_field_values(self, ticket_id: int, names: Iterable[str]) -> dict[str, str]:
        """Return additional field values of a ticket restricted to ``names``."""
        ...


class AuditStore(ABC):
    """Interface for append-only audit trails."""

    @abstractmethod
    def insert_scan(self, entry: ScanAuditEntry) -> None:
        ...

    @abstractmethod
    def insert_event(self, entry: AuditEvent) -> None:
        ...


class ConfigurationStore(ABC):
    """Interface for per-event feature flags."""

    @abstractmethod
    def are_enabled_for_event(self, event: Event, *keys: ConfigurationKey) -> bool:
        """Return True only if every key is enabled for the event."""
        ...


class PaymentGateway(ABC):
    """Interface for recording payments collected outside the online checkout."""

    @abstractmethod
    def register_on_site_transaction(self, event: Event, reservation_id: str) -> None:
        """Record that the reservation was paid at the venue."""
        ...
