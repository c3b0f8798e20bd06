"""In-memory implementation of the check-in stores.

Used by unit tests and local tooling. Each ticket has its own re-entrant lock and
every write done inside ``locked`` is undone if the block raises.
"""

import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

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
from checkin.domain.value_objects import ASSIGNED_STATUSES
from checkin.stores.interfaces import (
    AuditStore,
    ConfigurationStore,
    EventStore,
    PaymentGateway,
    TicketStore,
)


@dataclass
class MemoryDatabase:
    """Shared tables for the in-memory stores."""

    events: dict[int, Event] = field(default_factory=dict)
    categories: dict[int, TicketCategory] = field(default_factory=dict)
    reservations: dict[str, Reservation] = field(default_factory=dict)
    tickets: dict[str, Ticket] = field(default_factory=dict)
    category_locks: dict[int, bool] = field(default_factory=dict)
    field_values: dict[int, dict[str, str]] = field(default_factory=dict)
    scans: list[ScanAuditEntry] = field(default_factory=list)
    audit_events: list[AuditEvent] = field(default_factory=list)
    flags: dict[tuple[int, ConfigurationKey], bool] = field(default_factory=dict)
    payments: list[tuple[int, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._guard = threading.Lock()
        self._row_locks: dict[str, threading.RLock] = {}
        self._local = threading.local()

    def add_event(self, event: Event) -> Event:
        self.events[event.id] = event
        return event

    def add_category(self, category: TicketCategory) -> TicketCategory:
        self.categories[category.id] = category
        return category

    def add_reservation(self, reservation: Reservation) -> Reservation:
        self.reservations[reservation.id] = reservation
        return reservation

    def add_ticket(self, ticket: Ticket, fields: dict[str, str] | None = None) -> Ticket:
        self.tickets[ticket.uuid] = ticket
        if fields:
            self.field_values[ticket.id] = dict(fields)
        return ticket

    def row_lock(self, key: str) -> threading.RLock:
        with self._guard:
            return self._row_locks.setdefault(key, threading.RLock())

    @contextmanager
    def transaction(self) -> Iterator[None]:
        depth = getattr(self._local, "depth", 0)
        if depth == 0:
            self._local.undo = []
        self._local.depth = depth + 1
        try:
            yield
        except BaseException:
            if depth == 0:
                for action in reversed(self._local.undo):
                    action()
            raise
        finally:
            self._local.depth = depth

    def write(self, apply: Callable[[], None], undo: Callable[[], None]) -> None:
        with self._guard:
            apply()
        if getattr(self._local, "depth", 0):
            self._local.undo.append(undo)


class MemoryEventStore(EventStore):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def get_event(self, event_id: int) -> Event | None:
        return self._db.events.get(event_id)

    def get_event_by_short_name(self, short_name: str) -> Event | None:
        return next((e for e in self._db.events.values() if e.short_name == short_name), None)

    def get_category(self, category_id: int) -> TicketCategory | None:
        return self._db.categories.get(category_id)


class MemoryTicketStore(TicketStore):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def find_by_uuid(self, ticket_uuid: str) -> Ticket | None:
        return self._db.tickets.get(ticket_uuid)

    @contextmanager
    def locked(self, ticket_uuid: str) -> Iterator[Ticket | None]:
        with self._db.row_lock(ticket_uuid), self._db.transaction():
            yield self._db.tickets.get(ticket_uuid)

    def update_status(self, ticket_uuid: str, status: TicketStatus) -> None:
        tickets = self._db.tickets
        previous = tickets[ticket_uuid]
        updated = replace(previous, status=status, updated_at=datetime.now(timezone.utc))
        self._db.write(
            lambda: tickets.__setitem__(ticket_uuid, updated),
            lambda: tickets.__setitem__(ticket_uuid, previous),
        )

    def toggle_category_lock(self, ticket_id: int, category_id: int, locked: bool) -> None:
        locks = self._db.category_locks
        previous = locks.get(ticket_id, False)
        self._db.write(
            lambda: locks.__setitem__(ticket_id, locked),
            lambda: locks.__setitem__(ticket_id, previous),
        )

    def find_reservation(self, reservation_id: str) -> Reservation | None:
        return self._db.reservations.get(reservation_id)

    def _assigned(self, event_id: int) -> list[Ticket]:
        return sorted(
            (
                t
                for t in self._db.tickets.values()
                if t.event_id == event_id and t.status in ASSIGNED_STATUSES and t.email
            ),
            key=lambda t: t.id,
        )

    def find_assigned_ids(self, event_id: int, changed_since: datetime | None) -> list[int]:
        return [
            t.id
            for t in self._assigned(event_id)
            if changed_since is None or (t.updated_at is not None and t.updated_at >= changed_since)
        ]

    def find_assigned(self, event_id: int, ids: Iterable[int] | None = None) -> list[FullTicketInfo]:
        wanted = None if ids is None else set(ids)
        return [
            FullTicketInfo(ticket=t, category=self._db.categories[t.category_id])
            for t in self._assigned(event_id)
            if wanted is None or t.id in wanted
        ]

    def find_field_values(self, ticket_id: int, names: Iterable[str]) -> dict[str, str]:
        values = self._db.field_values.get(ticket_id, {})
        return {name: values[name] for name in names if name in values}


class MemoryAuditStore(AuditStore):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def insert_scan(self, entry: ScanAuditEntry) -> None:
        scans = self._db.scans
        self._db.write(lambda: scans.append(entry), lambda: scans.remove(entry))

    def insert_event(self, entry: AuditEvent) -> None:
        events = self._db.audit_events
        self._db.write(lambda: events.append(entry), lambda: events.remove(entry))


class MemoryConfigurationStore(ConfigurationStore):
    def __init__(self, db: MemoryDatabase, defaults: dict[ConfigurationKey, bool] | None = None) -> None:
        self._db = db
        self._defaults = defaults or {}

    def are_enabled_for_event(self, event: Event, *keys: ConfigurationKey) -> bool:
        return all(
            self._db.flags.get((event.id, key), self._defaults.get(key, False)) for key in keys
        )


class MemoryPaymentGateway(PaymentGateway):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def register_on_site_transaction(self, event: Event, reservation_id: str) -> None:
        payments = self._db.payments
        record = (event.id, reservation_id)
        self._db.write(lambda: payments.append(record), lambda: payments.remove(record))
