"""Pytest configuration and shared fixtures."""

import itertools
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from rest_framework.test import APIClient

from checkin import models
from checkin.domain import Event, PaymentMethod, Reservation, Ticket, TicketCategory, TicketStatus
from checkin.services import CheckInService, OfflineExportService
from checkin.stores.memory_store import (
    MemoryAuditStore,
    MemoryConfigurationStore,
    MemoryDatabase,
    MemoryEventStore,
    MemoryPaymentGateway,
    MemoryTicketStore,
)

ZURICH = ZoneInfo("Europe/Zurich")


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 19, 9, 30, tzinfo=ZURICH)


@pytest.fixture
def event() -> Event:
    return Event(
        id=1,
        short_name="devconf",
        private_key="event-private-key",
        time_zone="Europe/Zurich",
        currency="EUR",
    )


@pytest.fixture
def category(event: Event) -> TicketCategory:
    return TicketCategory(id=10, event_id=event.id, name="Standard")


@pytest.fixture
def ticket_factory(event: Event, category: TicketCategory):
    counter = itertools.count(100)

    def build(**overrides) -> Ticket:
        number = next(counter)
        values = dict(
            id=number,
            uuid=f"ticket-{number}",
            event_id=event.id,
            category_id=category.id,
            reservation_id=f"reservation-{number}",
            status=TicketStatus.ACQUIRED,
            final_price_cts=1500,
            first_name="Ada",
            last_name="Lovelace",
            full_name="Ada Lovelace",
            email="ada@example.org",
        )
        values.update(overrides)
        return Ticket(**values)

    return build


@pytest.fixture
def memory_db(event: Event, category: TicketCategory) -> MemoryDatabase:
    db = MemoryDatabase()
    db.add_event(event)
    db.add_category(category)
    return db


@pytest.fixture
def add_ticket(memory_db: MemoryDatabase, ticket_factory):
    """Store a ticket and its reservation in the in-memory database."""

    def add(payment_method: PaymentMethod = PaymentMethod.STRIPE, fields=None, **overrides) -> Ticket:
        ticket = ticket_factory(**overrides)
        memory_db.add_reservation(Reservation(id=ticket.reservation_id, payment_method=payment_method))
        return memory_db.add_ticket(ticket, fields)

    return add


@pytest.fixture
def service(memory_db: MemoryDatabase, now: datetime) -> CheckInService:
    return CheckInService(
        events=MemoryEventStore(memory_db),
        tickets=MemoryTicketStore(memory_db),
        audit=MemoryAuditStore(memory_db),
        payments=MemoryPaymentGateway(memory_db),
        clock=lambda: now,
    )


@pytest.fixture
def export_service(memory_db: MemoryDatabase) -> OfflineExportService:
    return OfflineExportService(
        events=MemoryEventStore(memory_db),
        tickets=MemoryTicketStore(memory_db),
        configuration=MemoryConfigurationStore(memory_db),
    )


# ORM fixtures


@pytest.fixture
def db_event(db):
    return models.Event.objects.create(
        short_name="devconf",
        display_name="DevConf",
        private_key="event-private-key",
        time_zone="Europe/Zurich",
        currency="EUR",
    )


@pytest.fixture
def db_category(db_event):
    return models.TicketCategory.objects.create(event=db_event, name="Standard")


@pytest.fixture
def db_ticket_factory(db_event, db_category):
    """Create a reservation and an assigned ticket in the database."""

    def create(payment_method=PaymentMethod.STRIPE, status=TicketStatus.ACQUIRED, **overrides):
        reservation = models.Reservation.objects.create(payment_method=payment_method.value)
        values = dict(
            event=db_event,
            category=db_category,
            reservation=reservation,
            status=status.value,
            final_price_cts=1500,
            first_name="Ada",
            last_name="Lovelace",
            full_name="Ada Lovelace",
            email="ada@example.org",
        )
        values.update(overrides)
        return models.Ticket.objects.create(**values)

    return create
