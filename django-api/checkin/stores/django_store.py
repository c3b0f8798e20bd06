"""Django ORM implementation of the check-in stores.

Row locks are taken with ``select_for_update`` inside ``transaction.atomic``;
every store call made while the block is open joins the same transaction.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from checkin import models
from checkin.domain import (
    AuditEvent,
    ConfigurationKey,
    Event,
    FullTicketInfo,
    PaymentMethod,
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


def to_event(row: models.Event) -> Event:
    return Event(
        id=row.id,
        short_name=row.short_name,
        private_key=row.private_key,
        time_zone=row.time_zone,
        currency=row.currency,
    )


def to_category(row: models.TicketCategory) -> TicketCategory:
    return TicketCategory(
        id=row.id,
        event_id=row.event_id,
        name=row.name,
        valid_check_in_from=row.valid_check_in_from,
        valid_check_in_to=row.valid_check_in_to,
    )


def to_ticket(row: models.Ticket) -> Ticket:
    return Ticket(
        id=row.id,
        uuid=row.uuid,
        event_id=row.event_id,
        category_id=row.category_id,
        reservation_id=row.reservation_id,
        status=TicketStatus(row.status),
        final_price_cts=row.final_price_cts,
        first_name=row.first_name,
        last_name=row.last_name,
        full_name=row.full_name,
        email=row.email,
        updated_at=row.updated_at,
    )


def _assigned(event_id: int):
    return models.Ticket.objects.filter(
        event_id=event_id,
        status__in=[status.value for status in ASSIGNED_STATUSES],
        email__isnull=False,
    )


class DjangoEventStore(EventStore):
    """Event store backed by Django ORM."""

    def get_event(self, event_id: int) -> Event | None:
        row = models.Event.objects.filter(id=event_id).first()
        return to_event(row) if row else None

    def get_event_by_short_name(self, short_name: str) -> Event | None:
        row = models.Event.objects.filter(short_name=short_name).first()
        return to_event(row) if row else None

    def get_category(self, category_id: int) -> TicketCategory | None:
        row = models.TicketCategory.objects.filter(id=category_id).first()
        return to_category(row) if row else None


class DjangoTicketStore(TicketStore):
    """Ticket store backed by Django ORM."""

    def find_by_uuid(self, ticket_uuid: str) -> Ticket | None:
        row = models.Ticket.objects.filter(uuid=ticket_uuid).first()
        return to_ticket(row) if row else None

    @contextmanager
    def locked(self, ticket_uuid: str) -> Iterator[Ticket | None]:
        with transaction.atomic():
            row = models.Ticket.objects.select_for_update().filter(uuid=ticket_uuid).first()
            yield to_ticket(row) if row else None

    def update_status(self, ticket_uuid: str, status: TicketStatus) -> None:
        models.Ticket.objects.filter(uuid=ticket_uuid).update(
            status=status.value, updated_at=timezone.now()
        )

    def toggle_category_lock(self, ticket_id: int, category_id: int, locked: bool) -> None:
        models.Ticket.objects.filter(id=ticket_id, category_id=category_id).update(
            locked_assignment=locked
        )

    def find_reservation(self, reservation_id: str) -> Reservation | None:
        row = models.Reservation.objects.filter(id=reservation_id).first()
        if row is None:
            return None
        return Reservation(id=row.id, payment_method=PaymentMethod(row.payment_method))

    def find_assigned_ids(self, event_id: int, changed_since: datetime | None) -> list[int]:
        queryset = _assigned(event_id)
        if changed_since is not None:
            queryset = queryset.filter(updated_at__gte=changed_since)
        return list(queryset.order_by("id").values_list("id", flat=True))

    def find_assigned(self, event_id: int, ids: Iterable[int] | None = None) -> list[FullTicketInfo]:
        queryset = _assigned(event_id).select_related("category")
        if ids is not None:
            queryset = queryset.filter(id__in=list(ids))
        return [
            FullTicketInfo(ticket=to_ticket(row), category=to_category(row.category))
            for row in queryset.order_by("id")
        ]

    def find_field_values(self, ticket_id: int, names: Iterable[str]) -> dict[str, str]:
        rows = models.TicketFieldValue.objects.filter(ticket_id=ticket_id, name__in=list(names))
        return {row.name: row.value for row in rows}


class DjangoAuditStore(AuditStore):
    """Audit store backed by Django ORM."""

    def insert_scan(self, entry: ScanAuditEntry) -> None:
        models.ScanAudit.objects.create(
            ticket_uuid=entry.ticket_uuid,
            event_id=entry.event_id,
            scanned_at=entry.scanned_at,
            username=entry.username,
            check_in_status=entry.status.value,
            operation=entry.operation.value,
        )

    def insert_event(self, entry: AuditEvent) -> None:
        user_id = (
            get_user_model()
            .objects.filter(username=entry.username)
            .values_list("id", flat=True)
            .first()
        )
        models.AuditLog.objects.create(
            reservation_id=entry.reservation_id,
            user_id=user_id,
            event_id=entry.event_id,
            event_type=entry.event_type.value,
            created_at=entry.created_at,
            entity_type=entry.entity_type.value,
            entity_id=entry.entity_id,
        )


class DjangoConfigurationStore(ConfigurationStore):
    """Feature flags stored per event, falling back to ``CHECKIN_DEFAULT_FLAGS``."""

    def are_enabled_for_event(self, event: Event, *keys: ConfigurationKey) -> bool:
        overrides = dict(
            models.EventConfiguration.objects.filter(
                event_id=event.id, key__in=[key.value for key in keys]
            ).values_list("key", "enabled")
        )
        defaults = getattr(settings, "CHECKIN_DEFAULT_FLAGS", {})
        return all(overrides.get(key.value, defaults.get(key.value, False)) for key in keys)


class DjangoPaymentGateway(PaymentGateway):
    """Records on-site payments as transactions covering the whole reservation."""

    def register_on_site_transaction(self, event: Event, reservation_id: str) -> None:
        total = (
            models.Ticket.objects.filter(reservation_id=reservation_id)
            .aggregate(total=Sum("final_price_cts"))["total"]
            or 0
        )
        models.PaymentTransaction.objects.create(
            reservation_id=reservation_id,
            event_id=event.id,
            payment_method=PaymentMethod.ON_SITE.value,
            amount_cts=total,
            currency=event.currency,
        )
