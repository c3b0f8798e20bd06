"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.conf import settings
from django.db import models

from checkin.domain.value_objects import (
    AuditEntityType,
    AuditEventType,
    CheckInStatus,
    ConfigurationKey,
    PaymentMethod,
    ScanOperation,
    TicketStatus,
)


def new_identifier() -> str:
    return str(uuid.uuid4())


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value) for member in enum_cls]


class Event(models.Model):
    """Persistence model for events."""

    short_name = models.CharField(max_length=128, unique=True)
    display_name = models.CharField(max_length=255)
    private_key = models.CharField(max_length=255)
    time_zone = models.CharField(max_length=64, default="UTC")
    currency = models.CharField(max_length=3)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.short_name


class TicketCategory(models.Model):
    """Persistence model for ticket categories."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="categories")
    name = models.CharField(max_length=255)
    valid_check_in_from = models.DateTimeField(blank=True, null=True)
    valid_check_in_to = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return self.name


class Reservation(models.Model):
    """Persistence model for reservations."""

    id = models.CharField(primary_key=True, max_length=64, default=new_identifier, editable=False)
    payment_method = models.CharField(
        max_length=16, choices=_choices(PaymentMethod), default=PaymentMethod.NONE.value
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.id


class Ticket(models.Model):
    """Persistence model for tickets."""

    uuid = models.CharField(max_length=64, unique=True, default=new_identifier)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    category = models.ForeignKey(TicketCategory, on_delete=models.PROTECT, related_name="tickets")
    reservation = models.ForeignKey(Reservation, on_delete=models.PROTECT, related_name="tickets")
    status = models.CharField(
        max_length=16, choices=_choices(TicketStatus), default=TicketStatus.FREE.value
    )
    final_price_cts = models.PositiveIntegerField(default=0)
    first_name = models.CharField(max_length=255, blank=True, null=True)
    last_name = models.CharField(max_length=255, blank=True, null=True)
    full_name = models.CharField(max_length=255, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    locked_assignment = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["event", "status"], name="ticket_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.uuid} ({self.status})"


class TicketFieldValue(models.Model):
    """Additional attendee information collected for a ticket."""

    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="field_values")
    name = models.CharField(max_length=255)
    value = models.TextField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["ticket", "name"], name="unique_ticket_field"),
        ]


class ScanAudit(models.Model):
    """Append-only trail of scans, manual check-ins and reverts."""

    ticket_uuid = models.CharField(max_length=64)
    event_id = models.IntegerField()
    scanned_at = models.DateTimeField()
    username = models.CharField(max_length=150)
    check_in_status = models.CharField(max_length=48, choices=_choices(CheckInStatus))
    operation = models.CharField(max_length=16, choices=_choices(ScanOperation))

    class Meta:
        indexes = [
            models.Index(fields=["event_id", "ticket_uuid"], name="scan_event_ticket_idx"),
        ]


class AuditLog(models.Model):
    """Append-only domain audit trail."""

    reservation_id = models.CharField(max_length=64)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, blank=True, null=True
    )
    event_id = models.IntegerField()
    event_type = models.CharField(max_length=32, choices=_choices(AuditEventType))
    created_at = models.DateTimeField()
    entity_type = models.CharField(max_length=16, choices=_choices(AuditEntityType))
    entity_id = models.CharField(max_length=64)


class EventConfiguration(models.Model):
    """Per-event override of a feature flag."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="configuration")
    key = models.CharField(max_length=64, choices=_choices(ConfigurationKey))
    enabled = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "key"], name="unique_event_configuration"),
        ]


class PaymentTransaction(models.Model):
    """Payment registered for a reservation."""

    reservation = models.ForeignKey(Reservation, on_delete=models.PROTECT, related_name="transactions")
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="transactions")
    payment_method = models.CharField(max_length=16, choices=_choices(PaymentMethod))
    amount_cts = models.PositiveIntegerField()
    currency = models.CharField(max_length=3)
    created_at = models.DateTimeField(auto_now_add=True)
