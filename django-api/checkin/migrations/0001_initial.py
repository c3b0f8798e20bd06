import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import checkin.models

PAYMENT_METHODS = [
    ("STRIPE", "STRIPE"),
    ("ON_SITE", "ON_SITE"),
    ("OFFLINE", "OFFLINE"),
    ("NONE", "NONE"),
    ("ADMIN", "ADMIN"),
    ("PAYPAL", "PAYPAL"),
]

TICKET_STATUSES = [
    ("FREE", "FREE"),
    ("PENDING", "PENDING"),
    ("TO_BE_PAID", "TO_BE_PAID"),
    ("ACQUIRED", "ACQUIRED"),
    ("CANCELLED", "CANCELLED"),
    ("CHECKED_IN", "CHECKED_IN"),
    ("EXPIRED", "EXPIRED"),
    ("INVALIDATED", "INVALIDATED"),
    ("RELEASED", "RELEASED"),
    ("PRE_RESERVED", "PRE_RESERVED"),
]

CHECK_IN_STATUSES = [
    ("EVENT_NOT_FOUND", "EVENT_NOT_FOUND"),
    ("TICKET_NOT_FOUND", "TICKET_NOT_FOUND"),
    ("EMPTY_TICKET_CODE", "EMPTY_TICKET_CODE"),
    ("INVALID_TICKET_CODE", "INVALID_TICKET_CODE"),
    ("INVALID_TICKET_STATE", "INVALID_TICKET_STATE"),
    ("INVALID_TICKET_CATEGORY_CHECK_IN_DATE", "INVALID_TICKET_CATEGORY_CHECK_IN_DATE"),
    ("ALREADY_CHECK_IN", "ALREADY_CHECK_IN"),
    ("MUST_PAY", "MUST_PAY"),
    ("OK_READY_TO_BE_CHECKED_IN", "OK_READY_TO_BE_CHECKED_IN"),
    ("SUCCESS", "SUCCESS"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("short_name", models.CharField(max_length=128, unique=True)),
                ("display_name", models.CharField(max_length=255)),
                ("private_key", models.CharField(max_length=255)),
                ("time_zone", models.CharField(default="UTC", max_length=64)),
                ("currency", models.CharField(max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.CharField(default=checkin.models.new_identifier, editable=False, max_length=64, primary_key=True, serialize=False)),
                ("payment_method", models.CharField(choices=PAYMENT_METHODS, default="NONE", max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="ScanAudit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ticket_uuid", models.CharField(max_length=64)),
                ("event_id", models.IntegerField()),
                ("scanned_at", models.DateTimeField()),
                ("username", models.CharField(max_length=150)),
                ("check_in_status", models.CharField(choices=CHECK_IN_STATUSES, max_length=48)),
                ("operation", models.CharField(choices=[("SCAN", "SCAN"), ("REVERT", "REVERT"), ("MANUAL", "MANUAL")], max_length=16)),
            ],
            options={
                "indexes": [models.Index(fields=["event_id", "ticket_uuid"], name="scan_event_ticket_idx")],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reservation_id", models.CharField(max_length=64)),
                ("event_id", models.IntegerField()),
                ("event_type", models.CharField(choices=[("CHECK_IN", "CHECK_IN"), ("MANUAL_CHECK_IN", "MANUAL_CHECK_IN"), ("REVERT_CHECK_IN", "REVERT_CHECK_IN")], max_length=32)),
                ("created_at", models.DateTimeField()),
                ("entity_type", models.CharField(choices=[("TICKET", "TICKET")], max_length=16)),
                ("entity_id", models.CharField(max_length=64)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="TicketCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("valid_check_in_from", models.DateTimeField(blank=True, null=True)),
                ("valid_check_in_to", models.DateTimeField(blank=True, null=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="categories", to="checkin.event")),
            ],
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.CharField(default=checkin.models.new_identifier, max_length=64, unique=True)),
                ("status", models.CharField(choices=TICKET_STATUSES, default="FREE", max_length=16)),
                ("final_price_cts", models.PositiveIntegerField(default=0)),
                ("first_name", models.CharField(blank=True, max_length=255, null=True)),
                ("last_name", models.CharField(blank=True, max_length=255, null=True)),
                ("full_name", models.CharField(blank=True, max_length=255, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("locked_assignment", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to="checkin.event")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to="checkin.ticketcategory")),
                ("reservation", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to="checkin.reservation")),
            ],
            options={
                "ordering": ["id"],
                "indexes": [models.Index(fields=["event", "status"], name="ticket_event_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="TicketFieldValue",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("value", models.TextField()),
                ("ticket", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="field_values", to="checkin.ticket")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("ticket", "name"), name="unique_ticket_field")],
            },
        ),
        migrations.CreateModel(
            name="EventConfiguration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(choices=[("SCANNER_INTEGRATION_ENABLED", "SCANNER_INTEGRATION_ENABLED"), ("OFFLINE_CHECKIN_ENABLED", "OFFLINE_CHECKIN_ENABLED"), ("LABEL_PRINTING_ENABLED", "LABEL_PRINTING_ENABLED")], max_length=64)),
                ("enabled", models.BooleanField(default=False)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="configuration", to="checkin.event")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("event", "key"), name="unique_event_configuration")],
            },
        ),
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_method", models.CharField(choices=PAYMENT_METHODS, max_length=16)),
                ("amount_cts", models.PositiveIntegerField()),
                ("currency", models.CharField(max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="checkin.event")),
                ("reservation", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="checkin.reservation")),
            ],
        ),
    ]
