"""Serializers for transforming domain models to API responses."""

from rest_framework import serializers


class CheckInRequestSerializer(serializers.Serializer):
    """Body of a scan or on-site payment confirmation."""

    code = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class OfflineExportRequestSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1))
    additionalFields = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )


class ChangedSinceSerializer(serializers.Serializer):
    changedSince = serializers.DateTimeField(required=False, default=None)


class CheckInOutcomeSerializer(serializers.Serializer):
    """Serializer for CheckInOutcome domain model."""

    status = serializers.SerializerMethodField()
    message = serializers.CharField()
    successful = serializers.BooleanField(source="is_successful")
    ticketUuid = serializers.SerializerMethodField()
    dueAmount = serializers.SerializerMethodField()
    currency = serializers.CharField(allow_null=True)

    def get_status(self, outcome) -> str:
        return outcome.status.value

    def get_ticketUuid(self, outcome) -> str | None:
        return outcome.ticket.uuid if outcome.ticket else None

    def get_dueAmount(self, outcome) -> str | None:
        return str(outcome.due_amount) if outcome.due_amount else None


class TicketCategorySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    validCheckInFrom = serializers.DateTimeField(source="valid_check_in_from", allow_null=True)
    validCheckInTo = serializers.DateTimeField(source="valid_check_in_to", allow_null=True)


class FullTicketInfoSerializer(serializers.Serializer):
    """Serializer for FullTicketInfo domain model."""

    id = serializers.IntegerField(source="ticket.id")
    uuid = serializers.CharField(source="ticket.uuid")
    status = serializers.SerializerMethodField()
    firstName = serializers.CharField(source="ticket.first_name", allow_null=True)
    lastName = serializers.CharField(source="ticket.last_name", allow_null=True)
    fullName = serializers.CharField(source="ticket.full_name", allow_null=True)
    email = serializers.CharField(source="ticket.email", allow_null=True)
    category = TicketCategorySerializer()

    def get_status(self, info) -> str:
        return info.ticket.status.value
