"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from checkin.domain.errors import DomainError, ErrorCode
from checkin.handlers.serializers import (
    ChangedSinceSerializer,
    CheckInOutcomeSerializer,
    CheckInRequestSerializer,
    FullTicketInfoSerializer,
    OfflineExportRequestSerializer,
)
from checkin.services import CheckInService, OfflineExportService
from checkin.stores.django_store import (
    DjangoAuditStore,
    DjangoConfigurationStore,
    DjangoEventStore,
    DjangoPaymentGateway,
    DjangoTicketStore,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
}


def check_in_service() -> CheckInService:
    return CheckInService(
        events=DjangoEventStore(),
        tickets=DjangoTicketStore(),
        audit=DjangoAuditStore(),
        payments=DjangoPaymentGateway(),
    )


def offline_export_service() -> OfflineExportService:
    return OfflineExportService(
        events=DjangoEventStore(),
        tickets=DjangoTicketStore(),
        configuration=DjangoConfigurationStore(),
    )


def error_response(error: DomainError) -> Response:
    http_status = ERROR_STATUS.get(error.code)
    if http_status is None:
        logger.error("Unexpected domain error: %s", error)
        return Response(
            {"code": "INTERNAL_ERROR", "message": "Internal error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response({"code": error.code.value, "message": error.message}, status=http_status)


def _code(request: Request) -> str | None:
    serializer = CheckInRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data["code"]


class TicketStatusView(APIView):
    """Handler for GET /api/events/{event_id}/tickets/{uuid}/status"""

    def get(self, request: Request, event_id: int, ticket_uuid: str) -> Response:
        outcome = check_in_service().evaluate_ticket_status(
            event_id, ticket_uuid, request.query_params.get("code")
        )
        return Response(CheckInOutcomeSerializer(outcome).data)


class CheckInView(APIView):
    """Handler for POST /api/events/{event_id}/tickets/{uuid}/check-in"""

    def post(self, request: Request, event_id: int, ticket_uuid: str) -> Response:
        outcome = check_in_service().check_in(
            event_id, ticket_uuid, _code(request), request.user.get_username()
        )
        return Response(CheckInOutcomeSerializer(outcome).data)


class TicketStatusByNameView(APIView):
    """Handler for GET /api/events/by-name/{short_name}/tickets/{uuid}/status"""

    def get(self, request: Request, short_name: str, ticket_uuid: str) -> Response:
        outcome = check_in_service().evaluate_ticket_status_by_short_name(
            short_name, ticket_uuid, request.query_params.get("code")
        )
        return Response(CheckInOutcomeSerializer(outcome).data)


class CheckInByNameView(APIView):
    """Handler for POST /api/events/by-name/{short_name}/tickets/{uuid}/check-in"""

    def post(self, request: Request, short_name: str, ticket_uuid: str) -> Response:
        outcome = check_in_service().check_in_by_short_name(
            short_name, ticket_uuid, _code(request), request.user.get_username()
        )
        return Response(CheckInOutcomeSerializer(outcome).data)


class ManualCheckInView(APIView):
    """Handler for POST /api/events/{event_id}/tickets/{uuid}/manual-check-in"""

    def post(self, request: Request, event_id: int, ticket_uuid: str) -> Response:
        try:
            result = check_in_service().manual_check_in(
                event_id, ticket_uuid, request.user.get_username()
            )
        except DomainError as error:
            return error_response(error)
        return Response({"result": result})


class RevertCheckInView(APIView):
    """Handler for POST /api/events/{event_id}/tickets/{uuid}/revert-check-in"""

    def post(self, request: Request, event_id: int, ticket_uuid: str) -> Response:
        result = check_in_service().revert_check_in(event_id, ticket_uuid, request.user.get_username())
        return Response({"result": result})


class ConfirmOnSitePaymentView(APIView):
    """Handler for POST /api/events/by-name/{short_name}/tickets/{uuid}/confirm-payment"""

    def post(self, request: Request, short_name: str, ticket_uuid: str) -> Response:
        try:
            outcome = check_in_service().confirm_on_site_payment(
                short_name, ticket_uuid, _code(request), request.user.get_username()
            )
        except DomainError as error:
            return error_response(error)
        return Response(CheckInOutcomeSerializer(outcome).data)


class OfflineIdentifiersView(APIView):
    """Handler for GET /api/events/{event_id}/offline/identifiers"""

    def get(self, request: Request, event_id: int) -> Response:
        params = ChangedSinceSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        event = DjangoEventStore().get_event(event_id)
        ids = offline_export_service().get_attendees_identifiers(
            event, params.validated_data["changedSince"]
        )
        return Response(ids)


class OfflineAttendeesView(APIView):
    """Handler for POST /api/events/{event_id}/offline/attendees"""

    def post(self, request: Request, event_id: int) -> Response:
        body = OfflineExportRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        event = DjangoEventStore().get_event(event_id)
        try:
            encrypted = offline_export_service().get_encrypted_attendees_information(
                event,
                set(body.validated_data["additionalFields"]),
                body.validated_data["ids"],
            )
        except DomainError as error:
            return error_response(error)
        return Response(encrypted)


class FullTicketInfoView(APIView):
    """Handler for POST /api/events/{event_id}/offline/full-info"""

    def post(self, request: Request, event_id: int) -> Response:
        body = OfflineExportRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        try:
            infos = offline_export_service().get_attendees_information(
                event_id, body.validated_data["ids"]
            )
        except DomainError as error:
            return error_response(error)
        return Response(FullTicketInfoSerializer(infos, many=True).data)
