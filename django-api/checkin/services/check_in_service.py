"""Check-in service - all admission logic lives here.

Services:
- Depend only on interfaces (stores)
- Run each mutation under the ticket's exclusive lock, in one transaction
- Return outcomes for expected rejections, raise domain errors otherwise
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from checkin.domain import (
    AuditEvent,
    AuditEventType,
    CheckInOutcome,
    CheckInStatus,
    Event,
    FullTicketInfo,
    PaymentMethod,
    ScanAuditEntry,
    ScanOperation,
    Ticket,
    TicketStatus,
)
from checkin.domain.errors import EventNotFoundError, InvalidTransitionError
from checkin.domain.rules import evaluate
from checkin.stores.interfaces import AuditStore, EventStore, PaymentGateway, TicketStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CheckInService:
    """Service for scanning, confirming and reverting ticket admission."""

    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        audit: AuditStore,
        payments: PaymentGateway,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._audit = audit
        self._payments = payments
        self._clock = clock

    # Read-only evaluation

    def evaluate_ticket_status(
        self, event_id: int, ticket_uuid: str, code: str | None
    ) -> CheckInOutcome:
        """Evaluate a scan without locking or changing anything.

        The result is advisory: a concurrent check-in may change it right after.
        """
        event = self._events.get_event(event_id)
        return self._evaluate(event, self._tickets.find_by_uuid(ticket_uuid), ticket_uuid, code)

    def evaluate_ticket_status_by_short_name(
        self, short_name: str, ticket_uuid: str, code: str | None
    ) -> CheckInOutcome:
        event = self._events.get_event_by_short_name(short_name)
        return self._evaluate(event, self._tickets.find_by_uuid(ticket_uuid), ticket_uuid, code)

    def find_all_full_ticket_info(self, event_id: int) -> list[FullTicketInfo]:
        return self._tickets.find_assigned(event_id)

    # Mutations

    def check_in(self, event_id: int, ticket_uuid: str, code: str | None, username: str) -> CheckInOutcome:
        """Admit a ticket if the scanned code and its state allow it.

        Only an ``OK_READY_TO_BE_CHECKED_IN`` evaluation leads to a write; every
        other verdict is returned as is.
        """
        event = self._events.get_event(event_id)
        if event is None:
            return CheckInOutcome(CheckInStatus.EVENT_NOT_FOUND, "Event not found")
        with self._tickets.locked(ticket_uuid) as ticket:
            return self._check_in_locked(event, ticket, ticket_uuid, code, username)

    def check_in_by_short_name(
        self, short_name: str, ticket_uuid: str, code: str | None, username: str
    ) -> CheckInOutcome:
        event = self._events.get_event_by_short_name(short_name)
        if event is None:
            return CheckInOutcome(CheckInStatus.EVENT_NOT_FOUND, "event not found")
        return self.check_in(event.id, ticket_uuid, code, username)

    def confirm_on_site_payment(
        self, event_name: str, ticket_uuid: str, code: str | None, username: str
    ) -> CheckInOutcome:
        """Record payment collected at the entrance, then check the ticket in.

        Only tickets of this event waiting for payment are accepted; anything
        else is reported as ``TICKET_NOT_FOUND`` without touching the ticket.
        """
        event = self._events.get_event_by_short_name(event_name)
        if event is None:
            return CheckInOutcome(CheckInStatus.EVENT_NOT_FOUND, "Event not found")
        with self._tickets.locked(ticket_uuid) as ticket:
            if (
                ticket is None
                or ticket.event_id != event.id
                or ticket.status is not TicketStatus.TO_BE_PAID
            ):
                return CheckInOutcome(CheckInStatus.TICKET_NOT_FOUND, "")
            ticket = self._acquire(event, ticket)
            return self._check_in_locked(event, ticket, ticket_uuid, code, username)

    def manual_check_in(self, event_id: int, ticket_uuid: str, username: str) -> bool:
        """Check a ticket in without a code, settling on-site payment first if due.

        Returns False only if the ticket does not exist.

        Raises:
            InvalidTransitionError: If the ticket is neither ACQUIRED nor TO_BE_PAID.
        """
        with self._tickets.locked(ticket_uuid) as ticket:
            if ticket is None:
                return False
            if ticket.status is TicketStatus.TO_BE_PAID:
                event = self._events.get_event(ticket.event_id)
                if event is None:
                    raise EventNotFoundError(ticket.event_id)
                ticket = self._acquire(event, ticket)
            self._mark_checked_in(ticket)
            self._record(
                event_id,
                ticket,
                username,
                CheckInStatus.SUCCESS,
                ScanOperation.MANUAL,
                AuditEventType.MANUAL_CHECK_IN,
            )
            logger.info("Ticket %s manually checked in for event %s by %s", ticket.uuid, event_id, username)
            return True

    def revert_check_in(self, event_id: int, ticket_uuid: str, username: str) -> bool:
        """Undo a check-in.

        The ticket goes back to ``TO_BE_PAID`` when its reservation was paid on
        site, to ``ACQUIRED`` otherwise. Returns False unless the ticket exists
        and is checked in.
        """
        with self._tickets.locked(ticket_uuid) as ticket:
            if ticket is None or ticket.status is not TicketStatus.CHECKED_IN:
                return False
            reservation = self._tickets.find_reservation(ticket.reservation_id)
            on_site = reservation is not None and reservation.payment_method is PaymentMethod.ON_SITE
            reverted = TicketStatus.TO_BE_PAID if on_site else TicketStatus.ACQUIRED
            self._tickets.update_status(ticket.uuid, reverted)
            self._record(
                event_id,
                ticket,
                username,
                CheckInStatus.OK_READY_TO_BE_CHECKED_IN,
                ScanOperation.REVERT,
                AuditEventType.REVERT_CHECK_IN,
            )
            logger.info(
                "Check-in of ticket %s reverted to %s for event %s by %s",
                ticket.uuid,
                reverted.value,
                event_id,
                username,
            )
            return True

    # Helpers; the callers hold the ticket lock

    def _evaluate(
        self, event: Event | None, ticket: Ticket | None, ticket_uuid: str, code: str | None
    ) -> CheckInOutcome:
        category = self._events.get_category(ticket.category_id) if ticket and event else None
        return evaluate(event, ticket, category, code, self._clock(), ticket_uuid=ticket_uuid)

    def _check_in_locked(
        self, event: Event, ticket: Ticket | None, ticket_uuid: str, code: str | None, username: str
    ) -> CheckInOutcome:
        outcome = self._evaluate(event, ticket, ticket_uuid, code)
        if outcome.status is not CheckInStatus.OK_READY_TO_BE_CHECKED_IN:
            logger.debug("Scan of ticket %s rejected: %s", ticket_uuid, outcome.status.value)
            return outcome
        checked_in = self._mark_checked_in(ticket)
        self._record(
            event.id,
            ticket,
            username,
            CheckInStatus.SUCCESS,
            ScanOperation.SCAN,
            AuditEventType.CHECK_IN,
        )
        logger.info("Ticket %s checked in for event %s by %s", ticket.uuid, event.id, username)
        return CheckInOutcome(CheckInStatus.SUCCESS, "success", ticket=checked_in)

    def _acquire(self, event: Event, ticket: Ticket) -> Ticket:
        if ticket.status is not TicketStatus.TO_BE_PAID:
            raise InvalidTransitionError(ticket.uuid, ticket.status.value, TicketStatus.ACQUIRED.value)
        self._tickets.update_status(ticket.uuid, TicketStatus.ACQUIRED)
        self._payments.register_on_site_transaction(event, ticket.reservation_id)
        logger.info("On-site payment registered for reservation %s", ticket.reservation_id)
        return replace(ticket, status=TicketStatus.ACQUIRED)

    def _mark_checked_in(self, ticket: Ticket) -> Ticket:
        if ticket.status is not TicketStatus.ACQUIRED:
            raise InvalidTransitionError(ticket.uuid, ticket.status.value, TicketStatus.CHECKED_IN.value)
        self._tickets.update_status(ticket.uuid, TicketStatus.CHECKED_IN)
        self._tickets.toggle_category_lock(ticket.id, ticket.category_id, True)
        return replace(ticket, status=TicketStatus.CHECKED_IN)

    def _record(
        self,
        event_id: int,
        ticket: Ticket,
        username: str,
        status: CheckInStatus,
        operation: ScanOperation,
        event_type: AuditEventType,
    ) -> None:
        now = self._clock()
        self._audit.insert_scan(
            ScanAuditEntry(
                ticket_uuid=ticket.uuid,
                event_id=event_id,
                scanned_at=now,
                username=username,
                status=status,
                operation=operation,
            )
        )
        self._audit.insert_event(
            AuditEvent(
                reservation_id=ticket.reservation_id,
                username=username,
                event_id=event_id,
                event_type=event_type,
                created_at=now,
                entity_id=str(ticket.id),
            )
        )
