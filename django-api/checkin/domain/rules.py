"""Check-in decision rules.

``evaluate`` is a pure function of its arguments. Rules are checked in order and
the first match wins; clients branch on the returned status, so the order is
part of the contract.
"""

from datetime import datetime

from checkin.domain.models import Event, Ticket, TicketCategory
from checkin.domain.outcomes import CheckInOutcome
from checkin.domain.value_objects import CheckInStatus, Money, TicketStatus
from checkin.security import credentials

# Mirrors the "dd/MM/yyyy - hh:mm" pattern shown to operators (12-hour clock).
CHECK_IN_DATE_FORMAT = "%d/%m/%Y - %I:%M"
UNBOUNDED = ".."


def _format_bound(value: datetime | None) -> str:
    return UNBOUNDED if value is None else value.strftime(CHECK_IN_DATE_FORMAT)


def evaluate(
    event: Event | None,
    ticket: Ticket | None,
    category: TicketCategory | None,
    presented_code: str | None,
    now: datetime,
    ticket_uuid: str = "",
) -> CheckInOutcome:
    """Decide whether ``ticket`` may be admitted to ``event`` at ``now``.

    ``now`` must be timezone-aware. ``ticket_uuid`` is the identifier that was
    scanned and only feeds the not-found message.
    """
    if event is None:
        return CheckInOutcome(CheckInStatus.EVENT_NOT_FOUND, "Event not found")

    if ticket is None:
        return CheckInOutcome(
            CheckInStatus.TICKET_NOT_FOUND, f"Ticket with uuid {ticket_uuid} not found"
        )

    if not presented_code:
        return CheckInOutcome(CheckInStatus.EMPTY_TICKET_CODE, "Missing ticket code")

    zone = event.zone
    local_now = now.astimezone(zone)
    if category is not None and not category.has_valid_check_in(local_now, zone):
        start = _format_bound(category.valid_check_in_from_in(zone))
        end = _format_bound(category.valid_check_in_to_in(zone))
        return CheckInOutcome(
            CheckInStatus.INVALID_TICKET_CATEGORY_CHECK_IN_DATE,
            f"Invalid check-in date: valid range for category {category.name} "
            f"is from {start} to {end}, current time is: {_format_bound(local_now)}",
            ticket=ticket,
        )

    if not credentials.verify(presented_code, ticket, event.private_key):
        return CheckInOutcome(CheckInStatus.INVALID_TICKET_CODE, "Ticket qr code does not match")

    if ticket.status is TicketStatus.TO_BE_PAID:
        return CheckInOutcome(
            CheckInStatus.MUST_PAY,
            "Must pay for ticket",
            ticket=ticket,
            due_amount=Money.from_cents(ticket.final_price_cts),
            currency=event.currency,
        )

    if ticket.status is TicketStatus.CHECKED_IN:
        return CheckInOutcome(
            CheckInStatus.ALREADY_CHECK_IN, "Error: already checked in", ticket=ticket
        )

    if ticket.status is not TicketStatus.ACQUIRED:
        return CheckInOutcome(
            CheckInStatus.INVALID_TICKET_STATE,
            f"Invalid ticket state, expected ACQUIRED state, received {ticket.status.value}",
            ticket=ticket,
        )

    return CheckInOutcome(
        CheckInStatus.OK_READY_TO_BE_CHECKED_IN, "Ready to be checked in", ticket=ticket
    )
