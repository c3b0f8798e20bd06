"""Unit tests for CheckInService.

These exercise the state transitions, audit trail and locking discipline against
the in-memory stores.
Run with: pytest tests/test_services.py -v
"""

import threading
import time

import pytest

from checkin.domain import (
    AuditEventType,
    CheckInStatus,
    Event,
    PaymentMethod,
    ScanOperation,
    TicketStatus,
)
from checkin.domain.errors import InvalidTransitionError
from checkin.security import credentials
from checkin.services import CheckInService
from checkin.stores.memory_store import (
    MemoryAuditStore,
    MemoryEventStore,
    MemoryPaymentGateway,
    MemoryTicketStore,
)


def _code(ticket, event) -> str:
    return credentials.ticket_code(ticket, event.private_key)


class FailingAuditStore(MemoryAuditStore):
    def insert_event(self, entry) -> None:
        raise RuntimeError("audit log unavailable")


class SlowAuditStore(MemoryAuditStore):
    def insert_scan(self, entry) -> None:
        time.sleep(0.05)
        super().insert_scan(entry)


class TestCheckIn:
    """Tests for check_in."""

    def test_successful_check_in(self, service, add_ticket, event, memory_db):
        """A valid scan checks the ticket in and writes both audit records."""
        ticket = add_ticket()
        outcome = service.check_in(event.id, ticket.uuid, _code(ticket, event), "gate-1")

        assert outcome.status is CheckInStatus.SUCCESS
        assert outcome.message == "success"
        assert outcome.ticket.status is TicketStatus.CHECKED_IN
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.CHECKED_IN
        assert memory_db.category_locks[ticket.id] is True

        [scan] = memory_db.scans
        assert scan.operation is ScanOperation.SCAN
        assert scan.status is CheckInStatus.SUCCESS
        assert scan.username == "gate-1"
        [audit] = memory_db.audit_events
        assert audit.event_type is AuditEventType.CHECK_IN
        assert audit.entity_id == str(ticket.id)
        assert audit.reservation_id == ticket.reservation_id

    def test_second_scan_reports_already_checked_in(self, service, add_ticket, event, memory_db):
        """Scanning twice gives SUCCESS then ALREADY_CHECK_IN with a single audit row."""
        ticket = add_ticket()
        code = _code(ticket, event)
        first = service.check_in(event.id, ticket.uuid, code, "gate-1")
        second = service.check_in(event.id, ticket.uuid, code, "gate-2")

        assert first.status is CheckInStatus.SUCCESS
        assert second.status is CheckInStatus.ALREADY_CHECK_IN
        assert len(memory_db.scans) == 1
        assert len(memory_db.audit_events) == 1

    def test_rejected_scan_changes_nothing(self, service, add_ticket, event, memory_db):
        """A wrong code leaves the ticket untouched and writes no audit."""
        ticket = add_ticket()
        outcome = service.check_in(event.id, ticket.uuid, "forged", "gate-1")

        assert outcome.status is CheckInStatus.INVALID_TICKET_CODE
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.ACQUIRED
        assert memory_db.scans == []
        assert memory_db.audit_events == []

    def test_must_pay_is_returned_unchanged(self, service, add_ticket, event, memory_db):
        """A ticket awaiting payment is reported with its price."""
        ticket = add_ticket(status=TicketStatus.TO_BE_PAID, final_price_cts=1500)
        outcome = service.check_in(event.id, ticket.uuid, _code(ticket, event), "gate-1")

        assert outcome.status is CheckInStatus.MUST_PAY
        assert str(outcome.due_amount) == "15.00"
        assert outcome.currency == "EUR"
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.TO_BE_PAID

    def test_unknown_event(self, service, add_ticket):
        """An unknown event id yields EVENT_NOT_FOUND."""
        ticket = add_ticket()
        assert service.check_in(999, ticket.uuid, "code", "gate-1").status is CheckInStatus.EVENT_NOT_FOUND

    def test_unknown_ticket(self, service, event):
        """An unknown ticket yields TICKET_NOT_FOUND."""
        assert service.check_in(event.id, "missing", "code", "gate-1").status is CheckInStatus.TICKET_NOT_FOUND

    def test_check_in_by_short_name(self, service, add_ticket, event):
        """The event can be addressed by its short name."""
        ticket = add_ticket()
        outcome = service.check_in_by_short_name(event.short_name, ticket.uuid, _code(ticket, event), "gate-1")
        assert outcome.status is CheckInStatus.SUCCESS
        assert service.check_in_by_short_name("nope", ticket.uuid, "x", "gate-1").status is CheckInStatus.EVENT_NOT_FOUND

    def test_failed_audit_rolls_back_status(self, memory_db, add_ticket, event, now):
        """If the audit write fails, the status change is not kept."""
        service = CheckInService(
            events=MemoryEventStore(memory_db),
            tickets=MemoryTicketStore(memory_db),
            audit=FailingAuditStore(memory_db),
            payments=MemoryPaymentGateway(memory_db),
            clock=lambda: now,
        )
        ticket = add_ticket()

        with pytest.raises(RuntimeError):
            service.check_in(event.id, ticket.uuid, _code(ticket, event), "gate-1")

        assert memory_db.tickets[ticket.uuid].status is TicketStatus.ACQUIRED
        assert memory_db.category_locks.get(ticket.id, False) is False
        assert memory_db.scans == []


class TestConcurrentCheckIn:
    """Tests for the locking discipline."""

    def test_simultaneous_scans_admit_once(self, memory_db, add_ticket, event, now):
        """Two concurrent scans of one ticket yield exactly one SUCCESS."""
        service = CheckInService(
            events=MemoryEventStore(memory_db),
            tickets=MemoryTicketStore(memory_db),
            audit=SlowAuditStore(memory_db),
            payments=MemoryPaymentGateway(memory_db),
            clock=lambda: now,
        )
        ticket = add_ticket()
        code = _code(ticket, event)
        barrier = threading.Barrier(4)
        results = []

        def scan(gate: str) -> None:
            barrier.wait()
            results.append(service.check_in(event.id, ticket.uuid, code, gate))

        threads = [threading.Thread(target=scan, args=(f"gate-{n}",)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        statuses = sorted(outcome.status.value for outcome in results)
        assert statuses == ["ALREADY_CHECK_IN"] * 3 + ["SUCCESS"]
        assert len(memory_db.scans) == 1

    def test_distinct_tickets_do_not_block_each_other(self, service, add_ticket, event):
        """Scans of different tickets all succeed."""
        tickets = [add_ticket() for _ in range(5)]
        results = []

        def scan(ticket) -> None:
            results.append(service.check_in(event.id, ticket.uuid, _code(ticket, event), "gate"))

        threads = [threading.Thread(target=scan, args=(ticket,)) for ticket in tickets]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(outcome.status is CheckInStatus.SUCCESS for outcome in results)


class TestEvaluateTicketStatus:
    """Tests for read-only evaluation."""

    def test_evaluation_does_not_mutate(self, service, add_ticket, event, memory_db):
        """Evaluation reports readiness without checking in."""
        ticket = add_ticket()
        outcome = service.evaluate_ticket_status(event.id, ticket.uuid, _code(ticket, event))

        assert outcome.status is CheckInStatus.OK_READY_TO_BE_CHECKED_IN
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.ACQUIRED
        assert memory_db.scans == []

    def test_evaluation_by_short_name(self, service, add_ticket, event):
        """Evaluation accepts the event short name."""
        ticket = add_ticket(status=TicketStatus.CHECKED_IN)
        outcome = service.evaluate_ticket_status_by_short_name(event.short_name, ticket.uuid, _code(ticket, event))
        assert outcome.status is CheckInStatus.ALREADY_CHECK_IN

    def test_unknown_event(self, service, add_ticket):
        """Evaluation against an unknown event yields EVENT_NOT_FOUND."""
        ticket = add_ticket()
        assert service.evaluate_ticket_status(42, ticket.uuid, "x").status is CheckInStatus.EVENT_NOT_FOUND

    def test_find_all_full_ticket_info(self, service, add_ticket, event, category):
        """Assigned tickets are listed with their category."""
        assigned = add_ticket()
        add_ticket(status=TicketStatus.CANCELLED)
        add_ticket(email=None)

        infos = service.find_all_full_ticket_info(event.id)

        assert [info.ticket.uuid for info in infos] == [assigned.uuid]
        assert infos[0].category == category


class TestConfirmOnSitePayment:
    """Tests for confirm_on_site_payment."""

    def test_payment_then_check_in(self, service, add_ticket, event, memory_db):
        """A TO_BE_PAID ticket is paid and checked in in one call."""
        ticket = add_ticket(status=TicketStatus.TO_BE_PAID, payment_method=PaymentMethod.ON_SITE)
        outcome = service.confirm_on_site_payment(event.short_name, ticket.uuid, _code(ticket, event), "gate-1")

        assert outcome.status is CheckInStatus.SUCCESS
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.CHECKED_IN
        assert memory_db.payments == [(event.id, ticket.reservation_id)]

    def test_ticket_not_awaiting_payment(self, service, add_ticket, event, memory_db):
        """An already paid ticket is reported as not found and left alone."""
        ticket = add_ticket()
        outcome = service.confirm_on_site_payment(event.short_name, ticket.uuid, _code(ticket, event), "gate-1")

        assert outcome.status is CheckInStatus.TICKET_NOT_FOUND
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.ACQUIRED
        assert memory_db.payments == []

    def test_unknown_ticket(self, service, event, memory_db):
        """A missing ticket is reported as not found."""
        outcome = service.confirm_on_site_payment(event.short_name, "missing", "code", "gate-1")
        assert outcome.status is CheckInStatus.TICKET_NOT_FOUND
        assert memory_db.payments == []

    def test_unknown_event(self, service, add_ticket, memory_db):
        """An unknown short name yields EVENT_NOT_FOUND."""
        ticket = add_ticket(status=TicketStatus.TO_BE_PAID)
        outcome = service.confirm_on_site_payment("unknown", ticket.uuid, "code", "gate-1")
        assert outcome.status is CheckInStatus.EVENT_NOT_FOUND
        assert memory_db.payments == []

    def test_ticket_of_another_event(self, service, add_ticket, memory_db, event):
        """A ticket confirmed under another event's name is not found and not paid."""
        memory_db.add_event(
            Event(id=2, short_name="other", private_key="other-key", time_zone="UTC", currency="USD")
        )
        ticket = add_ticket(status=TicketStatus.TO_BE_PAID, payment_method=PaymentMethod.ON_SITE)

        outcome = service.confirm_on_site_payment("other", ticket.uuid, _code(ticket, event), "gate-1")

        assert outcome.status is CheckInStatus.TICKET_NOT_FOUND
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.TO_BE_PAID
        assert memory_db.payments == []
        assert memory_db.scans == []

    def test_wrong_code_keeps_payment(self, service, add_ticket, event, memory_db):
        """The payment stays recorded even when the following scan is rejected."""
        ticket = add_ticket(status=TicketStatus.TO_BE_PAID)
        outcome = service.confirm_on_site_payment(event.short_name, ticket.uuid, "forged", "gate-1")

        assert outcome.status is CheckInStatus.INVALID_TICKET_CODE
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.ACQUIRED
        assert len(memory_db.payments) == 1
        assert memory_db.scans == []


class TestManualCheckIn:
    """Tests for manual_check_in."""

    def test_acquired_ticket(self, service, add_ticket, event, memory_db):
        """An ACQUIRED ticket is checked in without a code."""
        ticket = add_ticket()
        assert service.manual_check_in(event.id, ticket.uuid, "desk") is True

        assert memory_db.tickets[ticket.uuid].status is TicketStatus.CHECKED_IN
        [scan] = memory_db.scans
        assert scan.operation is ScanOperation.MANUAL
        assert scan.status is CheckInStatus.SUCCESS
        assert memory_db.audit_events[0].event_type is AuditEventType.MANUAL_CHECK_IN
        assert memory_db.payments == []

    def test_to_be_paid_goes_through_acquired(self, service, add_ticket, event, memory_db):
        """A TO_BE_PAID ticket is paid on site and checked in in one call."""
        ticket = add_ticket(status=TicketStatus.TO_BE_PAID)
        assert service.manual_check_in(event.id, ticket.uuid, "desk") is True

        assert memory_db.tickets[ticket.uuid].status is TicketStatus.CHECKED_IN
        assert memory_db.payments == [(event.id, ticket.reservation_id)]

    def test_missing_ticket(self, service, event, memory_db):
        """A missing ticket returns False."""
        assert service.manual_check_in(event.id, "missing", "desk") is False
        assert memory_db.scans == []

    @pytest.mark.parametrize("status", [TicketStatus.CANCELLED, TicketStatus.CHECKED_IN])
    def test_other_states_are_refused(self, service, add_ticket, event, memory_db, status):
        """Tickets that are neither paid nor awaiting payment raise and stay unchanged."""
        ticket = add_ticket(status=status)
        with pytest.raises(InvalidTransitionError):
            service.manual_check_in(event.id, ticket.uuid, "desk")

        assert memory_db.tickets[ticket.uuid].status is status
        assert memory_db.scans == []


class TestRevertCheckIn:
    """Tests for revert_check_in."""

    def test_on_site_reservation_goes_back_to_be_paid(self, service, add_ticket, event, memory_db):
        """Reverting an on-site paid ticket makes it payable again."""
        ticket = add_ticket(status=TicketStatus.CHECKED_IN, payment_method=PaymentMethod.ON_SITE)
        assert service.revert_check_in(event.id, ticket.uuid, "desk") is True

        assert memory_db.tickets[ticket.uuid].status is TicketStatus.TO_BE_PAID
        [scan] = memory_db.scans
        assert scan.operation is ScanOperation.REVERT
        assert scan.status is CheckInStatus.OK_READY_TO_BE_CHECKED_IN
        assert memory_db.audit_events[0].event_type is AuditEventType.REVERT_CHECK_IN

    def test_online_reservation_goes_back_to_acquired(self, service, add_ticket, event, memory_db):
        """Reverting a ticket paid online makes it ACQUIRED."""
        ticket = add_ticket(status=TicketStatus.CHECKED_IN, payment_method=PaymentMethod.STRIPE)
        assert service.revert_check_in(event.id, ticket.uuid, "desk") is True
        assert memory_db.tickets[ticket.uuid].status is TicketStatus.ACQUIRED

    @pytest.mark.parametrize("status", [TicketStatus.ACQUIRED, TicketStatus.TO_BE_PAID, TicketStatus.CANCELLED])
    def test_not_checked_in_is_noop(self, service, add_ticket, event, memory_db, status):
        """Only CHECKED_IN tickets can be reverted."""
        ticket = add_ticket(status=status)
        assert service.revert_check_in(event.id, ticket.uuid, "desk") is False
        assert memory_db.tickets[ticket.uuid].status is status
        assert memory_db.scans == []

    def test_missing_ticket(self, service, event):
        """A missing ticket returns False."""
        assert service.revert_check_in(event.id, "missing", "desk") is False

    def test_check_in_again_after_revert(self, service, add_ticket, event):
        """A reverted ticket can be scanned again."""
        ticket = add_ticket()
        code = _code(ticket, event)
        service.check_in(event.id, ticket.uuid, code, "gate-1")
        service.revert_check_in(event.id, ticket.uuid, "desk")
        assert service.check_in(event.id, ticket.uuid, code, "gate-1").status is CheckInStatus.SUCCESS
