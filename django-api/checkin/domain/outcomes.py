"""Result of a check-in evaluation or attempt."""

from dataclasses import dataclass

from checkin.domain.models import Ticket
from checkin.domain.value_objects import CheckInStatus, Money


@dataclass(frozen=True)
class CheckInOutcome:
    """Verdict plus a human-readable message.

    ``due_amount`` and ``currency`` are only set for ``MUST_PAY``.
    """

    status: CheckInStatus
    message: str
    ticket: Ticket | None = None
    due_amount: Money | None = None
    currency: str | None = None

    @property
    def is_successful(self) -> bool:
        return self.status is CheckInStatus.SUCCESS
