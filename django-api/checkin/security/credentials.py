"""Ticket credential codes derived from the event private key.

A code has the shape ``<reservation>/<uuid>/<mac>`` where ``mac`` is the Base64
HMAC-SHA256 of the ticket identity keyed by the event secret. Scanners that know
the code can rebuild the offline lookup key, but cannot derive the codes of other
tickets without the event secret.
"""

import base64
import hashlib
import hmac

from checkin.domain.models import Ticket


def hmac_ticket_info(ticket: Ticket, event_key: str) -> str:
    message = "/".join(
        [
            ticket.reservation_id,
            ticket.uuid,
            ticket.full_name or "",
            ticket.email or "",
        ]
    )
    digest = hmac.new(
        event_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def ticket_code(ticket: Ticket, event_key: str) -> str:
    """Return the credential code printed on the ticket."""
    return f"{ticket.reservation_id}/{ticket.uuid}/{hmac_ticket_info(ticket, event_key)}"


def verify(presented_code: str, ticket: Ticket, event_key: str) -> bool:
    expected = ticket_code(ticket, event_key)
    return hmac.compare_digest(presented_code.encode("utf-8"), expected.encode("utf-8"))


def lookup_key(ticket: Ticket, event_key: str) -> str:
    """Opaque index of the ticket inside an offline export."""
    return hashlib.sha256(hmac_ticket_info(ticket, event_key).encode("utf-8")).hexdigest()
