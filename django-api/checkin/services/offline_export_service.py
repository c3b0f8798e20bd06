"""Offline check-in export.

Scanning devices without connectivity receive a map ``lookup key -> encrypted
attendee record``. A device that scans a credential code can compute both the
lookup key and the decryption key from that code alone, so it can only read the
record of the ticket it is holding.
"""

import json
import logging
from collections.abc import Iterable
from datetime import datetime

from checkin.domain import ConfigurationKey, Event, FullTicketInfo
from checkin.domain.errors import EventNotFoundError
from checkin.security import cipher, credentials
from checkin.stores.interfaces import ConfigurationStore, EventStore, TicketStore

logger = logging.getLogger(__name__)


def _to_json(data: dict[str, str]) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


class OfflineExportService:
    """Builds the data bundles distributed to offline scanners."""

    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        configuration: ConfigurationStore,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._configuration = configuration

    def is_offline_check_in_enabled(self, event: Event) -> bool:
        return self._configuration.are_enabled_for_event(
            event,
            ConfigurationKey.SCANNER_INTEGRATION_ENABLED,
            ConfigurationKey.OFFLINE_CHECKIN_ENABLED,
        )

    def is_offline_check_in_and_label_printing_enabled(self, event: Event) -> bool:
        return self.is_offline_check_in_enabled(event) and self._configuration.are_enabled_for_event(
            event, ConfigurationKey.LABEL_PRINTING_ENABLED
        )

    def get_attendees_identifiers(self, event: Event | None, changed_since: datetime | None) -> list[int]:
        """Return IDs of attendees changed since the given instant.

        Empty when the event is missing or offline check-in is disabled.
        """
        if event is None or not self.is_offline_check_in_enabled(event):
            return []
        return self._tickets.find_assigned_ids(event.id, changed_since)

    def get_attendees_information(self, event_id: int, ids: Iterable[int]) -> list[FullTicketInfo]:
        """Return the full ticket information of the given attendees.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        if self._events.get_event(event_id) is None:
            raise EventNotFoundError(event_id)
        return self._tickets.find_assigned(event_id, ids)

    def get_encrypted_attendees_information(
        self, event: Event | None, additional_fields: set[str], ids: Iterable[int]
    ) -> dict[str, str]:
        if event is None or not self.is_offline_check_in_enabled(event):
            return {}

        event_key = event.private_key
        result: dict[str, str] = {}
        for info in self._tickets.find_assigned(event.id, ids):
            payload = self._attendee_payload(event, info, additional_fields)
            code = credentials.ticket_code(info.ticket, event_key)
            result[credentials.lookup_key(info.ticket, event_key)] = cipher.encrypt(code, _to_json(payload))
        logger.info("Exported %d encrypted attendees for event %s", len(result), event.id)
        return result

    def _attendee_payload(
        self, event: Event, info: FullTicketInfo, additional_fields: set[str]
    ) -> dict[str, str]:
        ticket, category = info.ticket, info.category
        payload = {
            "firstName": ticket.first_name or "",
            "lastName": ticket.last_name or "",
            "fullName": ticket.full_name or "",
            "email": ticket.email or "",
            "status": ticket.status.value,
            "uuid": ticket.uuid,
            "category": category.name,
        }
        if additional_fields:
            values = self._tickets.find_field_values(ticket.id, additional_fields)
            payload["additionalInfoJson"] = _to_json(values)

        zone = event.zone
        valid_from = category.valid_check_in_from_in(zone)
        if valid_from is not None:
            payload["validCheckInFrom"] = str(int(valid_from.timestamp()))
        valid_to = category.valid_check_in_to_in(zone)
        if valid_to is not None:
            payload["validCheckInTo"] = str(int(valid_to.timestamp()))
        return payload
