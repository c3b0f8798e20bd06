"""Domain error codes for the check-in module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    CRYPTO_FAILURE = "CRYPTO_FAILURE"
    INVALID_TRANSITION = "INVALID_TRANSITION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message=f"Event {event_id} not found",
        )


class CryptoFailure(DomainError):
    """Raised when a payload cannot be encrypted or decrypted.

    Malformed tokens, key mismatches and decoding errors all end up here. They
    point at a configuration problem and are never retried.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.CRYPTO_FAILURE,
            message=reason,
        )


class InvalidTransitionError(DomainError):
    """Raised when a status write starts from a status it does not accept."""

    def __init__(self, ticket_uuid: str, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Ticket {ticket_uuid} cannot move from {current} to {target}",
        )
