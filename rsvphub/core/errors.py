"""
Domain errors raised by the RSVP core.

The API layer maps each class to an HTTP status in ``rsvphub.main``.
"""
from typing import Optional


class RSVPError(Exception):
    """Base class for all RSVP domain failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(RSVPError):
    """Malformed answer, identifier, name or email."""

    status_code = 400


class NotFound(RSVPError):
    """Event, RSVP or public token does not exist."""

    status_code = 404


class CapacityExceeded(RSVPError):
    """The event's youth cap would be breached by the requested change."""

    status_code = 409

    def __init__(self, capacity: int, projected: int, message: Optional[str] = None):
        super().__init__(message or "This event has reached its maximum number of youth participants.")
        self.capacity = capacity
        self.projected = projected


class PermissionDenied(RSVPError):
    """Raised by the calling layer; the core never derives permissions itself."""

    status_code = 403
