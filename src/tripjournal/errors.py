"""
Application exceptions for the trip journal API.

Each exception carries the client-facing message and the HTTP status it maps
to. The message is always a fixed, human readable string: store and upstream
details are logged where they happen and never copied into it.

Usage:
    from tripjournal.errors import NotFoundError

    raise NotFoundError("Trip not found or unauthorized")
"""


class TripJournalError(Exception):
    """Base exception for all trip journal errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TripJournalError):
    """A required field is missing or blank."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(TripJournalError):
    """No matching row, or a row the caller does not own."""

    status_code = 404
    default_message = "Not found"


class UpstreamError(TripJournalError):
    """The reverse-geocoding service failed or answered with garbage."""

    status_code = 502
    default_message = "Failed to get location details"


class PersistenceError(TripJournalError):
    """A store failure aborted a write transaction."""

    status_code = 500
    default_message = "Database error"
