"""
Error taxonomy for the ticket pipeline.

Every error here originates from caller-supplied data, so each one maps to a
4xx response. Per-record import failures are never raised; they are collected
into the import summary instead.
"""

from typing import List, Optional


class TicketServiceError(Exception):
    """Base class for client-input faults raised by the pipeline."""

    status_code = 400

    def __init__(self, message: str, details: Optional[List[str]] = None):
        self.message = message
        self.details = list(details or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class TicketValidationError(TicketServiceError):
    """One or more ticket fields violate the schema. `details` lists every violation."""

    def __init__(self, details: List[str]):
        super().__init__("Validation failed", details)


class MalformedInputError(TicketServiceError):
    """Raw import content could not be parsed as the declared format."""

    FORMAT_LABELS = {"delimited": "CSV", "tree": "JSON", "markup": "XML"}

    def __init__(self, kind: str, details: Optional[List[str]] = None):
        self.format = kind
        label = self.FORMAT_LABELS.get(kind, kind.upper())
        super().__init__(f"Malformed {label} file", details)


class UnsupportedFormatError(TicketServiceError):
    """Import format tag is not one of the supported values."""

    def __init__(self, format_tag, supported):
        self.format_tag = format_tag
        super().__init__(
            "Unsupported format",
            [f"Expected one of: {', '.join(supported)}. Got: {format_tag}"]
        )


class DuplicateTicketError(TicketServiceError):
    """A ticket id was already issued during the store's lifetime."""

    status_code = 409

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__("Duplicate ticket id", [f"Ticket id already exists: {ticket_id}"])
