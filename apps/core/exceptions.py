"""Error taxonomy shared by the domain, the gateway and the API layer."""
from __future__ import annotations


class PGConnectError(Exception):
    """Base class for expected, user-facing failures."""

    default_code = "error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code


class NotFoundError(PGConnectError):
    """A document, room or occupant does not exist."""

    default_code = "not_found"


class ValidationError(PGConnectError):
    """Input violates a business rule (capacity, required tenant fields)."""

    default_code = "invalid"


class WriteError(PGConnectError):
    """The document store rejected a write."""

    default_code = "write_rejected"
