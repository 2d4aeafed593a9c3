"""Error types raised by the calendar adapters."""

from __future__ import annotations

from typing import Optional


class CalendarError(Exception):
    """Base error for calendar adapter failures."""


class ValidationError(CalendarError):
    """Raised when the caller supplied incomplete or malformed input."""


class ConfigurationError(CalendarError):
    """Raised when the adapter configuration cannot serve the selected mode."""


class UpstreamError(CalendarError):
    """Raised when the scheduling provider rejects or garbles a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(UpstreamError):
    """Raised when the scheduling provider cannot be reached at all."""
