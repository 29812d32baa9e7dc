"""Price-stats error hierarchy.

All exceptions inherit from PriceStatsError so callers can handle
collaborator failures at one boundary. Insufficient history for an
overlay is not an error; it shows up as a missing overlay key.
"""

from __future__ import annotations


class PriceStatsError(Exception):
    """Base exception for all price-stats errors."""


class ProviderError(PriceStatsError):
    """Remote series provider failed. Never retried automatically."""


class TransportError(ProviderError):
    """Non-2xx HTTP status or connectivity failure.

    ``status_code`` is None when no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"HTTP error {status_code}: {message}")


class DecodeError(ProviderError):
    """Provider returned a payload that could not be parsed."""


class PersistenceError(PriceStatsError):
    """Series store read or write failed."""
