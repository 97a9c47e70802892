"""Failure classes raised by the HTTP transport.

They never leave ``BookApiClient``: every operation catches them at its
boundary and reports them instead.
"""

from __future__ import annotations

from .models import ServerError


class BookApiError(Exception):
    """Base exception for book API communication errors."""


class ServerRejection(BookApiError):
    """The server answered with a structured error body."""

    def __init__(self, server_error: ServerError) -> None:
        super().__init__(server_error.message)
        self.server_error = server_error


class TransportFailure(BookApiError):
    """Network error, timeout, or an unexpected status with no usable body."""

    def __init__(self, reason: str, status: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status = status


class DecodeFailure(BookApiError):
    """The response body did not match the expected shape."""
