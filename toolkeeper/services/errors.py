"""Errors raised by the service layer.

Route handlers let these propagate; the error-handling middleware translates
them into HTTP responses.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, client-caused failures."""


class NotFoundError(ServiceError):
    """Raised when a requested record does not exist."""

    def __init__(self, kind: str, record_id: int) -> None:
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class ConflictError(ServiceError):
    """Raised when a write would violate a uniqueness rule."""


class InvalidOperationError(ServiceError):
    """Raised when a request is well-formed but not allowed in the current state."""
