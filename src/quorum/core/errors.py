"""Domain errors raised by Quorum services.

Services raise these; the API layer maps them onto HTTP responses in a single
exception handler so no failure escapes as an unhandled 500.
"""

from __future__ import annotations

from fastapi import status


class QuorumError(Exception):
    """Base class for domain errors surfaced to clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthRequired(QuorumError):
    """No authenticated identity where one is required."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Please log in to continue"


class AuthzDenied(QuorumError):
    """Identity present but lacking the required role or ownership."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not permitted to perform this action"


class AdminCredentialMismatch(QuorumError):
    """Admin dashboard credentials were rejected."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid admin credentials"


class NotFound(QuorumError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class StoreError(QuorumError):
    """A read or write against the data store failed.

    Partial effects are not rolled back; the caller is expected to retry.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The operation could not be completed. Please try again."
