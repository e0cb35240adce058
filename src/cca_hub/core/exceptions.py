from __future__ import annotations

from .enums import DenyReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when the requested entity does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when an access decision came back DENY.

    ``reason`` is the tag from the decision; controllers turn it into a status code.
    """

    def __init__(self, reason: DenyReason, message: str | None = None):
        super().__init__(message or reason.value)
        self.reason = reason
