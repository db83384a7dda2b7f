"""
Custom exceptions for the member portal.
Each exception carries the HTTP status the API layer renders it with.
"""
from typing import Any, Dict, Optional


class PortalException(Exception):
    """Base exception for all portal errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: User-facing error message
            details: Additional error details (logged, never returned to clients)
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(PortalException):
    """Raised when request input is missing or malformed."""
    status_code = 400


class AuthorizationError(PortalException):
    """Raised when a phone number is not on the allow-list."""
    status_code = 403


class SessionError(PortalException):
    """Raised when a session token cannot be honoured."""
    status_code = 401


class InvalidSessionError(SessionError):
    """Raised when no session exists for a token."""
    pass


class ExpiredSessionError(SessionError):
    """Raised when a session has outlived its time-to-live."""
    pass


class BackingStoreError(PortalException):
    """Raised when a CSV snapshot cannot be read."""
    status_code = 500


class ConfigurationError(PortalException):
    """Raised when configuration is invalid."""
    status_code = 500
