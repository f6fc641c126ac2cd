"""
Custom Exceptions for Cowork Sessions

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class CoworkError(Exception):
    """Base exception for all Cowork Sessions errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class StoreError(CoworkError):
    """Raised when a read or write against the session store fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(StoreError):
    """Raised when a requested resource is not found."""
    pass


# =============================================================================
# Session lifecycle
# =============================================================================

class SessionError(CoworkError):
    """Base class for session start/end rule violations."""
    pass


class SessionAlreadyActiveError(SessionError):
    """The customer already has an active session."""

    def __init__(self, user_id: str, session_id: Optional[str] = None):
        details = {"user_id": user_id}
        if session_id:
            details["session_id"] = session_id
        super().__init__("User already has an active session", details)


class NoActiveSubscriptionError(SessionError):
    """The customer has no active, unexpired subscription."""

    def __init__(self, user_id: str):
        super().__init__(
            "User does not have an active subscription",
            {"user_id": user_id},
        )


class InsufficientBalanceError(SessionError):
    """The customer's subscription has no hours left."""

    def __init__(self, user_id: str, subscription_id: str, hours_remaining: float):
        super().__init__(
            "User has no remaining hours in their subscription",
            {
                "user_id": user_id,
                "subscription_id": subscription_id,
                "hours_remaining": hours_remaining,
            },
        )


class SessionNotActiveError(SessionError):
    """Ending a session that has already been completed."""

    def __init__(self, session_id: str, status: str):
        super().__init__(
            "Session is not active",
            {"session_id": session_id, "status": status},
        )


# =============================================================================
# Notification / Configuration
# =============================================================================

class NotificationError(CoworkError):
    """Raised when the session-end webhook cannot be delivered."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details, original_error)


class ConfigurationError(CoworkError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
