"""
Domain Models for Cowork Sessions

Enums shared by the persistence layer, the session controller and the API.
"""

from enum import Enum


class UserRole(str, Enum):
    """Role stored on ``users.role``."""
    ADMIN = "admin"
    STAFF = "staff"
    CUSTOMER = "customer"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.STAFF})


class SubscriptionStatus(str, Enum):
    """Lifecycle status of a customer's subscription."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class SessionStatus(str, Enum):
    """
    Lifecycle status of a usage session.

    ``active -> completed`` is the only transition; sessions are never reopened.
    """
    ACTIVE = "active"
    COMPLETED = "completed"
