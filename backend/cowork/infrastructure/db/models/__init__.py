"""
SQLModel ORM Models for Cowork Sessions

Import models here to register them with SQLModel.metadata.
"""

from cowork.infrastructure.db.models.base import (
    BaseModel,
    TimestampMixin,
    UUIDMixin,
    utcnow,
)
from cowork.infrastructure.db.models.user import User, UserBase
from cowork.infrastructure.db.models.subscription_plan import (
    SubscriptionPlan,
    SubscriptionPlanBase,
    SubscriptionPlanCreate,
)
from cowork.infrastructure.db.models.user_subscription import (
    UserSubscription,
    UserSubscriptionBase,
)
from cowork.infrastructure.db.models.user_session import (
    UserSession,
    UserSessionBase,
    UserSessionCreate,
    UserSessionComplete,
)


__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    "utcnow",
    # Users
    "User",
    "UserBase",
    # Plans
    "SubscriptionPlan",
    "SubscriptionPlanBase",
    "SubscriptionPlanCreate",
    # Subscriptions
    "UserSubscription",
    "UserSubscriptionBase",
    # Sessions
    "UserSession",
    "UserSessionBase",
    "UserSessionCreate",
    "UserSessionComplete",
]
