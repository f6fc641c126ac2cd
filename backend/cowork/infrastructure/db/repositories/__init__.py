"""
Repository Layer for Cowork Sessions

Exports all repository classes for dependency injection.
"""

from cowork.infrastructure.db.repositories.base_repository import (
    BaseRepository,
)
from cowork.infrastructure.db.repositories.user_repository import (
    UserRepository,
)
from cowork.infrastructure.db.repositories.subscription_repository import (
    SubscriptionPlanRepository,
    UserSubscriptionRepository,
)
from cowork.infrastructure.db.repositories.session_repository import (
    SessionRecord,
    UserSessionRepository,
)


__all__ = [
    # Base
    "BaseRepository",
    # Repositories
    "UserRepository",
    "SubscriptionPlanRepository",
    "UserSubscriptionRepository",
    "UserSessionRepository",
    "SessionRecord",
]
