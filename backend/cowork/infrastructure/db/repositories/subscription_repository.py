"""
Subscription Repository

Data access for subscription plans and customers' subscriptions.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cowork.domain.models import SubscriptionStatus
from cowork.infrastructure.db.models.subscription_plan import (
    SubscriptionPlan,
    SubscriptionPlanCreate,
)
from cowork.infrastructure.db.models.user_subscription import UserSubscription
from cowork.infrastructure.db.repositories.base_repository import BaseRepository


logger = logging.getLogger(__name__)


class SubscriptionPlanRepository(BaseRepository[SubscriptionPlan, SubscriptionPlanCreate]):

    def __init__(self, session: AsyncSession):
        super().__init__(SubscriptionPlan, session)

    async def list_active(self) -> List[SubscriptionPlan]:
        """Plans currently offered, cheapest first."""
        async with self._store_operation("read"):
            stmt = (
                select(SubscriptionPlan)
                .where(SubscriptionPlan.is_active.is_(True))
                .order_by(SubscriptionPlan.price.asc())
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        async with self._store_operation("read"):
            stmt = select(SubscriptionPlan).where(SubscriptionPlan.name == name)
            result = await self.session.execute(stmt)
            return result.scalars().first()


class UserSubscriptionRepository(BaseRepository[UserSubscription, UserSubscription]):
    """
    Repository for customers' subscriptions.

    A subscription is current when its status is ``active`` and its
    ``end_date`` is today or later.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(UserSubscription, session)

    def _current_stmt(self, user_id: UUID, today: date):
        # Latest-ending first when a customer has overlapping subscriptions
        return (
            select(UserSubscription, SubscriptionPlan.name)
            .join(
                SubscriptionPlan,
                SubscriptionPlan.id == UserSubscription.subscription_plan_id,
                isouter=True,
            )
            .where(
                UserSubscription.user_id == user_id,
                UserSubscription.status == SubscriptionStatus.ACTIVE.value,
                UserSubscription.end_date >= today,
            )
            .order_by(UserSubscription.end_date.desc())
            .limit(1)
        )

    async def get_current_for_user(
        self,
        user_id: UUID,
        today: date,
    ) -> Optional[UserSubscription]:
        """The customer's current subscription, or None."""
        current = await self.get_current_with_plan_name(user_id, today)
        return current[0] if current else None

    async def get_current_with_plan_name(
        self,
        user_id: UUID,
        today: date,
    ) -> Optional[Tuple[UserSubscription, Optional[str]]]:
        """The customer's current subscription together with its plan name."""
        async with self._store_operation("read"):
            result = await self.session.execute(self._current_stmt(user_id, today))
            row = result.first()
            if row is None:
                return None
            return row[0], row[1]

    async def set_hours_remaining(
        self,
        subscription: UserSubscription,
        hours_remaining: float,
    ) -> UserSubscription:
        """Write a new balance; callers pass an already clamped value."""
        async with self._store_operation("update"):
            subscription.hours_remaining = hours_remaining
            self.session.add(subscription)
            await self.session.flush()
            logger.debug(
                f"Subscription {subscription.id} balance set to {hours_remaining}h"
            )
            return subscription
