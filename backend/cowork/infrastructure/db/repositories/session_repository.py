"""
Session Repository

Data access for ``user_sessions``, including the joined views the session
controller needs (customer contact, linked subscription, plan name).
"""

from dataclasses import dataclass
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from cowork.domain.models import SessionStatus
from cowork.infrastructure.db.models.subscription_plan import SubscriptionPlan
from cowork.infrastructure.db.models.user import User
from cowork.infrastructure.db.models.user_session import (
    UserSession,
    UserSessionCreate,
    UserSessionComplete,
)
from cowork.infrastructure.db.models.user_subscription import UserSubscription
from cowork.infrastructure.db.repositories.base_repository import BaseRepository


@dataclass
class SessionRecord:
    """A session loaded with its customer and linked subscription."""
    session: UserSession
    user: User
    subscription: Optional[UserSubscription] = None
    plan_name: Optional[str] = None


class UserSessionRepository(BaseRepository[UserSession, UserSessionCreate]):

    def __init__(self, session: AsyncSession):
        super().__init__(UserSession, session)

    def _details_stmt(self):
        return (
            select(UserSession, User, UserSubscription, SubscriptionPlan.name)
            .join(User, User.id == UserSession.user_id)
            .join(
                UserSubscription,
                UserSubscription.id == UserSession.user_subscription_id,
                isouter=True,
            )
            .join(
                SubscriptionPlan,
                SubscriptionPlan.id == UserSubscription.subscription_plan_id,
                isouter=True,
            )
        )

    @staticmethod
    def _to_record(row) -> SessionRecord:
        return SessionRecord(
            session=row[0],
            user=row[1],
            subscription=row[2],
            plan_name=row[3],
        )

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_active_for_user(self, user_id: UUID) -> Optional[UserSession]:
        """The user's active session, if any."""
        async with self._store_operation("read"):
            stmt = (
                select(UserSession)
                .where(
                    UserSession.user_id == user_id,
                    UserSession.status == SessionStatus.ACTIVE.value,
                )
                .order_by(UserSession.start_time.desc())
            )
            result = await self.session.execute(stmt)
            return result.scalars().first()

    async def get_record(self, session_id: UUID) -> Optional[SessionRecord]:
        async with self._store_operation("read"):
            stmt = self._details_stmt().where(UserSession.id == session_id)
            result = await self.session.execute(stmt)
            row = result.first()
            return self._to_record(row) if row else None

    async def list_active_records(self) -> List[SessionRecord]:
        """Active sessions, most recently started first."""
        async with self._store_operation("read"):
            stmt = (
                self._details_stmt()
                .where(UserSession.status == SessionStatus.ACTIVE.value)
                .order_by(UserSession.start_time.desc())
            )
            result = await self.session.execute(stmt)
            return [self._to_record(row) for row in result.all()]

    async def list_for_user(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> List[UserSession]:
        async with self._store_operation("read"):
            stmt = (
                select(UserSession)
                .where(UserSession.user_id == user_id)
                .order_by(UserSession.start_time.desc())
                .offset(skip)
                .limit(limit)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def active_user_ids(self) -> Set[UUID]:
        async with self._store_operation("read"):
            stmt = select(UserSession.user_id).where(
                UserSession.status == SessionStatus.ACTIVE.value
            )
            result = await self.session.execute(stmt)
            return set(result.scalars().all())

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def complete(
        self,
        user_session: UserSession,
        data: UserSessionComplete,
    ) -> Optional[UserSession]:
        """
        Apply the end-of-session fields, only while the row is still active.

        Returns:
            The updated session, or None if another request completed it
            after it was loaded.
        """
        async with self._store_operation("update"):
            stmt = (
                update(UserSession)
                .where(
                    UserSession.id == user_session.id,
                    UserSession.status == SessionStatus.ACTIVE.value,
                )
                .values(**data.model_dump())
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                return None
            for field, value in data.model_dump().items():
                set_committed_value(user_session, field, value)
            return user_session
