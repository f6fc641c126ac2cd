"""
Session Service

Starts and ends customer usage sessions and bills elapsed time against the
customer's subscription.

Start:
    1. refuse if the customer already has an active session
    2. refuse if there is no current subscription
    3. refuse if the subscription has no hours left
    4. insert an active session

End:
    1. load the session with customer and subscription
    2. bill the elapsed time (minutes rounded up, hours rounded up)
    3. complete the session and deduct the clamped balance
    4. commit, then notify the webhook (best effort)

Every store write of one operation shares the request's database session
and is committed once. The active-session check is still a plain
read-then-insert, so two concurrent starts for the same customer can both
succeed.

Ending is guarded by the store: completion only updates a row that is still
active, so of two concurrent ends for one session only the first bills.
"""

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cowork.config.settings import get_settings
from cowork.domain.billing import bill_session, elapsed_label, format_duration
from cowork.domain.models import SessionStatus
from cowork.domain.sessions import (
    ActiveSessionResponse,
    CustomerData,
    SessionDetails,
    SessionEndedEvent,
    SessionEndResponse,
    SessionResponse,
    StaffIdentity,
)
from cowork.infrastructure.db.models.user_session import (
    UserSession,
    UserSessionComplete,
    UserSessionCreate,
)
from cowork.infrastructure.db.repositories import (
    SessionRecord,
    UserSessionRepository,
    UserSubscriptionRepository,
)
from cowork.infrastructure.exceptions import (
    InsufficientBalanceError,
    NoActiveSubscriptionError,
    NotFoundError,
    SessionAlreadyActiveError,
    SessionNotActiveError,
    StoreError,
)
from cowork.infrastructure.notifications.webhook_notifier import SessionWebhookNotifier


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionService:
    """
    Session lifecycle controller.

    Args:
        db: Request-scoped database session shared by the repositories
        sessions: Repository for user_sessions
        subscriptions: Repository for user_subscriptions
        notifier: Session-ended webhook notifier
        clock: Returns the current aware datetime (injectable for tests)
        tz: Timezone used to decide which subscriptions are still valid today
    """

    def __init__(
        self,
        db: AsyncSession,
        sessions: UserSessionRepository,
        subscriptions: UserSubscriptionRepository,
        notifier: SessionWebhookNotifier,
        clock: Callable[[], datetime] = _utcnow,
        tz: Optional[tzinfo] = None,
    ):
        self._db = db
        self._sessions = sessions
        self._subscriptions = subscriptions
        self._notifier = notifier
        self._clock = clock
        self._tz = tz if tz is not None else get_settings().tzinfo

    def _today(self, now: datetime) -> date:
        return now.astimezone(self._tz).date()

    async def _commit(self, operation: str) -> None:
        try:
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError(
                f"Failed to commit {operation}",
                operation=operation,
                table="user_sessions",
                original_error=e,
            ) from e

    # =========================================================================
    # Start
    # =========================================================================

    async def start_session(self, user_id: UUID, staff: StaffIdentity) -> UserSession:
        """
        Start a session for a customer.

        Raises:
            SessionAlreadyActiveError: the customer already has an active session
            NoActiveSubscriptionError: no active subscription valid today
            InsufficientBalanceError: the subscription has no hours left
            StoreError: any read or write failure
        """
        existing = await self._sessions.get_active_for_user(user_id)
        if existing is not None:
            raise SessionAlreadyActiveError(str(user_id), str(existing.id))

        now = self._clock()
        subscription = await self._subscriptions.get_current_for_user(
            user_id, self._today(now)
        )
        if subscription is None:
            raise NoActiveSubscriptionError(str(user_id))

        if subscription.hours_remaining <= 0:
            raise InsufficientBalanceError(
                str(user_id), str(subscription.id), subscription.hours_remaining
            )

        user_session = await self._sessions.create(
            UserSessionCreate(
                user_id=user_id,
                user_subscription_id=subscription.id,
                started_by=staff.id,
                start_time=now,
                status=SessionStatus.ACTIVE.value,
            )
        )
        await self._commit("start_session")

        logger.info(
            f"Session {user_session.id} started for user {user_id} by {staff.id}"
        )
        return user_session

    # =========================================================================
    # End
    # =========================================================================

    async def end_session(self, session_id: UUID, staff: StaffIdentity) -> SessionEndResponse:
        """
        End an active session and deduct its billed hours.

        Raises:
            NotFoundError: unknown session id
            SessionNotActiveError: the session was already completed
            StoreError: any read or write failure
        """
        record = await self._sessions.get_record(session_id)
        if record is None:
            raise NotFoundError(
                f"Session {session_id} not found",
                operation="read",
                table="user_sessions",
            )

        user_session = record.session
        if user_session.status != SessionStatus.ACTIVE.value:
            raise SessionNotActiveError(str(session_id), user_session.status)

        end_time = self._clock()
        subscription = record.subscription
        duration_minutes, hours_deducted, new_balance = bill_session(
            user_session.start_time,
            end_time,
            subscription.hours_remaining if subscription is not None else None,
        )

        completed = await self._sessions.complete(
            user_session,
            UserSessionComplete(
                end_time=end_time,
                duration_minutes=duration_minutes,
                hours_deducted=hours_deducted,
                ended_by=staff.id,
            ),
        )
        if completed is None:
            raise SessionNotActiveError(str(session_id), SessionStatus.COMPLETED.value)

        if subscription is not None:
            await self._subscriptions.set_hours_remaining(subscription, new_balance)

        await self._commit("end_session")

        duration_label = format_duration(duration_minutes)
        logger.info(
            f"Session {session_id} ended by {staff.id}: {duration_label}, "
            f"{hours_deducted}h deducted, balance {new_balance}"
        )

        notified = await self._notifier.notify_session_ended(
            self._build_event(record, end_time, duration_minutes, hours_deducted, new_balance, staff)
        )

        return SessionEndResponse(
            session=SessionResponse.model_validate(user_session),
            duration_minutes=duration_minutes,
            hours_deducted=hours_deducted,
            hours_remaining=new_balance,
            duration_label=duration_label,
            message=(
                f"Session ended. Duration: {duration_label}. "
                f"Hours deducted: {hours_deducted}"
            ),
            notified=notified,
        )

    def _build_event(
        self,
        record: SessionRecord,
        end_time: datetime,
        duration_minutes: int,
        hours_deducted: int,
        new_balance: Optional[float],
        staff: StaffIdentity,
    ) -> SessionEndedEvent:
        user = record.user
        return SessionEndedEvent(
            session_id=record.session.id,
            user_id=record.session.user_id,
            customer_data=CustomerData(
                name=user.name,
                email=user.email,
                whatsapp=user.whatsapp,
            ),
            session_details=SessionDetails(
                start_time=record.session.start_time,
                end_time=end_time,
                duration_minutes=duration_minutes,
                hours_deducted=hours_deducted,
                subscription_plan=record.plan_name,
                hours_remaining=new_balance if new_balance is not None else 0,
            ),
            ended_by=staff.name,
            timestamp=self._clock(),
        )

    # =========================================================================
    # Listing
    # =========================================================================

    async def list_active_sessions(self) -> List[ActiveSessionResponse]:
        """Active sessions with customer, plan and live elapsed time."""
        now = self._clock()
        records = await self._sessions.list_active_records()
        return [
            ActiveSessionResponse(
                id=r.session.id,
                user_id=r.session.user_id,
                start_time=r.session.start_time,
                status=r.session.status,
                customer_name=r.user.name,
                customer_email=r.user.email,
                plan_name=r.plan_name,
                hours_remaining=r.subscription.hours_remaining if r.subscription else None,
                elapsed=elapsed_label(r.session.start_time, now),
            )
            for r in records
        ]

    async def list_customer_sessions(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> List[SessionResponse]:
        sessions = await self._sessions.list_for_user(user_id, skip=skip, limit=limit)
        return [SessionResponse.model_validate(s) for s in sessions]
