"""
Test configuration and fixtures for Cowork Sessions.

Provides shared fixtures for unit and integration tests: required
environment, the FastAPI app, in-memory repositories and a controllable
clock.
"""

import os

# Settings are validated on import; provide the required values first.
os.environ.setdefault("SUPABASE_URL", "https://testproject.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes")
os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from cowork.domain.models import SessionStatus, SubscriptionStatus, UserRole
from cowork.domain.sessions import StaffIdentity
from cowork.infrastructure.db.models import (
    SubscriptionPlan,
    User,
    UserSession,
    UserSessionComplete,
    UserSessionCreate,
    UserSubscription,
)
from cowork.infrastructure.db.repositories import SessionRecord


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application with overrides cleared afterwards."""
    from cowork.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app, raise_server_exceptions=False)


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Callable clock whose time only moves when a test advances it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# In-memory repositories
# =============================================================================

class FakeSubscriptionRepository:
    """Stands in for UserSubscriptionRepository."""

    def __init__(self):
        self.rows: Dict[UUID, UserSubscription] = {}
        self.plan_names: Dict[UUID, str] = {}
        self.balance_writes: List[tuple] = []

    def add(self, subscription: UserSubscription, plan_name: Optional[str] = None):
        self.rows[subscription.id] = subscription
        if plan_name:
            self.plan_names[subscription.subscription_plan_id] = plan_name
        return subscription

    async def get_current_with_plan_name(self, user_id: UUID, today: date):
        current = [
            s for s in self.rows.values()
            if s.user_id == user_id
            and s.status == SubscriptionStatus.ACTIVE.value
            and s.end_date >= today
        ]
        if not current:
            return None
        best = max(current, key=lambda s: s.end_date)
        return best, self.plan_names.get(best.subscription_plan_id)

    async def get_current_for_user(self, user_id: UUID, today: date):
        current = await self.get_current_with_plan_name(user_id, today)
        return current[0] if current else None

    async def set_hours_remaining(self, subscription: UserSubscription, hours_remaining: float):
        subscription.hours_remaining = hours_remaining
        self.balance_writes.append((subscription.id, hours_remaining))
        return subscription


class FakeSessionRepository:
    """Stands in for UserSessionRepository."""

    def __init__(self, users: Dict[UUID, User], subscriptions: FakeSubscriptionRepository):
        self.rows: Dict[UUID, UserSession] = {}
        self.users = users
        self.subscriptions = subscriptions
        self.inserted: List[UserSession] = []

    def add(self, user_session: UserSession) -> UserSession:
        self.rows[user_session.id] = user_session
        return user_session

    def _record(self, user_session: UserSession) -> SessionRecord:
        subscription = None
        plan_name = None
        if user_session.user_subscription_id:
            subscription = self.subscriptions.rows.get(user_session.user_subscription_id)
            if subscription is not None:
                plan_name = self.subscriptions.plan_names.get(subscription.subscription_plan_id)
        return SessionRecord(
            session=user_session,
            user=self.users[user_session.user_id],
            subscription=subscription,
            plan_name=plan_name,
        )

    async def get_active_for_user(self, user_id: UUID):
        for s in self.rows.values():
            if s.user_id == user_id and s.status == SessionStatus.ACTIVE.value:
                return s
        return None

    async def create(self, data: UserSessionCreate) -> UserSession:
        user_session = UserSession(**data.model_dump())
        self.inserted.append(user_session)
        return self.add(user_session)

    async def get_record(self, session_id: UUID):
        user_session = self.rows.get(session_id)
        return self._record(user_session) if user_session else None

    async def list_active_records(self):
        active = [s for s in self.rows.values() if s.status == SessionStatus.ACTIVE.value]
        active.sort(key=lambda s: s.start_time, reverse=True)
        return [self._record(s) for s in active]

    async def list_for_user(self, user_id: UUID, skip: int = 0, limit: int = 50):
        rows = [s for s in self.rows.values() if s.user_id == user_id]
        rows.sort(key=lambda s: s.start_time, reverse=True)
        return rows[skip:skip + limit]

    async def active_user_ids(self):
        return {s.user_id for s in self.rows.values() if s.status == SessionStatus.ACTIVE.value}

    async def complete(self, user_session: UserSession, data: UserSessionComplete):
        if self.rows[user_session.id].status != SessionStatus.ACTIVE.value:
            return None
        for field, value in data.model_dump().items():
            setattr(user_session, field, value)
        return user_session


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def staff_user():
    return User(name="Front Desk", email="desk@cowork.test", role=UserRole.STAFF.value)


@pytest.fixture
def staff(staff_user):
    return StaffIdentity(
        id=staff_user.id,
        name=staff_user.name,
        email=staff_user.email,
        role=UserRole.STAFF,
    )


@pytest.fixture
def customer():
    return User(
        name="Ana Souza",
        email="ana@example.com",
        whatsapp="+5511999990000",
        role=UserRole.CUSTOMER.value,
    )


@pytest.fixture
def plan():
    return SubscriptionPlan(
        name="Basic Plan",
        description="20 hours per month for light users",
        hours_included=20,
        price=299,
        duration_days=30,
    )


@pytest.fixture
def subscription_repo():
    return FakeSubscriptionRepository()


@pytest.fixture
def session_repo(staff_user, customer, subscription_repo):
    users = {staff_user.id: staff_user, customer.id: customer}
    return FakeSessionRepository(users, subscription_repo)


@pytest.fixture
def make_subscription(customer, plan, subscription_repo, clock):
    """Factory adding a subscription for the customer to the fake repo."""

    def _make(
        hours_remaining: float = 5,
        status: str = SubscriptionStatus.ACTIVE.value,
        end_date: Optional[date] = None,
    ) -> UserSubscription:
        today = clock().date()
        subscription = UserSubscription(
            user_id=customer.id,
            subscription_plan_id=plan.id,
            hours_remaining=hours_remaining,
            start_date=today - timedelta(days=5),
            end_date=end_date or today + timedelta(days=25),
            status=status,
        )
        return subscription_repo.add(subscription, plan_name=plan.name)

    return _make


@pytest.fixture
def db():
    """Request-scoped AsyncSession stand-in."""
    mock = MagicMock()
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    return mock


@pytest.fixture
def mock_notifier():
    mock = MagicMock()
    mock.notify_session_ended = AsyncMock(return_value=True)
    return mock
