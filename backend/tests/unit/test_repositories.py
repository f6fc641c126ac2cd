"""
Repository tests against a real async engine.

Runs the production SQL on in-memory SQLite (aiosqlite) with the tables
created from SQLModel metadata.
"""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from cowork.domain.models import SessionStatus, SubscriptionStatus, UserRole
from cowork.infrastructure.db.models import (
    SubscriptionPlan,
    SubscriptionPlanCreate,
    User,
    UserSession,
    UserSessionComplete,
    UserSubscription,
)
from cowork.infrastructure.db.repositories import (
    SubscriptionPlanRepository,
    UserRepository,
    UserSessionRepository,
    UserSubscriptionRepository,
)


TODAY = date(2025, 3, 10)
NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


# ============================================================================
# Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def db_session():
    """Isolated in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded(db_session):
    """Staff member, one customer and one plan."""
    staff = User(name="Front Desk", email="desk@cowork.test", role=UserRole.STAFF.value)
    customer = User(name="Ana Souza", email="ana@example.com", role=UserRole.CUSTOMER.value)
    plan = SubscriptionPlan(name="Basic Plan", hours_included=20, price=299)
    db_session.add_all([staff, customer, plan])
    await db_session.flush()
    return staff, customer, plan


async def add_subscription(db_session, customer, plan, end_date, status=SubscriptionStatus.ACTIVE.value, hours_remaining=5):
    subscription = UserSubscription(
        user_id=customer.id,
        subscription_plan_id=plan.id,
        hours_remaining=hours_remaining,
        start_date=TODAY - timedelta(days=30),
        end_date=end_date,
        status=status,
    )
    db_session.add(subscription)
    await db_session.flush()
    return subscription


async def add_session(db_session, customer, staff, start_time=NOW, status=SessionStatus.ACTIVE.value, subscription=None):
    user_session = UserSession(
        user_id=customer.id,
        user_subscription_id=subscription.id if subscription else None,
        started_by=staff.id,
        start_time=start_time,
        status=status,
    )
    db_session.add(user_session)
    await db_session.flush()
    return user_session


# ============================================================================
# Current subscription
# ============================================================================

class TestCurrentSubscription:

    @pytest.mark.asyncio
    async def test_end_date_today_is_current(self, db_session, seeded):
        _, customer, plan = seeded
        subscription = await add_subscription(db_session, customer, plan, end_date=TODAY)
        repo = UserSubscriptionRepository(db_session)

        current = await repo.get_current_with_plan_name(customer.id, TODAY)

        assert current is not None
        found, plan_name = current
        assert found.id == subscription.id
        assert plan_name == "Basic Plan"

    @pytest.mark.asyncio
    async def test_end_date_yesterday_is_not_current(self, db_session, seeded):
        _, customer, plan = seeded
        await add_subscription(db_session, customer, plan, end_date=TODAY - timedelta(days=1))
        repo = UserSubscriptionRepository(db_session)

        assert await repo.get_current_for_user(customer.id, TODAY) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [SubscriptionStatus.EXPIRED.value, SubscriptionStatus.CANCELLED.value],
    )
    async def test_inactive_status_is_not_current(self, db_session, seeded, status):
        _, customer, plan = seeded
        await add_subscription(db_session, customer, plan, end_date=TODAY + timedelta(days=10), status=status)
        repo = UserSubscriptionRepository(db_session)

        assert await repo.get_current_for_user(customer.id, TODAY) is None

    @pytest.mark.asyncio
    async def test_latest_end_date_wins(self, db_session, seeded):
        _, customer, plan = seeded
        await add_subscription(db_session, customer, plan, end_date=TODAY + timedelta(days=10))
        later = await add_subscription(db_session, customer, plan, end_date=TODAY + timedelta(days=40))
        repo = UserSubscriptionRepository(db_session)

        current = await repo.get_current_for_user(customer.id, TODAY)

        assert current.id == later.id

    @pytest.mark.asyncio
    async def test_other_customers_subscription_ignored(self, db_session, seeded):
        staff, customer, plan = seeded
        await add_subscription(db_session, customer, plan, end_date=TODAY + timedelta(days=10))
        repo = UserSubscriptionRepository(db_session)

        assert await repo.get_current_for_user(staff.id, TODAY) is None

    @pytest.mark.asyncio
    async def test_set_hours_remaining_persists(self, db_session, seeded):
        _, customer, plan = seeded
        subscription = await add_subscription(db_session, customer, plan, end_date=TODAY, hours_remaining=5)
        repo = UserSubscriptionRepository(db_session)

        await repo.set_hours_remaining(subscription, 3)

        stored = await db_session.scalar(
            select(UserSubscription.hours_remaining).where(UserSubscription.id == subscription.id)
        )
        assert stored == 3


# ============================================================================
# Sessions
# ============================================================================

class TestSessionQueries:

    @pytest.mark.asyncio
    async def test_active_for_user(self, db_session, seeded):
        staff, customer, _ = seeded
        await add_session(db_session, customer, staff, NOW - timedelta(days=1), status=SessionStatus.COMPLETED.value)
        active = await add_session(db_session, customer, staff)
        repo = UserSessionRepository(db_session)

        assert (await repo.get_active_for_user(customer.id)).id == active.id
        assert await repo.get_active_for_user(staff.id) is None

    @pytest.mark.asyncio
    async def test_record_with_subscription(self, db_session, seeded):
        staff, customer, plan = seeded
        subscription = await add_subscription(db_session, customer, plan, end_date=TODAY)
        user_session = await add_session(db_session, customer, staff, subscription=subscription)
        repo = UserSessionRepository(db_session)

        record = await repo.get_record(user_session.id)

        assert record.session.id == user_session.id
        assert record.user.name == "Ana Souza"
        assert record.subscription.id == subscription.id
        assert record.plan_name == "Basic Plan"

    @pytest.mark.asyncio
    async def test_record_without_subscription(self, db_session, seeded):
        staff, customer, _ = seeded
        user_session = await add_session(db_session, customer, staff)
        repo = UserSessionRepository(db_session)

        record = await repo.get_record(user_session.id)

        assert record.user.id == customer.id
        assert record.subscription is None
        assert record.plan_name is None

    @pytest.mark.asyncio
    async def test_unknown_record(self, db_session, seeded):
        repo = UserSessionRepository(db_session)
        assert await repo.get_record(uuid4()) is None

    @pytest.mark.asyncio
    async def test_active_records_newest_first(self, db_session, seeded):
        staff, customer, _ = seeded
        other = User(name="Bruno Lima", email="bruno@example.com", role=UserRole.CUSTOMER.value)
        db_session.add(other)
        older = await add_session(db_session, customer, staff, NOW - timedelta(hours=2))
        newer = await add_session(db_session, other, staff, NOW)
        await add_session(db_session, customer, staff, NOW - timedelta(days=3), status=SessionStatus.COMPLETED.value)
        repo = UserSessionRepository(db_session)

        records = await repo.list_active_records()

        assert [r.session.id for r in records] == [newer.id, older.id]
        assert await repo.active_user_ids() == {customer.id, other.id}

    @pytest.mark.asyncio
    async def test_history_pagination(self, db_session, seeded):
        staff, customer, _ = seeded
        sessions = [
            await add_session(db_session, customer, staff, NOW - timedelta(days=d), status=SessionStatus.COMPLETED.value)
            for d in range(3)
        ]
        repo = UserSessionRepository(db_session)

        page = await repo.list_for_user(customer.id, skip=1, limit=1)

        assert [s.id for s in page] == [sessions[1].id]


class TestCompleteSession:

    def _completion(self, staff):
        return UserSessionComplete(
            end_time=NOW + timedelta(minutes=61),
            duration_minutes=61,
            hours_deducted=2,
            ended_by=staff.id,
        )

    @pytest.mark.asyncio
    async def test_completes_active_session(self, db_session, seeded):
        staff, customer, _ = seeded
        user_session = await add_session(db_session, customer, staff)
        repo = UserSessionRepository(db_session)

        completed = await repo.complete(user_session, self._completion(staff))

        assert completed is user_session
        assert user_session.status == SessionStatus.COMPLETED.value
        assert user_session.duration_minutes == 61
        stored = await db_session.scalar(
            select(UserSession.status).where(UserSession.id == user_session.id)
        )
        assert stored == SessionStatus.COMPLETED.value

    @pytest.mark.asyncio
    async def test_already_completed_row_is_not_updated(self, db_session, seeded):
        """A concurrent end that completed the row first wins."""
        staff, customer, _ = seeded
        user_session = await add_session(db_session, customer, staff)
        await db_session.execute(
            update(UserSession)
            .where(UserSession.id == user_session.id)
            .values(status=SessionStatus.COMPLETED.value, duration_minutes=5)
            .execution_options(synchronize_session=False)
        )
        repo = UserSessionRepository(db_session)

        assert await repo.complete(user_session, self._completion(staff)) is None

        stored = await db_session.scalar(
            select(UserSession.duration_minutes).where(UserSession.id == user_session.id)
        )
        assert stored == 5


# ============================================================================
# Users and plans
# ============================================================================

class TestUsersAndPlans:

    @pytest.mark.asyncio
    async def test_customers_by_name(self, db_session, seeded):
        staff, customer, _ = seeded
        db_session.add(User(name="Aaron Reis", email="aaron@example.com", role=UserRole.CUSTOMER.value))
        await db_session.flush()
        repo = UserRepository(db_session)

        customers = await repo.list_customers()

        assert [c.name for c in customers] == ["Aaron Reis", "Ana Souza"]
        assert (await repo.get_user(staff.id)).role == UserRole.STAFF.value

    @pytest.mark.asyncio
    async def test_active_plans_cheapest_first(self, db_session, seeded):
        db_session.add_all([
            SubscriptionPlan(name="Premium Plan", hours_included=100, price=1299),
            SubscriptionPlan(name="Legacy", hours_included=10, price=99, is_active=False),
        ])
        await db_session.flush()
        repo = SubscriptionPlanRepository(db_session)

        plans = await repo.list_active()

        assert [p.name for p in plans] == ["Basic Plan", "Premium Plan"]

    @pytest.mark.asyncio
    async def test_create_and_find_plan(self, db_session):
        repo = SubscriptionPlanRepository(db_session)

        created = await repo.create(
            SubscriptionPlanCreate(name="Standard Plan", hours_included=50, price=699)
        )

        found = await repo.get_by_name("Standard Plan")
        assert found.id == created.id
        assert await repo.get_by_name("Missing") is None
