"""
Dependency Injection Providers for Cowork Sessions

Provides FastAPI dependencies for database sessions and repositories.
All repositories of one request share one AsyncSession.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cowork.infrastructure.db.database import get_session
from cowork.infrastructure.db.repositories import (
    SubscriptionPlanRepository,
    UserRepository,
    UserSessionRepository,
    UserSubscriptionRepository,
)


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_user_repository(
    session: SessionDep,
) -> AsyncGenerator[UserRepository, None]:
    yield UserRepository(session)


async def get_session_repository(
    session: SessionDep,
) -> AsyncGenerator[UserSessionRepository, None]:
    yield UserSessionRepository(session)


async def get_subscription_repository(
    session: SessionDep,
) -> AsyncGenerator[UserSubscriptionRepository, None]:
    yield UserSubscriptionRepository(session)


async def get_plan_repository(
    session: SessionDep,
) -> AsyncGenerator[SubscriptionPlanRepository, None]:
    yield SubscriptionPlanRepository(session)


UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]
SessionRepoDep = Annotated[UserSessionRepository, Depends(get_session_repository)]
SubscriptionRepoDep = Annotated[
    UserSubscriptionRepository,
    Depends(get_subscription_repository)
]
PlanRepoDep = Annotated[SubscriptionPlanRepository, Depends(get_plan_repository)]

