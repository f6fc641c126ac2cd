"""
Customer Routes

Customer directory for staff: search, session history and current
subscription.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from cowork.api.dependencies import (
    SessionRepoDep,
    SessionServiceDep,
    StaffDep,
    SubscriptionRepoDep,
    UserRepoDep,
)
from cowork.config.settings import get_settings
from cowork.domain.services import filter_customers
from cowork.domain.sessions import (
    CustomerResponse,
    CustomerSubscriptionResponse,
    SessionResponse,
)


router = APIRouter()


@router.get("/customers", response_model=List[CustomerResponse])
async def list_customers(
    staff: StaffDep,
    users: UserRepoDep,
    sessions: SessionRepoDep,
    search: Optional[str] = Query(None, description="Substring of name or email"),
):
    """
    Customers ordered by name, optionally filtered by a case-insensitive
    substring of their name or email.
    """
    customers = filter_customers(await users.list_customers(), search)
    active = await sessions.active_user_ids()
    return [
        CustomerResponse(
            id=c.id,
            name=c.name,
            email=c.email,
            has_active_session=c.id in active,
        )
        for c in customers
    ]


@router.get("/customers/{user_id}/sessions", response_model=List[SessionResponse])
async def list_customer_sessions(
    user_id: UUID,
    staff: StaffDep,
    service: SessionServiceDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    """A customer's sessions, newest first."""
    return await service.list_customer_sessions(user_id, skip=skip, limit=limit)


@router.get(
    "/customers/{user_id}/subscription",
    response_model=CustomerSubscriptionResponse,
)
async def get_customer_subscription(
    user_id: UUID,
    staff: StaffDep,
    subscriptions: SubscriptionRepoDep,
):
    """The customer's current subscription (active and not past its end date)."""
    settings = get_settings()
    today = datetime.now(settings.tzinfo).date()

    current = await subscriptions.get_current_with_plan_name(user_id, today)
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No active subscription for user {user_id}",
        )

    subscription, plan_name = current
    return CustomerSubscriptionResponse(
        id=subscription.id,
        user_id=subscription.user_id,
        subscription_plan_id=subscription.subscription_plan_id,
        plan_name=plan_name,
        hours_remaining=subscription.hours_remaining,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        status=subscription.status,
    )
