"""
Subscription Plan Routes

Public, read-only listing of the plans currently offered.
"""

from typing import List

from fastapi import APIRouter

from cowork.api.dependencies import PlanRepoDep
from cowork.domain.sessions import SubscriptionPlanResponse


router = APIRouter()


@router.get("/subscriptions/plans", response_model=List[SubscriptionPlanResponse])
async def list_plans(plans: PlanRepoDep):
    """Active subscription plans, cheapest first."""
    return [SubscriptionPlanResponse.model_validate(p) for p in await plans.list_active()]
