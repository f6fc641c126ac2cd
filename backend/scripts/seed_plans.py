#!/usr/bin/env python3
"""
Seed script to create the default subscription plans.

Existing plans (matched by name) are left untouched, so the script can be
re-run safely.

Run: python scripts/seed_plans.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cowork.infrastructure.db.database import get_session_context
from cowork.infrastructure.db.models.subscription_plan import SubscriptionPlanCreate
from cowork.infrastructure.db.repositories import SubscriptionPlanRepository


logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


DEFAULT_PLANS = [
    SubscriptionPlanCreate(
        name="Basic Plan",
        description="20 hours per month for light users",
        hours_included=20,
        price=299,
        duration_days=30,
    ),
    SubscriptionPlanCreate(
        name="Standard Plan",
        description="50 hours per month for regular users",
        hours_included=50,
        price=699,
        duration_days=30,
    ),
    SubscriptionPlanCreate(
        name="Premium Plan",
        description="100 hours per month for heavy users",
        hours_included=100,
        price=1299,
        duration_days=30,
    ),
    SubscriptionPlanCreate(
        name="Unlimited Plan",
        description="200 hours per month for unlimited access",
        hours_included=200,
        price=1999,
        duration_days=30,
    ),
]


async def seed_plans() -> int:
    """Insert missing default plans. Returns the number created."""
    created = 0
    async with get_session_context() as session:
        repo = SubscriptionPlanRepository(session)
        for plan in DEFAULT_PLANS:
            if await repo.get_by_name(plan.name):
                logger.info(f"Plan already exists: {plan.name}")
                continue
            await repo.create(plan)
            created += 1
            logger.info(f"Created plan: {plan.name} ({plan.hours_included}h)")
    return created


if __name__ == "__main__":
    count = asyncio.run(seed_plans())
    print(f"✅ Seeded {count} subscription plans")
