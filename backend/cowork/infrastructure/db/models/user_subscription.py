"""
UserSubscription SQLModel

A customer's purchased balance of hours, valid between start_date and
end_date. ``hours_remaining`` is mutated when sessions end and is kept
non-negative by clamping on write, not by a database constraint.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Numeric
from sqlmodel import Field, SQLModel

from cowork.domain.models import SubscriptionStatus
from cowork.infrastructure.db.models.base import BaseModel


class UserSubscriptionBase(SQLModel):
    user_id: UUID = Field(foreign_key="users.id", index=True, nullable=False)
    subscription_plan_id: UUID = Field(
        foreign_key="subscription_plans.id",
        nullable=False,
    )
    hours_remaining: float = Field(
        default=0,
        sa_type=Numeric(asdecimal=False),
    )
    start_date: date
    end_date: date
    status: str = Field(default=SubscriptionStatus.ACTIVE.value, index=True)


class UserSubscription(BaseModel, UserSubscriptionBase, table=True):
    __tablename__ = "user_subscriptions"
