"""
SubscriptionPlan SQLModel

Immutable plan template: how many hours a purchase grants, for how long.
"""

from sqlalchemy import Numeric
from sqlmodel import Field, SQLModel

from cowork.infrastructure.db.models.base import BaseModel


class SubscriptionPlanBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="")
    hours_included: int = Field(default=0, ge=0)
    price: float = Field(
        default=0,
        ge=0,
        sa_type=Numeric(10, 2, asdecimal=False),
    )
    duration_days: int = Field(default=30, gt=0)
    is_active: bool = Field(default=True)


class SubscriptionPlan(BaseModel, SubscriptionPlanBase, table=True):
    __tablename__ = "subscription_plans"


class SubscriptionPlanCreate(SubscriptionPlanBase):
    pass
