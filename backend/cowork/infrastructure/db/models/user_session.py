"""
UserSession SQLModel

One timed usage interval for a customer. Created ``active`` by a staff
member and moved once to ``completed`` when it is ended.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, Numeric
from sqlmodel import Field, SQLModel

from cowork.domain.models import SessionStatus
from cowork.infrastructure.db.models.base import BaseModel, utcnow


class UserSessionBase(SQLModel):
    user_id: UUID = Field(foreign_key="users.id", index=True, nullable=False)
    user_subscription_id: Optional[UUID] = Field(
        default=None,
        foreign_key="user_subscriptions.id",
    )
    start_time: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    end_time: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
    )
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    hours_deducted: float = Field(
        default=0,
        sa_type=Numeric(asdecimal=False),
    )
    status: str = Field(default=SessionStatus.ACTIVE.value, index=True)
    started_by: UUID = Field(foreign_key="users.id", nullable=False)
    ended_by: Optional[UUID] = Field(default=None, foreign_key="users.id")


class UserSession(BaseModel, UserSessionBase, table=True):
    __tablename__ = "user_sessions"


class UserSessionCreate(SQLModel):
    """Fields set when staff start a session."""
    user_id: UUID
    user_subscription_id: Optional[UUID] = None
    started_by: UUID
    start_time: datetime
    status: str = SessionStatus.ACTIVE.value


class UserSessionComplete(SQLModel):
    """Fields written when staff end a session."""
    end_time: datetime
    duration_minutes: int
    hours_deducted: float
    ended_by: UUID
    status: str = SessionStatus.COMPLETED.value
