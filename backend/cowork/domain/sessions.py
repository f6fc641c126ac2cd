"""
Session Domain Models

DTOs for the session bounded context: staff identity, request/response
shapes and the session-ended webhook payload.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cowork.domain.models import SessionStatus, SubscriptionStatus, UserRole


# =============================================================================
# Domain Entities
# =============================================================================

class StaffIdentity(BaseModel):
    """The authenticated staff member acting on a session."""
    id: UUID
    name: str
    email: Optional[str] = None
    role: UserRole


# =============================================================================
# Request/Response DTOs
# =============================================================================

class StartSessionRequest(BaseModel):
    """Request DTO for starting a session for a customer."""
    user_id: UUID = Field(..., description="Customer to start the session for")


class SessionResponse(BaseModel):
    """A single session row."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    user_subscription_id: Optional[UUID] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    hours_deducted: float = 0
    status: SessionStatus
    started_by: UUID
    ended_by: Optional[UUID] = None


class ActiveSessionResponse(BaseModel):
    """An active session as shown on the staff dashboard."""
    id: UUID
    user_id: UUID
    start_time: datetime
    status: SessionStatus
    customer_name: str
    customer_email: str
    plan_name: Optional[str] = None
    hours_remaining: Optional[float] = None
    elapsed: str = Field(description="Live elapsed time, e.g. '1h 5m'")


class SessionEndResponse(BaseModel):
    """Outcome of ending a session."""
    session: SessionResponse
    duration_minutes: int
    hours_deducted: int
    hours_remaining: Optional[float] = Field(
        default=None,
        description="Balance after deduction; None when no subscription is linked",
    )
    duration_label: str
    message: str
    notified: bool = Field(description="Whether the webhook accepted the notification")


class CustomerResponse(BaseModel):
    """Customer entry in the directory."""
    id: UUID
    name: str
    email: str
    has_active_session: bool = False


class SubscriptionPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    hours_included: int
    price: float
    duration_days: int
    is_active: bool


class CustomerSubscriptionResponse(BaseModel):
    """A customer's current subscription with its plan name."""
    id: UUID
    user_id: UUID
    subscription_plan_id: UUID
    plan_name: Optional[str] = None
    hours_remaining: float
    start_date: date
    end_date: date
    status: SubscriptionStatus


# =============================================================================
# Webhook Payload
# =============================================================================

class CustomerData(BaseModel):
    name: str
    email: str
    whatsapp: Optional[str] = None


class SessionDetails(BaseModel):
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    hours_deducted: int
    subscription_plan: Optional[str] = None
    hours_remaining: float = 0


class SessionEndedEvent(BaseModel):
    """
    JSON body POSTed to the session webhook when a session ends.

    Field names are camelCase on the wire.
    """
    model_config = ConfigDict(populate_by_name=True)

    action: str = "session_ended"
    session_id: UUID = Field(..., alias="sessionId")
    user_id: UUID = Field(..., alias="userId")
    customer_data: CustomerData = Field(..., alias="customerData")
    session_details: SessionDetails = Field(..., alias="sessionDetails")
    ended_by: Optional[str] = Field(default=None, alias="endedBy")
    timestamp: datetime

    def to_payload(self) -> dict:
        """Serialize for the wire."""
        return self.model_dump(mode="json", by_alias=True)
