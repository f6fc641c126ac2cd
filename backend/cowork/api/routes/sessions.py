"""
Session Routes

Staff endpoints to start, end and list customer usage sessions.
Rule violations (already active, no subscription, no balance) propagate as
CoworkError subclasses and are mapped to HTTP responses in main.py.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, status

from cowork.api.dependencies import SessionServiceDep, StaffDep
from cowork.domain.sessions import (
    ActiveSessionResponse,
    SessionEndResponse,
    SessionResponse,
    StartSessionRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_session(
    request: StartSessionRequest,
    staff: StaffDep,
    service: SessionServiceDep,
):
    """
    Start a session for a customer.

    Fails with 409 when the customer already has an active session and 422
    when they have no current subscription or no hours left.
    """
    user_session = await service.start_session(request.user_id, staff)
    return SessionResponse.model_validate(user_session)


@router.post("/sessions/{session_id}/end", response_model=SessionEndResponse)
async def end_session(
    session_id: UUID,
    staff: StaffDep,
    service: SessionServiceDep,
):
    """
    End an active session and deduct its billed hours.

    The webhook notification is best effort; its outcome is reported in
    ``notified`` and never fails this request.
    """
    return await service.end_session(session_id, staff)


@router.get("/sessions/active", response_model=List[ActiveSessionResponse])
async def list_active_sessions(
    staff: StaffDep,
    service: SessionServiceDep,
):
    """All active sessions, most recently started first."""
    return await service.list_active_sessions()
