"""
User assignment and activity API routes.
"""
import uuid
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.services.assignment_service import AssignmentService
from lead_manager.services.touchpoint_service import TouchpointService
from lead_manager.schemas.touchpoint import UserTouchpointSummary
from lead_manager.schemas.user import AssignmentRequest, AssignmentResponse, UserLeadsResponse
from lead_manager.api.deps import get_current_user, require_admin, ensure_self_or_admin
from lead_manager.models.user import User

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}/leads", response_model=UserLeadsResponse)
async def get_user_leads(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Leads, districts and district contacts assigned to a user (admin or self)."""
    ensure_self_or_admin(current_user, user_id)
    return await AssignmentService(session).list_for_user(user_id)


@router.post("/{user_id}/leads", response_model=AssignmentResponse)
async def change_user_assignments(
    user_id: uuid.UUID,
    request: AssignmentRequest,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """Assign or unassign districts and/or leads (admin only)."""
    return await AssignmentService(session).apply(user_id, request)


@router.get("/{user_id}/touchpoints", response_model=UserTouchpointSummary)
async def get_user_touchpoints(
    user_id: uuid.UUID,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Touchpoints a user created in a date range, counted by type (admin or self)."""
    ensure_self_or_admin(current_user, user_id)
    await AssignmentService(session).get_user(user_id)
    return await TouchpointService(session).user_summary(user_id, start_date, end_date)
