"""
Touchpoints API routes.
"""
import uuid
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.core.exceptions import raise_bad_request
from lead_manager.services.touchpoint_service import TouchpointService
from lead_manager.schemas.touchpoint import (
    TouchpointCountsResponse, TouchpointCreate, TouchpointCreateResponse, TouchpointListResponse,
    TouchpointResponse,
)
from lead_manager.api.deps import get_current_user, ensure_company_access
from lead_manager.models.user import User

router = APIRouter(prefix="/api", tags=["touchpoints"])


@router.get("/touchpoints", response_model=TouchpointListResponse)
async def list_touchpoints(
    lead_id: Optional[uuid.UUID] = None,
    district_contact_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Touchpoints of one lead or district contact, newest first."""
    if (lead_id is None) == (district_contact_id is None):
        raise_bad_request("Provide exactly one of lead_id or district_contact_id")

    touchpoints = await TouchpointService(session).list_for_parent(lead_id, district_contact_id)
    return TouchpointListResponse(touchpoints=[TouchpointResponse.model_validate(t) for t in touchpoints])


@router.post("/touchpoints", response_model=TouchpointCreateResponse, status_code=201)
async def create_touchpoint(
    touchpoint_data: TouchpointCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Log or schedule a touchpoint."""
    touchpoint = await TouchpointService(session).create(touchpoint_data, created_by=current_user.id)
    return TouchpointCreateResponse(touchpoint=TouchpointResponse.model_validate(touchpoint))


@router.get("/touchpoint-counts", response_model=TouchpointCountsResponse)
async def touchpoint_counts(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    company: Optional[str] = None,
    campaign_id: Optional[uuid.UUID] = Query(None, alias="campaignId"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Scheduled, not yet completed touchpoints per day."""
    tenant = ensure_company_access(current_user, company) if company else None
    counts = await TouchpointService(session).scheduled_counts(start_date, end_date, tenant, campaign_id)
    return TouchpointCountsResponse(counts=counts)
