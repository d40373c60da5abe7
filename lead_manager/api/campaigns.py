"""
Campaigns API routes.
"""
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.repositories.campaign_repo import CampaignRepository
from lead_manager.services.campaign_service import CampaignService
from lead_manager.schemas.campaign import (
    AssignDistrictsRequest,
    AssignDistrictsResponse,
    CampaignCreate,
    CampaignListResponse,
    CampaignResponse,
    CampaignWithLeadsCreate,
    CampaignWithLeadsResponse,
)
from lead_manager.api.deps import get_current_user, require_admin, ensure_company_access
from lead_manager.models.user import User

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])


@router.get("", response_model=CampaignListResponse)
async def list_campaigns(
    company: str = Query(...),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List a tenant's campaigns."""
    tenant = ensure_company_access(current_user, company)
    campaigns = await CampaignRepository(session).list_for_company(tenant)
    return CampaignListResponse(campaigns=[CampaignResponse.model_validate(c) for c in campaigns])


@router.post("", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    campaign_data: CampaignCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """Create a campaign (admin only)."""
    ensure_company_access(current_user, campaign_data.company)
    return await CampaignService(session).create(campaign_data)


@router.post("/create-with-leads", response_model=CampaignWithLeadsResponse, status_code=201)
async def create_campaign_with_leads(
    campaign_data: CampaignWithLeadsCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """
    Create a campaign and move the selected leads into it (admin only).

    Leads newly put into a campaign go from not_contacted to
    actively_contacting; the campaign's outreach sequence is scheduled
    for each of them.
    """
    ensure_company_access(current_user, campaign_data.company)
    return await CampaignService(session).create_with_leads(campaign_data)


@router.post("/{campaign_id}/assign-districts", response_model=AssignDistrictsResponse)
async def assign_districts(
    campaign_id: uuid.UUID,
    request: AssignDistrictsRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Move districts into a campaign and schedule its outreach for their contacts."""
    service = CampaignService(session)
    campaign = await service.get_model(campaign_id)
    ensure_company_access(current_user, campaign.company)
    return await service.assign_districts(campaign, request.district_ids)
