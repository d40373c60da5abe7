"""
Leads API routes.
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, UploadFile, File, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.core.exceptions import CSVParseError, raise_bad_request
from lead_manager.services.lead_service import LeadService
from lead_manager.schemas.lead import LeadUpdate, LeadResponse, LeadListResponse, LeadImportResponse
from lead_manager.api.deps import get_current_user, ensure_company_access
from lead_manager.models.user import User

router = APIRouter(prefix="/api/leads", tags=["leads"])


@router.get("", response_model=LeadListResponse)
async def list_leads(
    company: str = Query(...),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List a tenant's leads, newest first, with touchpoint counts."""
    tenant = ensure_company_access(current_user, company)
    leads = await LeadService(session).list(tenant)
    return LeadListResponse(leads=leads, total=len(leads))


@router.get("/export")
async def export_leads(
    company: str = Query(...),
    status: Optional[str] = None,
    campaign_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Export leads to CSV."""
    tenant = ensure_company_access(current_user, company)
    filename, csv_content = await LeadService(session).export(tenant, status, campaign_id)

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.post("/import", response_model=LeadImportResponse)
async def import_leads(
    company: str = Query(...),
    campaign_id: Optional[uuid.UUID] = None,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Import leads from CSV file."""
    tenant = ensure_company_access(current_user, company)
    content = await file.read()

    try:
        return await LeadService(session).import_csv(tenant, content, campaign_id)
    except CSVParseError as e:
        raise_bad_request(e.message)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a lead by ID."""
    lead = await LeadService(session).get(lead_id)
    ensure_company_access(current_user, lead.tenant)
    return lead


@router.put("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: uuid.UUID,
    lead_data: LeadUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a lead; assigning or removing a campaign may move its status."""
    lead_service = LeadService(session)
    lead = await lead_service.get_model(lead_id)
    ensure_company_access(current_user, lead.tenant)
    return await lead_service.update(lead_id, lead_data)
