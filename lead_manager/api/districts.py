"""
Districts and district contacts API routes.
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, UploadFile, File
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.core.exceptions import CSVParseError, raise_bad_request
from lead_manager.core.vocabulary import Tenant
from lead_manager.services.district_service import DistrictService
from lead_manager.schemas.district import (
    DistrictContactListResponse,
    DistrictContactResponse,
    DistrictContactUpdate,
    DistrictCreate,
    DistrictImportResponse,
    DistrictListResponse,
    DistrictResponse,
    DistrictUpdate,
)
from lead_manager.api.deps import get_current_user, require_admin, ensure_company_access
from lead_manager.models.user import User

router = APIRouter(prefix="/api", tags=["districts"])


@router.get("/districts", response_model=DistrictListResponse)
async def list_districts(
    status: Optional[str] = None,
    county: Optional[str] = None,
    search: Optional[str] = None,
    campaign_id: Optional[uuid.UUID] = Query(None, alias="campaignId"),
    assigned_only: bool = Query(False, alias="assignedOnly"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=500, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List districts with filtering and pagination, ordered by name."""
    ensure_company_access(current_user, Tenant.AVALERN.value)
    return await DistrictService(session).list(
        current_user.id,
        status=status,
        county=county,
        search=search,
        campaign_id=campaign_id,
        assigned_only=assigned_only,
        page=page,
        page_size=page_size,
    )


@router.post("/districts", response_model=DistrictResponse, status_code=201)
async def create_district(
    district_data: DistrictCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """Create a district (admin only)."""
    return await DistrictService(session).create(district_data)


@router.post("/districts/import", response_model=DistrictImportResponse)
async def import_districts(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """Import districts and their contacts from CSV (admin only)."""
    content = await file.read()
    try:
        return await DistrictService(session).import_csv(content)
    except CSVParseError as e:
        raise_bad_request(e.message)


@router.patch("/districts/{district_id}", response_model=DistrictResponse)
async def update_district(
    district_id: uuid.UUID,
    district_data: DistrictUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a district; assigning or removing a campaign may move its status."""
    ensure_company_access(current_user, Tenant.AVALERN.value)
    return await DistrictService(session).update(district_id, district_data, current_user.id)


@router.get("/district-contacts", response_model=DistrictContactListResponse)
async def list_district_contacts(
    district_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """District contacts, newest first, with touchpoint counts and their district."""
    ensure_company_access(current_user, Tenant.AVALERN.value)
    contacts = await DistrictService(session).list_contacts(district_id=district_id)
    return DistrictContactListResponse(contacts=contacts)


@router.put("/district-contacts/{contact_id}", response_model=DistrictContactResponse)
async def update_district_contact(
    contact_id: uuid.UUID,
    contact_data: DistrictContactUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a district contact."""
    ensure_company_access(current_user, Tenant.AVALERN.value)
    return await DistrictService(session).update_contact(contact_id, contact_data)
