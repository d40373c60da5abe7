"""
Outreach sequences API routes.
"""
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.core.exceptions import raise_bad_request
from lead_manager.services.outreach_service import OutreachService
from lead_manager.schemas.outreach import (
    OutreachSequenceCreate,
    OutreachSequenceEnvelope,
    OutreachSequenceListResponse,
)
from lead_manager.api.deps import get_current_user, ensure_company_access
from lead_manager.models.user import User

router = APIRouter(prefix="/api/outreach-sequences", tags=["outreach-sequences"])


@router.get("", response_model=OutreachSequenceListResponse)
async def list_sequences(
    company: str = Query(""),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List a tenant's outreach sequences, newest first, with step counts."""
    if not company:
        raise_bad_request("Company parameter is required")
    tenant = ensure_company_access(current_user, company)
    return OutreachSequenceListResponse(sequences=await OutreachService(session).list(tenant))


@router.post("", response_model=OutreachSequenceEnvelope, status_code=201)
async def create_sequence(
    sequence_data: OutreachSequenceCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a sequence; steps are numbered in the order given."""
    if not sequence_data.name or not sequence_data.company:
        raise_bad_request("Name and company are required")
    tenant = ensure_company_access(current_user, sequence_data.company)
    return OutreachSequenceEnvelope(sequence=await OutreachService(session).create(tenant, sequence_data))


@router.get("/{sequence_id}", response_model=OutreachSequenceEnvelope)
async def get_sequence(
    sequence_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a sequence with its steps in order."""
    service = OutreachService(session)
    sequence = await service.get_model(sequence_id)
    ensure_company_access(current_user, sequence.company)
    return OutreachSequenceEnvelope(sequence=await service.with_steps(sequence))
