"""
Instantly sync API route.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.services.integrations.base import OutreachProvider
from lead_manager.services.sync_service import SyncService
from lead_manager.schemas.common import ErrorResponse
from lead_manager.schemas.sync import SyncRequest, SyncResults
from lead_manager.api.deps import get_current_user, get_outreach_provider
from lead_manager.models.user import User

router = APIRouter(prefix="/api", tags=["sync"])


@router.post(
    "/sync-instantly",
    response_model=SyncResults,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def sync_instantly(
    request: SyncRequest,
    current_user: User = Depends(get_current_user),
    provider: Optional[OutreachProvider] = Depends(get_outreach_provider),
    session: AsyncSession = Depends(get_session)
):
    """Push leads to their Instantly campaigns and record sent emails as touchpoints."""
    if provider is None:
        return JSONResponse(status_code=503, content={"error": "Instantly API key is not configured"})
    if not request.lead_ids:
        return JSONResponse(status_code=400, content={"error": "No leads selected for sync"})

    return await SyncService(session, provider).sync_leads(request.lead_ids, created_by=current_user.id)
