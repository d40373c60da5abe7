"""
Touchpoint service - logging outreach and keeping last-contacted dates current.
"""
import logging
import uuid
from collections import Counter
from datetime import date, datetime, time
from typing import Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.core.exceptions import raise_not_found
from lead_manager.models.touchpoint import Touchpoint
from lead_manager.repositories.district_repo import DistrictContactRepository, DistrictRepository
from lead_manager.repositories.lead_repo import LeadRepository
from lead_manager.repositories.touchpoint_repo import TouchpointRepository
from lead_manager.schemas.touchpoint import TouchpointCreate, UserTouchpointSummary, TouchpointResponse

logger = logging.getLogger(__name__)


class TouchpointService:
    """Service for touchpoint operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.touchpoint_repo = TouchpointRepository(session)
        self.lead_repo = LeadRepository(session)
        self.district_repo = DistrictRepository(session)
        self.contact_repo = DistrictContactRepository(session)

    async def create(self, data: TouchpointCreate, created_by: Optional[uuid.UUID] = None) -> Touchpoint:
        """
        Create a touchpoint for a lead or a district contact.

        A completed touchpoint moves last_contacted_at on the lead, or on the
        contact's district. Without an explicit schedule the touchpoint is
        scheduled for now.
        """
        contact = None
        if data.lead_id:
            if not await self.lead_repo.get(data.lead_id):
                raise_not_found("Lead", str(data.lead_id))
        else:
            contact = await self.contact_repo.get(data.district_contact_id)
            if not contact:
                raise_not_found("District contact", str(data.district_contact_id))

        touchpoint_data = data.model_dump()
        touchpoint_data["created_by"] = created_by
        if touchpoint_data["scheduled_at"] is None:
            touchpoint_data["scheduled_at"] = datetime.utcnow()

        touchpoint = await self.touchpoint_repo.create(touchpoint_data)

        if touchpoint.completed_at:
            if contact:
                await self.district_repo.update(contact.district_id, {"last_contacted_at": touchpoint.completed_at})
            else:
                await self.lead_repo.touch(touchpoint.lead_id, touchpoint.completed_at)

        logger.info(f"Touchpoint {touchpoint.id} ({touchpoint.type}) created by {created_by}")
        return touchpoint

    async def list_for_parent(
        self,
        lead_id: Optional[uuid.UUID] = None,
        district_contact_id: Optional[uuid.UUID] = None
    ) -> List[Touchpoint]:
        return await self.touchpoint_repo.list_for_parent(lead_id, district_contact_id)

    async def user_summary(
        self,
        user_id: uuid.UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> UserTouchpointSummary:
        """A user's touchpoints between two dates (inclusive), counted by type."""
        start = datetime.combine(start_date, time.min) if start_date else None
        end = datetime.combine(end_date, time.max) if end_date else None

        touchpoints = await self.touchpoint_repo.list_by_creator(user_id, start, end)
        by_type = Counter(touchpoint.type for touchpoint in touchpoints)

        return UserTouchpointSummary(
            total=len(touchpoints),
            by_type=dict(by_type),
            touchpoints=[TouchpointResponse.model_validate(t) for t in touchpoints],
        )

    async def scheduled_counts(
        self,
        start_date: date,
        end_date: date,
        company: Optional[str] = None,
        campaign_id: Optional[uuid.UUID] = None
    ) -> Dict[str, int]:
        """Scheduled, not completed touchpoints per day between two dates (inclusive)."""
        return await self.touchpoint_repo.scheduled_per_day(
            datetime.combine(start_date, time.min),
            datetime.combine(end_date, time.max),
            company=company,
            campaign_id=campaign_id,
        )
