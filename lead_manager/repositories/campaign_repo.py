"""
Campaign repository.
"""
import uuid
from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.models.campaign import Campaign
from lead_manager.repositories.base import BaseRepository


class CampaignRepository(BaseRepository[Campaign]):
    """Repository for Campaign operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Campaign, session)

    async def list_for_company(self, company: str) -> List[Campaign]:
        """Campaigns of one tenant ordered by name."""
        query = select(Campaign).where(Campaign.company == company).order_by(Campaign.name)
        result = await self.session.exec(query)
        return list(result.all())

    async def get_for_company(self, campaign_id: uuid.UUID, company: str) -> Optional[Campaign]:
        """The campaign, only if it belongs to `company`."""
        campaign = await self.get(campaign_id)
        if campaign and campaign.company == company:
            return campaign
        return None
