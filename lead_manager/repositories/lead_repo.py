"""
Lead repository with tenant listing and bulk operations.
"""
import uuid
from typing import Optional, List, Set
from datetime import datetime

from sqlmodel import select
from sqlalchemy import func
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.models.lead import Lead, LeadCampaignStatus
from lead_manager.repositories.base import BaseRepository


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def list_for_tenant(
        self,
        tenant: str,
        status: Optional[str] = None,
        campaign_id: Optional[uuid.UUID] = None
    ) -> List[Lead]:
        """Leads of one tenant, newest first."""
        query = select(Lead).where(Lead.tenant == tenant)
        if status:
            query = query.where(Lead.status == status)
        if campaign_id:
            query = query.where(Lead.campaign_id == campaign_id)
        query = query.order_by(Lead.created_at.desc())

        result = await self.session.exec(query)
        return list(result.all())

    async def emails_for_tenant(self, tenant: str) -> Set[str]:
        """Lower-cased emails already stored for a tenant."""
        query = select(Lead.email).where(Lead.tenant == tenant, Lead.email.is_not(None))
        result = await self.session.exec(query)
        return {email.lower() for email in result.all()}

    async def get_by_email(self, tenant: str, email: str) -> Optional[Lead]:
        """Case-insensitive email lookup within a tenant."""
        query = select(Lead).where(Lead.tenant == tenant, func.lower(Lead.email) == email.lower())
        result = await self.session.exec(query)
        return result.first()

    async def bulk_create(self, leads_data: List[dict]) -> List[Lead]:
        """Create multiple leads in one transaction."""
        leads = [Lead(**data) for data in leads_data]
        self.session.add_all(leads)
        await self.session.commit()
        return leads

    async def add_campaign_statuses(self, statuses: List[dict]) -> None:
        """Record the imported outreach state of each lead."""
        self.session.add_all([LeadCampaignStatus(**data) for data in statuses])
        await self.session.commit()

    async def touch(self, lead_id: uuid.UUID, contacted_at: datetime) -> Optional[Lead]:
        """Set last_contacted_at."""
        return await self.update(lead_id, {"last_contacted_at": contacted_at})
