"""
Campaign service - campaign creation and bulk assignment of leads and districts.

Assigned records go through the same status rule as single edits, and when
the campaign follows an outreach sequence each reachable person gets that
sequence's touchpoints scheduled from the campaign start date.
"""
import logging
import uuid
from types import SimpleNamespace
from typing import Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.core.exceptions import raise_bad_request, raise_not_found
from lead_manager.core.scheduler import can_reach, schedule_steps
from lead_manager.core.status import next_status
from lead_manager.models.campaign import Campaign
from lead_manager.models.outreach import OutreachStep
from lead_manager.repositories.campaign_repo import CampaignRepository
from lead_manager.repositories.district_repo import DistrictContactRepository, DistrictRepository
from lead_manager.repositories.lead_repo import LeadRepository
from lead_manager.repositories.outreach_repo import OutreachSequenceRepository
from lead_manager.repositories.touchpoint_repo import TouchpointRepository
from lead_manager.schemas.campaign import (
    AssignDistrictsResponse,
    CampaignCreate,
    CampaignResponse,
    CampaignWithLeadsCreate,
    CampaignWithLeadsResponse,
)

logger = logging.getLogger(__name__)


class CampaignService:
    """Service for campaign operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.campaign_repo = CampaignRepository(session)
        self.sequence_repo = OutreachSequenceRepository(session)
        self.lead_repo = LeadRepository(session)
        self.district_repo = DistrictRepository(session)
        self.contact_repo = DistrictContactRepository(session)
        self.touchpoint_repo = TouchpointRepository(session)

    async def get_model(self, campaign_id: uuid.UUID) -> Campaign:
        campaign = await self.campaign_repo.get(campaign_id)
        if not campaign:
            raise_not_found("Campaign", str(campaign_id))
        return campaign

    async def create(self, data: CampaignCreate) -> Campaign:
        """Create a campaign; its outreach sequence must belong to the same tenant."""
        if data.outreach_sequence_id:
            if not await self.sequence_repo.get_for_company(data.outreach_sequence_id, data.company):
                raise_bad_request(f"Outreach sequence {data.outreach_sequence_id} not found for {data.company}")

        campaign = await self.campaign_repo.create(data.model_dump(exclude={"lead_ids"}))
        logger.info(
            f"Created campaign {campaign.name}",
            extra={"tenant": campaign.company, "campaign_id": campaign.id},
        )
        return campaign

    async def create_with_leads(self, data: CampaignWithLeadsCreate) -> CampaignWithLeadsResponse:
        """
        Create a campaign and move the given leads of its tenant into it.

        Ids of missing leads or of another tenant's leads are skipped, so
        leadsUpdated can be lower than totalLeads.
        """
        if not data.lead_ids:
            raise_bad_request("Missing required fields")

        campaign = await self.create(data)
        leads = [
            lead for lead in await self.lead_repo.get_many(data.lead_ids)
            if lead.tenant == campaign.company
        ]
        for lead in leads:
            lead.status = next_status(lead, SimpleNamespace(campaign_id=campaign.id, status=lead.status))
            lead.campaign_id = campaign.id
        await self.lead_repo.save_all(leads)

        steps = await self.steps_for(campaign)
        touchpoints = []
        for lead in leads:
            values = {
                "first_name": lead.first_name,
                "last_name": lead.last_name,
                "city": lead.city,
                "company": lead.company,
            }
            touchpoints += self.schedule(campaign, steps, {"lead_id": lead.id}, lead.email, lead.phone, values)
        created = await self.touchpoint_repo.bulk_create(touchpoints)

        logger.info(
            f"Moved {len(leads)} of {len(data.lead_ids)} leads into {campaign.name}, "
            f"{created} touchpoints scheduled",
            extra={"tenant": campaign.company, "campaign_id": campaign.id},
        )
        return CampaignWithLeadsResponse(
            campaign=CampaignResponse.model_validate(campaign),
            leads_updated=len(leads),
            total_leads=len(data.lead_ids),
            touchpoints_created=created,
        )

    async def assign_districts(self, campaign: Campaign, district_ids: List[uuid.UUID]) -> AssignDistrictsResponse:
        """
        Move districts into a campaign and schedule its sequence for their contacts.

        Every id must name a district of the campaign's tenant, otherwise
        nothing is changed.
        """
        if not district_ids:
            raise_bad_request("Campaign ID and an array of district IDs are required")

        district_ids = list(dict.fromkeys(district_ids))
        districts = {
            district.id: district for district in await self.district_repo.get_many(district_ids)
            if district.company == campaign.company
        }
        missing = [str(id_) for id_ in district_ids if id_ not in districts]
        if missing:
            raise_bad_request(f"Districts not found for {campaign.company}: {', '.join(missing)}")

        for district in districts.values():
            district.status = next_status(district, SimpleNamespace(campaign_id=campaign.id, status=district.status))
            district.campaign_id = campaign.id
        await self.district_repo.save_all(districts.values())

        steps = await self.steps_for(campaign)
        contacts = await self.contact_repo.list_with_district(district_ids=district_ids)
        touchpoints = []
        for contact, district in contacts:
            values = {
                "first_name": contact.first_name,
                "last_name": contact.last_name,
                "city": "",
                "company": district.district_name,
            }
            touchpoints += self.schedule(
                campaign, steps, {"district_contact_id": contact.id}, contact.email, contact.phone, values
            )
        created = await self.touchpoint_repo.bulk_create(touchpoints)

        logger.info(
            f"Assigned {len(districts)} districts ({len(contacts)} contacts) to {campaign.name}, "
            f"{created} touchpoints scheduled",
            extra={"tenant": campaign.company, "campaign_id": campaign.id},
        )
        return AssignDistrictsResponse(
            districts_count=len(districts),
            contacts_count=len(contacts),
            touchpoints_created=created,
        )

    async def steps_for(self, campaign: Campaign) -> List[OutreachStep]:
        if not campaign.outreach_sequence_id:
            return []
        return await self.sequence_repo.get_steps(campaign.outreach_sequence_id)

    @staticmethod
    def schedule(
        campaign: Campaign,
        steps: List[OutreachStep],
        parent: Dict[str, uuid.UUID],
        email: Optional[str],
        phone: Optional[str],
        values: Dict[str, Optional[str]]
    ) -> List[dict]:
        """Touchpoint rows for one person; steps they cannot be reached by are left out."""
        start = campaign.start_date or campaign.created_at
        return [
            {**fields, **parent}
            for fields in schedule_steps(start, steps, values)
            if can_reach(fields["type"], email, phone)
        ]
