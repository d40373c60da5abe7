"""
Sync service - pushes leads to their Instantly campaigns and pulls sent emails back as touchpoints.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.core.exceptions import ExternalServiceError
from lead_manager.core.vocabulary import TouchpointOutcome, TouchpointType
from lead_manager.models.lead import Lead
from lead_manager.repositories.campaign_repo import CampaignRepository
from lead_manager.repositories.lead_repo import LeadRepository
from lead_manager.repositories.touchpoint_repo import TouchpointRepository
from lead_manager.schemas.common import to_naive_utc
from lead_manager.schemas.sync import SyncResults
from lead_manager.services.integrations.base import OutreachProvider

logger = logging.getLogger(__name__)

# Instantly email status -> touchpoint outcome; other statuses leave no outcome
EMAIL_OUTCOMES = {
    "replied": TouchpointOutcome.REPLIED.value,
    "bounced": TouchpointOutcome.BOUNCED.value,
    "unsubscribed": TouchpointOutcome.OPTED_OUT.value,
}


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def to_instantly_lead(lead: Lead) -> Dict[str, Any]:
    """Lead fields Instantly accepts when adding to a campaign."""
    data = {
        "email": lead.email,
        "first_name": lead.first_name,
        "last_name": lead.last_name,
        "company": lead.company,
        "phone": lead.phone,
        "website": lead.website_url,
    }
    return {key: value for key, value in data.items() if value}


class SyncService:
    """Service for Instantly sync operations."""

    def __init__(self, session: AsyncSession, provider: OutreachProvider):
        self.session = session
        self.provider = provider
        self.lead_repo = LeadRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.touchpoint_repo = TouchpointRepository(session)

    async def sync_leads(self, lead_ids: List[uuid.UUID], created_by: Optional[uuid.UUID] = None) -> SyncResults:
        """
        Sync the given leads, campaign by campaign.

        A failing campaign is reported in `errors` and the remaining
        campaigns are still synced.
        """
        results = SyncResults()
        leads = await self.lead_repo.get_many(lead_ids)

        found = {lead.id for lead in leads}
        for lead_id in lead_ids:
            if lead_id not in found:
                results.errors.append(f"Lead {lead_id} not found")

        by_campaign: Dict[uuid.UUID, List[Lead]] = {}
        for lead in leads:
            if not lead.email:
                results.errors.append(f"{lead.first_name} {lead.last_name}: lead has no email address")
            elif not lead.campaign_id:
                results.errors.append(f"{lead.email}: lead is not assigned to a campaign")
            else:
                by_campaign.setdefault(lead.campaign_id, []).append(lead)

        for campaign_id, campaign_leads in by_campaign.items():
            await self._sync_campaign(campaign_id, campaign_leads, results, created_by)

        logger.info(
            f"Instantly sync: {results.synced_count} leads pushed, {results.total_emails} emails recorded, "
            f"{len(results.errors)} errors"
        )
        return results

    async def _sync_campaign(
        self,
        campaign_id: uuid.UUID,
        leads: List[Lead],
        results: SyncResults,
        created_by: Optional[uuid.UUID]
    ) -> None:
        campaign = await self.campaign_repo.get(campaign_id)
        if not campaign or not campaign.instantly_campaign_id:
            name = campaign.name if campaign else str(campaign_id)
            results.errors.append(f"Campaign '{name}' is not linked to an Instantly campaign")
            return

        try:
            added = await self.provider.add_leads_to_campaign(
                campaign.instantly_campaign_id, [to_instantly_lead(lead) for lead in leads]
            )
            emails = await self.provider.get_emails(campaign_id=campaign.instantly_campaign_id)
        except ExternalServiceError as e:
            logger.error(
                f"Instantly sync failed for campaign {campaign.name}: {e.message}",
                extra={"tenant": campaign.company, "campaign_id": campaign.id},
            )
            results.errors.append(f"Campaign '{campaign.name}': {e.message}")
            return

        results.synced_count += int(added.get("added", 0) or 0)

        by_email = {lead.email.lower(): lead for lead in leads}
        for email in emails:
            lead = by_email.get((email.get("email") or "").lower())
            if not lead:
                continue
            results.total_emails += 1
            await self._record_email(lead, email, created_by)

    async def _record_email(self, lead: Lead, email: Dict[str, Any], created_by: Optional[uuid.UUID]) -> None:
        """Store a sent email as a completed touchpoint, once per Instantly email id."""
        external_id = email.get("id")
        if external_id and await self.touchpoint_repo.get_by_external_id(external_id):
            return

        sent_at = _parse_timestamp(email.get("sent_at")) or datetime.utcnow()
        await self.touchpoint_repo.create({
            "lead_id": lead.id,
            "type": TouchpointType.EMAIL.value,
            "subject": email.get("subject"),
            "content": email.get("body"),
            "scheduled_at": sent_at,
            "completed_at": sent_at,
            "outcome": EMAIL_OUTCOMES.get(email.get("status")),
            "external_id": external_id,
            "created_by": created_by,
        })

        if not lead.last_contacted_at or sent_at > lead.last_contacted_at:
            await self.lead_repo.touch(lead.id, sent_at)
            lead.last_contacted_at = sent_at
