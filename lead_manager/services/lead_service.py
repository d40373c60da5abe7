"""
Lead service - tenant lead listing, updates with status transitions, CSV import/export.
"""
import logging
import uuid
from types import SimpleNamespace
from typing import List, Optional, Tuple, Union

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.core.exceptions import raise_bad_request, raise_not_found
from lead_manager.core.status import next_status
from lead_manager.models.lead import Lead
from lead_manager.repositories.campaign_repo import CampaignRepository
from lead_manager.repositories.lead_repo import LeadRepository
from lead_manager.repositories.touchpoint_repo import TouchpointRepository
from lead_manager.schemas.lead import (
    ImportedRowError, LeadImportResponse, LeadResponse, LeadUpdate
)
from lead_manager.services import csv_service

logger = logging.getLogger(__name__)


class LeadService:
    """Service for lead operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.touchpoint_repo = TouchpointRepository(session)

    async def with_counts(self, leads: List[Lead]) -> List[LeadResponse]:
        """Attach touchpoint counts to leads (two queries for the whole batch)."""
        counts = await self.touchpoint_repo.counts_for("lead_id", [lead.id for lead in leads])
        responses = []
        for lead in leads:
            completed, scheduled = counts[lead.id]
            response = LeadResponse.model_validate(lead)
            response.touchpoints_count = completed
            response.scheduled_touchpoints_count = scheduled
            responses.append(response)
        return responses

    async def list(self, tenant: str) -> List[LeadResponse]:
        """Leads of a tenant, newest first, with counts."""
        leads = await self.lead_repo.list_for_tenant(tenant)
        return await self.with_counts(leads)

    async def get(self, lead_id: uuid.UUID) -> LeadResponse:
        """Get a lead with counts."""
        lead = await self.lead_repo.get(lead_id)
        if not lead:
            raise_not_found("Lead", str(lead_id))
        return (await self.with_counts([lead]))[0]

    async def get_model(self, lead_id: uuid.UUID) -> Lead:
        lead = await self.lead_repo.get(lead_id)
        if not lead:
            raise_not_found("Lead", str(lead_id))
        return lead

    async def check_campaign(self, tenant: str, campaign_id: uuid.UUID) -> None:
        if not await self.campaign_repo.get_for_company(campaign_id, tenant):
            raise_bad_request(f"Campaign {campaign_id} not found for {tenant}")

    async def update(self, lead_id: uuid.UUID, lead_data: LeadUpdate) -> LeadResponse:
        """Update a lead, applying the campaign assignment status rule."""
        lead = await self.get_model(lead_id)
        update_data = lead_data.model_dump(exclude_unset=True)

        email = update_data.get("email")
        if email and email != lead.email:
            existing = await self.lead_repo.get_by_email(lead.tenant, email)
            if existing and existing.id != lead.id:
                raise_bad_request(f"A lead with email {email} already exists")
        if update_data.get("campaign_id"):
            await self.check_campaign(lead.tenant, update_data["campaign_id"])

        if "campaign_id" in update_data or "status" in update_data:
            edited = SimpleNamespace(
                campaign_id=update_data.get("campaign_id", lead.campaign_id),
                status=update_data.get("status") or lead.status,
            )
            status = next_status(lead, edited)
            if status != edited.status:
                logger.info(
                    f"Lead status {edited.status} -> {status} on campaign change",
                    extra={"tenant": lead.tenant, "lead_id": lead_id},
                )
            update_data["status"] = status

        lead = await self.lead_repo.update(lead_id, update_data)
        return (await self.with_counts([lead]))[0]

    async def import_csv(
        self,
        tenant: str,
        content: Union[str, bytes],
        campaign_id: Optional[uuid.UUID] = None
    ) -> LeadImportResponse:
        """
        Import leads from a CSV upload.

        Raises CSVParseError for an unparseable file; row problems are
        reported in the response instead.
        """
        if campaign_id:
            await self.check_campaign(tenant, campaign_id)

        rows = csv_service.parse_csv(content)
        valid, invalid = csv_service.validate_leads(rows)

        existing = await self.lead_repo.emails_for_tenant(tenant)
        unique = csv_service.deduplicate_leads(valid, existing)

        inserts = []
        for csv_lead in unique:
            data = csv_service.convert_to_lead_insert(csv_lead)
            data["tenant"] = tenant
            data["campaign_id"] = campaign_id
            if campaign_id:
                data["status"] = next_status(
                    SimpleNamespace(campaign_id=None),
                    SimpleNamespace(campaign_id=campaign_id, status="not_contacted"),
                )
            inserts.append(data)

        leads = await self.lead_repo.bulk_create(inserts) if inserts else []
        if leads:
            await self.lead_repo.add_campaign_statuses([
                csv_service.convert_to_lead_status_insert(csv_lead, lead.id, campaign_id)
                for csv_lead, lead in zip(unique, leads)
            ])

        logger.info(
            f"Imported {len(leads)} of {len(rows)} CSV rows for {tenant} "
            f"({len(invalid)} invalid, {len(valid) - len(unique)} duplicates)",
            extra={"tenant": tenant, "campaign_id": campaign_id},
        )

        return LeadImportResponse(
            total_rows=len(rows),
            imported=len(leads),
            duplicates=len(valid) - len(unique),
            invalid=[
                ImportedRowError(row_index=row.row_index, email=row.lead.email or None, errors=row.errors)
                for row in invalid
            ],
        )

    async def export(
        self,
        tenant: str,
        status: Optional[str] = None,
        campaign_id: Optional[uuid.UUID] = None
    ) -> Tuple[str, str]:
        """Export a tenant's leads; returns (file name, CSV text)."""
        leads = await self.lead_repo.list_for_tenant(tenant, status=status, campaign_id=campaign_id)
        return csv_service.export_to_csv(leads, f"{tenant.lower()}-leads")
