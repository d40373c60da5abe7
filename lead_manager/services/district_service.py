"""
District service - districts, their contacts and district CSV import.
"""
import logging
import uuid
from types import SimpleNamespace
from typing import List, Optional, Tuple, Union

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.config import settings
from lead_manager.core.exceptions import raise_bad_request, raise_not_found
from lead_manager.core.pagination import create_paginated_response
from lead_manager.core.status import next_status
from lead_manager.core.vocabulary import Tenant
from lead_manager.models.district import District, DistrictContact
from lead_manager.repositories.campaign_repo import CampaignRepository
from lead_manager.repositories.district_repo import DistrictContactRepository, DistrictRepository
from lead_manager.repositories.touchpoint_repo import TouchpointRepository
from lead_manager.schemas.district import (
    DistrictContactResponse,
    DistrictContactUpdate,
    DistrictCreate,
    DistrictImportResponse,
    DistrictListResponse,
    DistrictResponse,
    DistrictSummary,
    DistrictUpdate,
)
from lead_manager.services import csv_service

logger = logging.getLogger(__name__)


class DistrictService:
    """Service for district operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.district_repo = DistrictRepository(session)
        self.contact_repo = DistrictContactRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.touchpoint_repo = TouchpointRepository(session)

    async def with_counts(
        self,
        districts: List[District],
        current_user_id: Optional[uuid.UUID] = None
    ) -> List[DistrictResponse]:
        """Attach contact counts and assignment flags to districts."""
        ids = [district.id for district in districts]
        contact_counts = await self.district_repo.contact_counts(ids)
        assigned = await self.district_repo.assigned_users(ids)

        responses = []
        for district in districts:
            response = DistrictResponse.model_validate(district)
            response.contacts_count, response.valid_contacts_count = contact_counts.get(district.id, (0, 0))
            response.assigned_user_ids = assigned.get(district.id, [])
            response.assigned_to_me = current_user_id in response.assigned_user_ids
            responses.append(response)
        return responses

    async def list(
        self,
        current_user_id: uuid.UUID,
        status: Optional[str] = None,
        county: Optional[str] = None,
        search: Optional[str] = None,
        campaign_id: Optional[uuid.UUID] = None,
        assigned_only: bool = False,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> DistrictListResponse:
        """Filtered, paginated districts ordered by name."""
        page_size = page_size or settings.DISTRICT_PAGE_SIZE
        districts, total = await self.district_repo.search(
            status=status,
            county=county,
            search=search,
            campaign_id=campaign_id,
            assigned_to=current_user_id if assigned_only else None,
            page=page,
            page_size=page_size,
        )
        return DistrictListResponse(
            districts=await self.with_counts(districts, current_user_id),
            **create_paginated_response(total, page, page_size),
        )

    async def check_campaign(self, company: str, campaign_id: uuid.UUID) -> None:
        if not await self.campaign_repo.get_for_company(campaign_id, company):
            raise_bad_request(f"Campaign {campaign_id} not found for {company}")

    async def create(self, data: DistrictCreate) -> DistrictResponse:
        """Create a district; name and county are required."""
        if not (data.name and data.name.strip()) or not (data.county and data.county.strip()):
            raise_bad_request("Name and county are required")

        district_data = data.model_dump(exclude={"name"})
        district_data["district_name"] = data.name.strip()
        district_data["county"] = data.county.strip()
        if data.campaign_id:
            await self.check_campaign(Tenant.AVALERN.value, data.campaign_id)
            district_data["status"] = next_status(
                SimpleNamespace(campaign_id=None),
                SimpleNamespace(campaign_id=data.campaign_id, status="not_contacted"),
            )

        district = await self.district_repo.create(district_data)
        logger.info(f"District '{district.district_name}' ({district.county}) created")
        return (await self.with_counts([district]))[0]

    async def update(
        self,
        district_id: uuid.UUID,
        data: DistrictUpdate,
        current_user_id: Optional[uuid.UUID] = None
    ) -> DistrictResponse:
        """Update a district, applying the campaign assignment status rule."""
        district = await self.district_repo.get(district_id)
        if not district:
            raise_not_found("District", str(district_id))

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("campaign_id"):
            await self.check_campaign(district.company, update_data["campaign_id"])
        if "campaign_id" in update_data or "status" in update_data:
            edited = SimpleNamespace(
                campaign_id=update_data.get("campaign_id", district.campaign_id),
                status=update_data.get("status") or district.status,
            )
            update_data["status"] = next_status(district, edited)

        district = await self.district_repo.update(district_id, update_data)
        return (await self.with_counts([district], current_user_id))[0]

    async def contacts_with_counts(
        self,
        rows: List[Tuple[DistrictContact, District]]
    ) -> List[DistrictContactResponse]:
        """Attach touchpoint counts and the parent district to contacts."""
        counts = await self.touchpoint_repo.counts_for("district_contact_id", [contact.id for contact, _ in rows])
        responses = []
        for contact, district in rows:
            response = DistrictContactResponse.model_validate(contact)
            response.touchpoints_count, response.scheduled_touchpoints_count = counts[contact.id]
            response.district_lead = DistrictSummary.model_validate(district)
            responses.append(response)
        return responses

    async def list_contacts(
        self,
        district_id: Optional[uuid.UUID] = None,
        district_ids: Optional[List[uuid.UUID]] = None
    ) -> List[DistrictContactResponse]:
        """Avalern district contacts, newest first, with counts."""
        rows = await self.contact_repo.list_with_district(
            district_id=district_id,
            district_ids=district_ids,
            company=Tenant.AVALERN.value,
        )
        return await self.contacts_with_counts(rows)

    async def update_contact(self, contact_id: uuid.UUID, data: DistrictContactUpdate) -> DistrictContactResponse:
        contact = await self.contact_repo.update(contact_id, data.model_dump(exclude_unset=True))
        if not contact:
            raise_not_found("District contact", str(contact_id))
        district = await self.district_repo.get(contact.district_id)
        return (await self.contacts_with_counts([(contact, district)]))[0]

    async def import_csv(self, content: Union[str, bytes]) -> DistrictImportResponse:
        """
        Import districts and contacts from a CSV upload.

        Districts already stored (same name and county) receive the new
        contacts instead of being duplicated.
        """
        rows = csv_service.parse_district_csv(content)
        valid, invalid, warnings = csv_service.validate_district_data(
            csv_service.process_district_data(rows)
        )

        districts_created = 0
        contacts = []
        for processed in valid:
            district = await self.district_repo.get_by_name_and_county(processed.name, processed.county)
            if not district:
                district = await self.district_repo.create({
                    "district_name": processed.name,
                    "county": processed.county,
                    "staff_directory_link": processed.staff_directory_link,
                })
                districts_created += 1
            contacts.extend(
                {**contact.model_dump(), "district_id": district.id, "state": district.state}
                for contact in processed.contacts
            )

        if contacts:
            await self.contact_repo.bulk_create(contacts)

        logger.info(
            f"District import: {districts_created} districts, {len(contacts)} contacts, "
            f"{len(invalid)} invalid districts"
        )
        return DistrictImportResponse(
            districts_created=districts_created,
            contacts_created=len(contacts),
            invalid=invalid,
            warnings=warnings,
        )
