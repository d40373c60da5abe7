"""
Assignment service - which districts and leads a user works.
"""
import logging
import uuid

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.core.exceptions import raise_bad_request, raise_not_found
from lead_manager.models.user import User
from lead_manager.repositories.district_repo import DistrictRepository
from lead_manager.repositories.lead_repo import LeadRepository
from lead_manager.repositories.user_repo import UserRepository
from lead_manager.schemas.user import AssignmentCounts, AssignmentRequest, AssignmentResponse, UserLeadsResponse
from lead_manager.services.district_service import DistrictService
from lead_manager.services.lead_service import LeadService

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for user assignment operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.lead_repo = LeadRepository(session)
        self.district_repo = DistrictRepository(session)

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get(user_id)
        if not user:
            raise_not_found("User", str(user_id))
        return user

    async def list_for_user(self, user_id: uuid.UUID) -> UserLeadsResponse:
        """Leads, districts and district contacts assigned to a user."""
        await self.get_user(user_id)

        lead_ids = await self.user_repo.assigned_lead_ids(user_id)
        district_ids = await self.user_repo.assigned_district_ids(user_id)

        district_service = DistrictService(self.session)
        leads = await LeadService(self.session).with_counts(await self.lead_repo.get_many(lead_ids))
        districts = await district_service.with_counts(
            sorted(await self.district_repo.get_many(district_ids), key=lambda d: d.district_name),
            user_id,
        )
        contacts = await district_service.list_contacts(district_ids=district_ids) if district_ids else []

        return UserLeadsResponse(
            leads=leads,
            districts=districts,
            district_contacts=contacts,
            count=AssignmentCounts(
                leads=len(leads),
                districts=len(districts),
                district_contacts=len(contacts),
            ),
        )

    async def apply(self, user_id: uuid.UUID, request: AssignmentRequest) -> AssignmentResponse:
        """Assign (idempotent) or unassign districts and/or leads."""
        if not request.action or not (request.district_ids or request.lead_ids):
            raise_bad_request("Invalid request. Provide leadIds or districtIds and action.")

        await self.get_user(user_id)

        change = self.user_repo.assign if request.action == "assign" else self.user_repo.unassign
        districts = await change(user_id, "district_id", request.district_ids) if request.district_ids else 0
        leads = await change(user_id, "lead_id", request.lead_ids) if request.lead_ids else 0

        logger.info(f"User {user_id}: {request.action} {districts} districts, {leads} leads")
        return AssignmentResponse(action=request.action, districts=districts, leads=leads)
