"""
District and district contact repositories.
"""
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from sqlmodel import select, or_
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func, case

from lead_manager.core.pagination import paginate_query
from lead_manager.models.district import District, DistrictContact
from lead_manager.models.user import UserDistrictAssignment
from lead_manager.repositories.base import BaseRepository


class DistrictRepository(BaseRepository[District]):
    """Repository for District operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(District, session)

    async def search(
        self,
        status: Optional[str] = None,
        county: Optional[str] = None,
        search: Optional[str] = None,
        campaign_id: Optional[uuid.UUID] = None,
        assigned_to: Optional[uuid.UUID] = None,
        page: int = 1,
        page_size: int = 50
    ) -> Tuple[List[District], int]:
        """Filtered page of districts ordered by name, plus the total match count."""
        query = select(District)

        if status:
            query = query.where(District.status == status)
        if county:
            query = query.where(District.county == county)
        if campaign_id:
            query = query.where(District.campaign_id == campaign_id)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    District.district_name.ilike(search_term),
                    District.county.ilike(search_term)
                )
            )
        if assigned_to:
            assigned = select(UserDistrictAssignment.district_id).where(
                UserDistrictAssignment.user_id == assigned_to
            )
            query = query.where(District.id.in_(assigned))

        query = query.order_by(District.district_name)
        return await paginate_query(self.session, query, page, page_size)

    async def get_by_name_and_county(self, name: str, county: str) -> Optional[District]:
        query = select(District).where(District.district_name == name, District.county == county)
        result = await self.session.exec(query)
        return result.first()

    async def contact_counts(self, district_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Tuple[int, int]]:
        """(contacts, contacts with a non-blank email) per district, one grouped query."""
        ids = list(district_ids)
        if not ids:
            return {}

        has_email = case(
            (func.coalesce(func.trim(DistrictContact.email), "") != "", 1),
            else_=0,
        )
        query = (
            select(DistrictContact.district_id, func.count(), func.sum(has_email))
            .where(DistrictContact.district_id.in_(ids))
            .group_by(DistrictContact.district_id)
        )
        result = await self.session.exec(query)
        return {district_id: (total, int(valid or 0)) for district_id, total, valid in result.all()}

    async def assigned_users(self, district_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[uuid.UUID]]:
        """User ids assigned to each district."""
        ids = list(district_ids)
        if not ids:
            return {}

        query = select(UserDistrictAssignment).where(UserDistrictAssignment.district_id.in_(ids))
        result = await self.session.exec(query)
        assigned: Dict[uuid.UUID, List[uuid.UUID]] = {}
        for assignment in result.all():
            assigned.setdefault(assignment.district_id, []).append(assignment.user_id)
        return assigned


class DistrictContactRepository(BaseRepository[DistrictContact]):
    """Repository for DistrictContact operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(DistrictContact, session)

    async def list_with_district(
        self,
        district_id: Optional[uuid.UUID] = None,
        district_ids: Optional[List[uuid.UUID]] = None,
        company: Optional[str] = None
    ) -> List[Tuple[DistrictContact, District]]:
        """Contacts joined to their district, newest first."""
        query = select(DistrictContact, District).join(
            District, DistrictContact.district_id == District.id
        )
        if district_id:
            query = query.where(DistrictContact.district_id == district_id)
        if district_ids is not None:
            query = query.where(DistrictContact.district_id.in_(district_ids))
        if company:
            query = query.where(District.company == company)
        query = query.order_by(DistrictContact.created_at.desc())

        result = await self.session.exec(query)
        return list(result.all())

    async def bulk_create(self, contacts_data: List[dict]) -> List[DistrictContact]:
        contacts = [DistrictContact(**data) for data in contacts_data]
        self.session.add_all(contacts)
        await self.session.commit()
        return contacts
