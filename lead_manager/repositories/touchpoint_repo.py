"""
Touchpoint repository with batched count aggregation.
"""
import uuid
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlmodel import select, or_
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from lead_manager.models.district import District, DistrictContact
from lead_manager.models.lead import Lead
from lead_manager.models.touchpoint import Touchpoint
from lead_manager.repositories.base import BaseRepository

# (completed with outcome, scheduled and not completed)
TouchpointCounts = Tuple[int, int]


class TouchpointRepository(BaseRepository[Touchpoint]):
    """Repository for Touchpoint operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Touchpoint, session)

    async def list_for_parent(
        self,
        lead_id: Optional[uuid.UUID] = None,
        district_contact_id: Optional[uuid.UUID] = None
    ) -> List[Touchpoint]:
        """Touchpoints of one lead or district contact, newest first."""
        query = select(Touchpoint)
        if lead_id:
            query = query.where(Touchpoint.lead_id == lead_id)
        else:
            query = query.where(Touchpoint.district_contact_id == district_contact_id)
        query = query.order_by(Touchpoint.created_at.desc())

        result = await self.session.exec(query)
        return list(result.all())

    async def counts_for(self, parent: str, ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, TouchpointCounts]:
        """
        Completed and scheduled counts for many parents at once.

        `parent` is "lead_id" or "district_contact_id". Two grouped queries
        regardless of how many ids are passed; ids without touchpoints map
        to (0, 0).
        """
        ids = list(ids)
        counts: Dict[uuid.UUID, TouchpointCounts] = {id_: (0, 0) for id_ in ids}
        if not ids:
            return counts

        column = getattr(Touchpoint, parent)

        completed_query = (
            select(column, func.count())
            .where(
                column.in_(ids),
                Touchpoint.completed_at.is_not(None),
                Touchpoint.outcome.is_not(None),
            )
            .group_by(column)
        )
        scheduled_query = (
            select(column, func.count())
            .where(
                column.in_(ids),
                Touchpoint.scheduled_at.is_not(None),
                Touchpoint.completed_at.is_(None),
            )
            .group_by(column)
        )

        completed = dict((await self.session.exec(completed_query)).all())
        scheduled = dict((await self.session.exec(scheduled_query)).all())

        for id_ in ids:
            counts[id_] = (completed.get(id_, 0), scheduled.get(id_, 0))
        return counts

    async def get_by_external_id(self, external_id: str) -> Optional[Touchpoint]:
        return await self.get_by_field("external_id", external_id)

    async def list_by_creator(
        self,
        user_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[Touchpoint]:
        """Touchpoints a user created, optionally within [start, end], newest first."""
        query = select(Touchpoint).where(Touchpoint.created_by == user_id)
        if start:
            query = query.where(Touchpoint.created_at >= start)
        if end:
            query = query.where(Touchpoint.created_at <= end)
        query = query.order_by(Touchpoint.created_at.desc())

        result = await self.session.exec(query)
        return list(result.all())

    async def scheduled_per_day(
        self,
        start: datetime,
        end: datetime,
        company: Optional[str] = None,
        campaign_id: Optional[uuid.UUID] = None
    ) -> Dict[str, int]:
        """Scheduled, not completed touchpoints per day (YYYY-MM-DD) in [start, end]."""
        query = (
            select(Touchpoint.scheduled_at)
            .outerjoin(Lead, Touchpoint.lead_id == Lead.id)
            .outerjoin(DistrictContact, Touchpoint.district_contact_id == DistrictContact.id)
            .outerjoin(District, DistrictContact.district_id == District.id)
            .where(
                Touchpoint.scheduled_at >= start,
                Touchpoint.scheduled_at <= end,
                Touchpoint.completed_at.is_(None),
            )
        )
        if company:
            query = query.where(or_(Lead.tenant == company, District.company == company))
        if campaign_id:
            query = query.where(or_(Lead.campaign_id == campaign_id, District.campaign_id == campaign_id))

        result = await self.session.exec(query)
        return dict(Counter(scheduled_at.date().isoformat() for scheduled_at in result.all()))

    async def bulk_create(self, touchpoints_data: List[dict]) -> int:
        """Insert many touchpoints in one commit; returns how many."""
        if not touchpoints_data:
            return 0
        self.session.add_all([Touchpoint(**data) for data in touchpoints_data])
        await self.session.commit()
        return len(touchpoints_data)
