"""
Outreach sequence repository.
"""
import uuid
from typing import List, Optional, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from lead_manager.models.outreach import OutreachSequence, OutreachStep
from lead_manager.repositories.base import BaseRepository


class OutreachSequenceRepository(BaseRepository[OutreachSequence]):
    """Repository for OutreachSequence and its steps."""

    def __init__(self, session: AsyncSession):
        super().__init__(OutreachSequence, session)

    async def list_for_company(self, company: str) -> List[Tuple[OutreachSequence, int]]:
        """(sequence, step count) for one tenant, newest first."""
        steps_count = (
            select(func.count(OutreachStep.id))
            .where(OutreachStep.sequence_id == OutreachSequence.id)
            .correlate(OutreachSequence)
            .scalar_subquery()
        )
        query = (
            select(OutreachSequence, steps_count)
            .where(OutreachSequence.company == company)
            .order_by(OutreachSequence.created_at.desc())
        )
        result = await self.session.exec(query)
        return [(sequence, count) for sequence, count in result.all()]

    async def get_for_company(self, sequence_id: uuid.UUID, company: str) -> Optional[OutreachSequence]:
        sequence = await self.get(sequence_id)
        if sequence and sequence.company == company:
            return sequence
        return None

    async def get_steps(self, sequence_id: uuid.UUID) -> List[OutreachStep]:
        """Steps of a sequence in step_order."""
        query = (
            select(OutreachStep)
            .where(OutreachStep.sequence_id == sequence_id)
            .order_by(OutreachStep.step_order)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def create_with_steps(self, sequence_data: dict, steps_data: List[dict]) -> OutreachSequence:
        """Insert a sequence and its steps in one commit."""
        sequence = OutreachSequence(**sequence_data)
        self.session.add(sequence)
        self.session.add_all([OutreachStep(sequence_id=sequence.id, **data) for data in steps_data])
        await self.session.commit()
        await self.session.refresh(sequence)
        return sequence
