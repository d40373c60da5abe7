"""
Outreach sequence service - per-tenant step plans for campaigns.
"""
import logging
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.core.exceptions import raise_not_found
from lead_manager.models.outreach import OutreachSequence
from lead_manager.repositories.outreach_repo import OutreachSequenceRepository
from lead_manager.schemas.outreach import (
    DEFAULT_STEP_GAP,
    OutreachSequenceCreate,
    OutreachSequenceResponse,
    OutreachSequenceSummary,
    OutreachStepCreate,
    OutreachStepResponse,
)

logger = logging.getLogger(__name__)


def step_rows(steps: List[OutreachStepCreate]) -> List[dict]:
    """Number the steps from 1 and fill in default offsets and gaps."""
    rows = []
    for index, step in enumerate(steps):
        days_after_previous = step.days_after_previous
        if days_after_previous is None and index > 0:
            days_after_previous = DEFAULT_STEP_GAP
        rows.append({
            "step_order": index + 1,
            "type": step.type,
            "name": step.name,
            "content_link": step.content_link,
            "day_offset": step.day_offset if step.day_offset is not None else index * 2,
            "days_after_previous": days_after_previous,
        })
    return rows


class OutreachService:
    """Service for outreach sequences."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.sequence_repo = OutreachSequenceRepository(session)

    async def list(self, company: str) -> List[OutreachSequenceSummary]:
        """Sequences of a tenant, newest first, with step counts."""
        summaries = []
        for sequence, steps_count in await self.sequence_repo.list_for_company(company):
            summary = OutreachSequenceSummary.model_validate(sequence)
            summary.steps_count = steps_count
            summaries.append(summary)
        return summaries

    async def get_model(self, sequence_id: uuid.UUID) -> OutreachSequence:
        sequence = await self.sequence_repo.get(sequence_id)
        if not sequence:
            raise_not_found("Outreach sequence", str(sequence_id))
        return sequence

    async def with_steps(self, sequence: OutreachSequence) -> OutreachSequenceResponse:
        steps = await self.sequence_repo.get_steps(sequence.id)
        response = OutreachSequenceResponse.model_validate(sequence)
        response.steps = [OutreachStepResponse.model_validate(step) for step in steps]
        response.steps_count = len(steps)
        return response

    async def create(self, tenant: str, data: OutreachSequenceCreate) -> OutreachSequenceResponse:
        """Create a sequence and its steps for `tenant`."""
        sequence = await self.sequence_repo.create_with_steps(
            {"name": data.name, "company": tenant, "description": data.description},
            step_rows(data.steps),
        )
        logger.info(
            f"Created outreach sequence {sequence.name} with {len(data.steps)} steps",
            extra={"tenant": tenant},
        )
        return await self.with_steps(sequence)
