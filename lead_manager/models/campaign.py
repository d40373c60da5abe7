"""
Campaign model - outreach campaign scoped to a tenant.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Campaign(SQLModel, table=True):
    """
    Campaign entity - groups leads under one outreach effort.
    Optionally linked to an Instantly campaign for email sync and to an
    outreach sequence that schedules touchpoints on assignment.
    """
    __tablename__ = "campaigns"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    company: str = Field(index=True)  # owning tenant
    description: Optional[str] = None

    instantly_campaign_id: Optional[str] = Field(default=None, index=True)

    # Sequence scheduled for everything assigned to the campaign, from start_date
    outreach_sequence_id: Optional[uuid.UUID] = Field(default=None, foreign_key="outreach_sequences.id")
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
