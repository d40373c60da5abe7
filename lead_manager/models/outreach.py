"""
Outreach sequence models - reusable step plans a campaign can follow.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class OutreachSequence(SQLModel, table=True):
    """Named, per-tenant list of outreach steps."""
    __tablename__ = "outreach_sequences"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    company: str = Field(index=True)
    description: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class OutreachStep(SQLModel, table=True):
    """
    One step of a sequence.

    Scheduled `day_offset` business days after the campaign start, or
    `days_after_previous` business days after the step before it when set.
    """
    __tablename__ = "outreach_steps"
    __table_args__ = (UniqueConstraint("sequence_id", "step_order", name="uq_outreach_steps_order"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    sequence_id: uuid.UUID = Field(foreign_key="outreach_sequences.id", index=True)
    step_order: int  # 1-based

    type: str  # email, call, linkedin_message
    name: Optional[str] = None  # touchpoint subject, may hold {{first_name}}-style placeholders
    content_link: Optional[str] = None
    day_offset: int = Field(default=0)
    days_after_previous: Optional[int] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
