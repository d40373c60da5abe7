"""
Touchpoint model - one logged or scheduled outreach interaction.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint


class Touchpoint(SQLModel, table=True):
    """
    Touchpoint entity - belongs to exactly one lead or one district contact.

    Completed (counted) when completed_at and outcome are both set;
    scheduled when scheduled_at is set and completed_at is not.
    """
    __tablename__ = "touchpoints"
    __table_args__ = (
        CheckConstraint(
            "(lead_id IS NULL) != (district_contact_id IS NULL)",
            name="ck_touchpoints_single_parent",
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: Optional[uuid.UUID] = Field(default=None, foreign_key="leads.id", index=True)
    district_contact_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="district_contacts.id", index=True
    )

    type: str = Field(index=True)  # email, call, meeting, linkedin_message, note
    subject: Optional[str] = None
    content: Optional[str] = None

    scheduled_at: Optional[datetime] = Field(default=None, index=True)
    completed_at: Optional[datetime] = None
    outcome: Optional[str] = None  # replied, no_answer, voicemail, opted_out, bounced, booked, ignored

    # Id of the message in the outreach tool; set for synced emails
    external_id: Optional[str] = Field(default=None, index=True)

    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
