"""
Lead model - individual sales prospect owned by a tenant.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class Lead(SQLModel, table=True):
    """
    Lead entity - a prospect tracked through outreach.
    Email is stored lower-cased and is unique within a tenant.
    """
    __tablename__ = "leads"
    __table_args__ = (UniqueConstraint("tenant", "email", name="uq_leads_tenant_email"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant: str = Field(default="CraftyCode", index=True)
    campaign_id: Optional[uuid.UUID] = Field(default=None, foreign_key="campaigns.id", index=True)

    # Basic info
    first_name: str
    last_name: str
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    company: Optional[str] = Field(default=None, index=True)

    # Location
    city: Optional[str] = Field(default=None, index=True)
    state: Optional[str] = None

    # Profiles
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    online_profile: Optional[str] = None

    # Qualification
    source: Optional[str] = Field(default=None, index=True)  # Zillow, LinkedIn, Realtor.com, Redfin, Trulia, Other
    status: str = Field(default="not_contacted", index=True)

    notes: Optional[str] = None
    last_contacted_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class LeadCampaignStatus(SQLModel, table=True):
    """Outreach state recorded for a lead when it was imported into a campaign."""
    __tablename__ = "lead_status"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="leads.id", index=True)
    campaign_id: Optional[uuid.UUID] = Field(default=None, foreign_key="campaigns.id", index=True)

    status: str = Field(default="Not Contacted")  # Not Contacted, Email Sent, Call Made, Responded
    email_sent: bool = Field(default=False)
    call_made: bool = Field(default=False)
    response: Optional[str] = None
    next_step: Optional[str] = None
    touch_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)
