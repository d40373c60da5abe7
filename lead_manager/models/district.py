"""
School district models for the Avalern tenant.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class District(SQLModel, table=True):
    """
    District entity - a school district worked as a single account.
    Status and campaign live here; contacts inherit them.
    """
    __tablename__ = "district_leads"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    district_name: str = Field(index=True)
    county: str = Field(index=True)
    state: str = Field(default="California")
    company: str = Field(default="Avalern", index=True)

    status: str = Field(default="not_contacted", index=True)
    campaign_id: Optional[uuid.UUID] = Field(default=None, foreign_key="campaigns.id", index=True)

    # Profile
    staff_directory_link: Optional[str] = None
    website: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None
    budget: Optional[float] = None
    notes: Optional[str] = None

    last_contacted_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class DistrictContact(SQLModel, table=True):
    """Person at a district (superintendent, director, ...)."""
    __tablename__ = "district_contacts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    district_id: uuid.UUID = Field(foreign_key="district_leads.id", index=True)

    first_name: str
    last_name: str
    title: Optional[str] = None
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    state: Optional[str] = None

    status: str = Field(default="Valid")  # Valid, Not Found, Null
    notes: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
