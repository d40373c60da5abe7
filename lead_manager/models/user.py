"""
User model and per-user assignment tables.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, UniqueConstraint


class User(SQLModel, table=True):
    """
    User model - a sales rep or admin.
    Tenant access is limited to allowed_companies.
    """
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: Optional[str] = None
    role: str = Field(default="member")  # admin, member
    allowed_companies: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserDistrictAssignment(SQLModel, table=True):
    """District assigned to a user for outreach."""
    __tablename__ = "user_district_assignments"
    __table_args__ = (UniqueConstraint("user_id", "district_id", name="uq_user_district"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    district_id: uuid.UUID = Field(foreign_key="district_leads.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserLeadAssignment(SQLModel, table=True):
    """Lead assigned to a user for outreach."""
    __tablename__ = "user_lead_assignments"
    __table_args__ = (UniqueConstraint("user_id", "lead_id", name="uq_user_lead"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    lead_id: uuid.UUID = Field(foreign_key="leads.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
