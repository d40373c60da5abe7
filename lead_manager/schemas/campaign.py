"""
Campaign schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from lead_manager.core.vocabulary import Tenant
from lead_manager.schemas.common import to_naive_utc


class CampaignCreate(BaseModel):
    """Create a new campaign."""
    name: str
    company: Tenant
    description: Optional[str] = None
    instantly_campaign_id: Optional[str] = Field(default=None, alias="instantlyCampaignId")
    outreach_sequence_id: Optional[uuid.UUID] = Field(default=None, alias="outreachSequenceId")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")

    @field_validator("instantly_campaign_id", "outreach_sequence_id", "start_date", "end_date", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    class Config:
        use_enum_values = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "SFV Agents Q3",
                "company": "CraftyCode",
                "instantly_campaign_id": "4f1c9a",
                "start_date": "2026-07-06T00:00:00Z"
            }
        }


class CampaignWithLeadsCreate(CampaignCreate):
    """Create a campaign and move the given leads into it."""
    lead_ids: List[uuid.UUID] = Field(default_factory=list, alias="leadIds")


class CampaignResponse(BaseModel):
    """Campaign response."""
    id: uuid.UUID
    name: str
    company: str
    description: Optional[str] = None
    instantly_campaign_id: Optional[str] = None
    outreach_sequence_id: Optional[uuid.UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CampaignListResponse(BaseModel):
    campaigns: List[CampaignResponse]


class CampaignWithLeadsResponse(BaseModel):
    campaign: CampaignResponse
    leads_updated: int = Field(alias="leadsUpdated")
    total_leads: int = Field(alias="totalLeads")
    touchpoints_created: int = Field(default=0, alias="touchpointsCreated")

    class Config:
        populate_by_name = True


class AssignDistrictsRequest(BaseModel):
    district_ids: List[uuid.UUID] = Field(default_factory=list, alias="districtIds")

    class Config:
        populate_by_name = True


class AssignDistrictsResponse(BaseModel):
    """Outcome of moving districts (and so their contacts) into a campaign."""
    success: bool = True
    message: str = "Districts assigned to campaign successfully"
    districts_count: int
    contacts_count: int
    touchpoints_created: int
