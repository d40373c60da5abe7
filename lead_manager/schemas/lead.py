"""
Lead schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, field_validator

from lead_manager.core.vocabulary import LeadStatus


class CSVLead(BaseModel):
    """One row of a lead CSV upload, before validation."""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""
    source: str = ""
    industry: str = "Real Estate"
    website_quality: str = "0"
    company: str = ""
    linkedin_url: str = ""
    website_url: str = ""
    online_profile: str = ""
    email_sent: str = ""
    call_made: str = ""
    response: str = ""
    next_step: str = ""


class InvalidLeadRow(BaseModel):
    """A CSV row that failed validation, with every reason found."""
    lead: CSVLead
    errors: List[str]
    row_index: int  # 1-based line number in the file, header is line 1


class LeadUpdate(BaseModel):
    """Update an existing lead (the client sends the whole edited record)."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    online_profile: Optional[str] = None
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    campaign_id: Optional[uuid.UUID] = None
    notes: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return (value.strip().lower() or None) if value else None

    @field_validator("campaign_id", mode="before")
    @classmethod
    def blank_campaign_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "first_name": "Jane",
                "last_name": "Doe",
                "email": "jane@realty.com",
                "status": "engaged",
                "campaign_id": None
            }
        }


class LeadResponse(BaseModel):
    """Lead response with derived touchpoint counts."""
    id: uuid.UUID
    tenant: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    online_profile: Optional[str] = None
    source: Optional[str] = None
    status: str
    campaign_id: Optional[uuid.UUID] = None
    notes: Optional[str] = None
    last_contacted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    touchpoints_count: int = 0
    scheduled_touchpoints_count: int = 0

    class Config:
        from_attributes = True


class LeadListResponse(BaseModel):
    leads: List[LeadResponse]
    total: int


class ImportedRowError(BaseModel):
    row_index: int
    email: Optional[str] = None
    errors: List[str]


class LeadImportResponse(BaseModel):
    """CSV import result."""
    total_rows: int
    imported: int
    duplicates: int
    invalid: List[ImportedRowError]
