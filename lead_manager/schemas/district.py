"""
District and district contact schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from lead_manager.core.vocabulary import LeadStatus


class DistrictCreate(BaseModel):
    """Create a district; name and county are required."""
    name: Optional[str] = None
    county: Optional[str] = None
    state: str = "California"
    staff_directory_link: Optional[str] = None
    website: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None
    budget: Optional[float] = None
    notes: Optional[str] = None
    campaign_id: Optional[uuid.UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Burbank Unified",
                "county": "Los Angeles",
                "staff_directory_link": "https://www.burbankusd.org/staff"
            }
        }


class DistrictUpdate(BaseModel):
    """Update a district's outreach fields."""
    status: Optional[LeadStatus] = None
    campaign_id: Optional[uuid.UUID] = None
    staff_directory_link: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        use_enum_values = True


class DistrictResponse(BaseModel):
    """District row with contact counts and assignment flags."""
    id: uuid.UUID
    district_name: str
    county: str
    state: str
    company: str
    status: str
    campaign_id: Optional[uuid.UUID] = None
    staff_directory_link: Optional[str] = None
    website: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None
    budget: Optional[float] = None
    notes: Optional[str] = None
    last_contacted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    contacts_count: int = 0
    valid_contacts_count: int = 0
    assigned_to_me: bool = False
    assigned_user_ids: List[uuid.UUID] = Field(default_factory=list)

    class Config:
        from_attributes = True


class DistrictListResponse(BaseModel):
    districts: List[DistrictResponse]
    total_count: int = Field(alias="totalCount")
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")

    class Config:
        populate_by_name = True


class DistrictSummary(BaseModel):
    """Parent district fields embedded in a contact row."""
    id: uuid.UUID
    district_name: str
    county: str
    status: str
    campaign_id: Optional[uuid.UUID] = None
    last_contacted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DistrictContactUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("first_name", "last_name", "status")
    @classmethod
    def required_not_blank(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class DistrictContactResponse(BaseModel):
    """District contact with derived touchpoint counts and its district."""
    id: uuid.UUID
    district_id: uuid.UUID
    first_name: str
    last_name: str
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    state: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    touchpoints_count: int = 0
    scheduled_touchpoints_count: int = 0
    district_lead: Optional[DistrictSummary] = None

    class Config:
        from_attributes = True


class DistrictContactListResponse(BaseModel):
    contacts: List[DistrictContactResponse]


# CSV import

class ProcessedContact(BaseModel):
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str = "Valid"


class ProcessedDistrict(BaseModel):
    """District rows of an upload grouped by name and county."""
    name: str
    county: str
    staff_directory_link: Optional[str] = None
    contacts: List[ProcessedContact] = Field(default_factory=list)


class InvalidDistrict(BaseModel):
    name: str
    county: str
    errors: List[str]


class DistrictImportResponse(BaseModel):
    districts_created: int
    contacts_created: int
    invalid: List[InvalidDistrict]
    warnings: List[str]
