"""
User assignment schemas.
"""
import uuid
from typing import Literal, Optional, List
from pydantic import BaseModel, Field

from lead_manager.schemas.district import DistrictResponse, DistrictContactResponse
from lead_manager.schemas.lead import LeadResponse


class AssignmentRequest(BaseModel):
    """Assign or unassign districts and/or leads to a user."""
    action: Optional[Literal["assign", "unassign"]] = None
    district_ids: Optional[List[uuid.UUID]] = Field(default=None, alias="districtIds")
    lead_ids: Optional[List[uuid.UUID]] = Field(default=None, alias="leadIds")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "action": "assign",
                "districtIds": ["3fa85f64-5717-4562-b3fc-2c963f66afa6"]
            }
        }


class AssignmentResponse(BaseModel):
    success: bool = True
    action: str
    districts: int = 0
    leads: int = 0


class AssignmentCounts(BaseModel):
    leads: int
    districts: int
    district_contacts: int = Field(alias="districtContacts")

    class Config:
        populate_by_name = True


class UserLeadsResponse(BaseModel):
    """Everything assigned to a user."""
    leads: List[LeadResponse]
    districts: List[DistrictResponse]
    district_contacts: List[DistrictContactResponse] = Field(alias="districtContacts")
    count: AssignmentCounts

    class Config:
        populate_by_name = True
