"""
Touchpoint schemas.
"""
import uuid
from typing import Dict, Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator

from lead_manager.core.vocabulary import TouchpointType, TouchpointOutcome
from lead_manager.schemas.common import to_naive_utc


class TouchpointCreate(BaseModel):
    """Log or schedule a touchpoint against exactly one lead or district contact."""
    lead_id: Optional[uuid.UUID] = None
    district_contact_id: Optional[uuid.UUID] = None
    type: TouchpointType
    subject: Optional[str] = None
    content: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    outcome: Optional[TouchpointOutcome] = None

    @field_validator("outcome", mode="before")
    @classmethod
    def blank_outcome_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("scheduled_at", "completed_at")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def single_parent(self):
        if (self.lead_id is None) == (self.district_contact_id is None):
            raise ValueError("Provide exactly one of lead_id or district_contact_id")
        return self

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "lead_id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
                "type": "call",
                "subject": "Intro call",
                "completed_at": "2026-05-01T16:30:00Z",
                "outcome": "voicemail"
            }
        }


class TouchpointResponse(BaseModel):
    """Touchpoint response."""
    id: uuid.UUID
    lead_id: Optional[uuid.UUID] = None
    district_contact_id: Optional[uuid.UUID] = None
    type: str
    subject: Optional[str] = None
    content: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    outcome: Optional[str] = None
    external_id: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TouchpointListResponse(BaseModel):
    touchpoints: List[TouchpointResponse]


class TouchpointCreateResponse(BaseModel):
    success: bool = True
    touchpoint: TouchpointResponse
    message: str = "Touchpoint created successfully"


class UserTouchpointSummary(BaseModel):
    """Touchpoints a user created in a date range, with per-type totals."""
    total: int
    by_type: Dict[str, int] = Field(default_factory=dict)
    touchpoints: List[TouchpointResponse]


class TouchpointCountsResponse(BaseModel):
    """Scheduled, not yet completed touchpoints per calendar day (YYYY-MM-DD)."""
    counts: Dict[str, int]
