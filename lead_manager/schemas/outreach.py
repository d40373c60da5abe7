"""
Outreach sequence schemas.
"""
import uuid
from enum import Enum
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from lead_manager.core.vocabulary import Tenant

# Gap, in business days, between steps that do not give one
DEFAULT_STEP_GAP = 2


class OutreachStepType(str, Enum):
    EMAIL = "email"
    CALL = "call"
    LINKEDIN_MESSAGE = "linkedin_message"


class OutreachStepCreate(BaseModel):
    """
    One step of a new sequence; order follows the position in `steps`.

    A missing day_offset becomes position * 2. A missing days_after_previous
    becomes DEFAULT_STEP_GAP, except on the first step.
    """
    type: OutreachStepType
    name: Optional[str] = None
    content_link: Optional[str] = Field(default=None, alias="contentLink")
    day_offset: Optional[int] = Field(default=None, ge=0, alias="dayOffset")
    days_after_previous: Optional[int] = Field(default=None, ge=0, alias="daysAfterPrevious")

    class Config:
        use_enum_values = True
        populate_by_name = True


class OutreachSequenceCreate(BaseModel):
    """Create a sequence with its steps."""
    name: Optional[str] = None
    company: Optional[Tenant] = None
    description: Optional[str] = None
    steps: List[OutreachStepCreate] = Field(default_factory=list)

    @field_validator("company", mode="before")
    @classmethod
    def match_company(cls, value):
        # Tenant names are matched case-insensitively, blank means missing
        if isinstance(value, str):
            if not value.strip():
                return None
            return next((t.value for t in Tenant if t.value.lower() == value.strip().lower()), value)
        return value

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "name": "Agent intro",
                "company": "CraftyCode",
                "steps": [
                    {"type": "email", "name": "Hi {{first_name}}", "dayOffset": 0},
                    {"type": "call", "name": "Follow-up call", "daysAfterPrevious": 3}
                ]
            }
        }


class OutreachStepResponse(BaseModel):
    id: uuid.UUID
    sequence_id: uuid.UUID
    step_order: int
    type: str
    name: Optional[str] = None
    content_link: Optional[str] = None
    day_offset: int
    days_after_previous: Optional[int] = None

    class Config:
        from_attributes = True


class OutreachSequenceSummary(BaseModel):
    """Sequence row in a list, with its number of steps."""
    id: uuid.UUID
    name: str
    company: str
    description: Optional[str] = None
    steps_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class OutreachSequenceResponse(OutreachSequenceSummary):
    steps: List[OutreachStepResponse] = Field(default_factory=list)


class OutreachSequenceListResponse(BaseModel):
    sequences: List[OutreachSequenceSummary]


class OutreachSequenceEnvelope(BaseModel):
    sequence: OutreachSequenceResponse
