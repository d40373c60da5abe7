"""
Instantly sync schemas.
"""
import uuid
from typing import List
from pydantic import BaseModel, Field


class SyncRequest(BaseModel):
    lead_ids: List[uuid.UUID] = Field(alias="leadIds")

    class Config:
        populate_by_name = True


class SyncResults(BaseModel):
    """Outcome of a bulk sync; per-item problems are listed in errors."""
    synced_count: int = Field(default=0, alias="syncedCount")
    total_emails: int = Field(default=0, alias="totalEmails")
    errors: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True
