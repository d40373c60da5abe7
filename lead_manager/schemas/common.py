"""
Common schemas used across multiple endpoints.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body returned by endpoints that report `{error}`."""
    error: str

    class Config:
        json_schema_extra = {"example": {"error": "Instantly API key is not configured"}}


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store datetimes as naive UTC; aware input is converted first."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
