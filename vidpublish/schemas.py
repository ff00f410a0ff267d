"""
Pydantic models for API responses.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# -----------------------------------------------------------------------------
# Base Models
# -----------------------------------------------------------------------------

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# -----------------------------------------------------------------------------
# Upload Models
# -----------------------------------------------------------------------------

class UploadSummary(BaseSchema):
    """Outcome of a successful upload."""
    video_title: str = Field(..., description="Generated video title")
    video_description: str = Field(..., description="Generated video description")
    tags: List[str] = Field(default_factory=list)
    hashtags: List[str] = Field(default_factory=list, description="Hashtags without the leading '#'")
    thumbnail_prompt: Optional[str] = Field(default=None, description="Prompt for a thumbnail image")
    scheduled_at: Optional[str] = Field(default=None, description="Echo of the schedule; null means immediate")
    video_id: str = Field(..., description="Published video identifier")
    video_url: str = Field(..., description="Published video URL")


class UploadSuccessResponse(BaseSchema):
    success: bool = True
    summary: UploadSummary


class UploadErrorResponse(BaseSchema):
    success: bool = False
    error: str


# -----------------------------------------------------------------------------
# Health Models
# -----------------------------------------------------------------------------

class HealthResponse(BaseSchema):
    """Health check response."""
    status: str = "healthy"
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
