"""
Pydantic schemas for job applications.

The wire format uses camelCase keys (contactName, appliedAt, ...); requests
may also use the snake_case field names. Tags travel as a list of strings
and are stored comma-joined.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jobtrackr.services.tracker_view import split_tags


class ApplicationPayload(BaseModel):
    """
    Request schema for creating or fully replacing an application.

    Optional fields that are left out are stored as null, and missing tags
    as an empty list: a PUT overwrites every column.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    company: str = Field(..., min_length=1, max_length=200)
    position: str = Field(..., min_length=1, max_length=200)
    contract: str = Field(..., min_length=1, max_length=50)
    status: str = Field(..., min_length=1, max_length=50)
    link: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    applied_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default_to_empty(cls, v):
        """Accept null as an empty tag list."""
        return [] if v is None else v

    @field_validator("applied_at", mode="before")
    @classmethod
    def parse_plain_date(cls, v):
        """Accept a bare YYYY-MM-DD (what <input type="date"> submits)."""
        if isinstance(v, str) and len(v) == 10:
            return datetime.fromisoformat(v)
        return v


class ApplicationResponse(BaseModel):
    """Application as returned by the API."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    company: str
    position: str
    contract: str
    status: str
    link: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    tags: List[str] = []
    notes: Optional[str] = None
    applied_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def decode_tags(cls, v):
        return split_tags(v)


class MessageResponse(BaseModel):
    message: str
