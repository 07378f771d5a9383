"""Job schemas for API requests and responses."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.constants import DEFAULT_JOB_STATUS


def _blank_to_none(value: Any) -> Any:
    """Treat empty strings from forms as missing values."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class JobCreate(BaseModel):
    """Create a job application."""

    company: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=255)
    status: Optional[str] = Field(DEFAULT_JOB_STATUS, max_length=50)
    deadline: Optional[date] = None
    applied_through: Optional[str] = Field(None, max_length=255)
    interview_date: Optional[date] = None

    @field_validator("company", "role", mode="before")
    @classmethod
    def strip_required(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("status", "deadline", "applied_through", "interview_date", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class JobUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""

    company: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[str] = Field(None, max_length=50)
    deadline: Optional[date] = None
    applied_through: Optional[str] = Field(None, max_length=255)
    interview_date: Optional[date] = None

    @field_validator("deadline", "applied_through", "interview_date", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class JobResponse(BaseModel):
    """A stored job application."""

    id: int
    user_id: int
    company: str
    role: str
    status: str
    deadline: Optional[date] = None
    applied_through: Optional[str] = None
    interview_date: Optional[date] = None
    reminder_sent: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    """Response for paginated job list."""

    jobs: List[JobResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class JobStatsResponse(BaseModel):
    """Job counts per status."""

    stats: Dict[str, int] = Field(default_factory=dict)


class JobImportResponse(BaseModel):
    """Result of a CSV bulk import."""

    message: str
    inserted_rows: int
    skipped_rows: int = 0
