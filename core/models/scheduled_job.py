"""Scheduled job domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from core.config import MAX_CONTENT_LENGTH


class JobStatus(str, Enum):
    """Job delivery status."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED_TO_SEND = "FAILED_TO_SEND"  # Transport failed on every attempt
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING


TERMINAL_STATUSES = frozenset(s for s in JobStatus if s.is_terminal)


class ScheduledJobCreate(BaseModel):
    """Validated data required to create a scheduled job."""

    owner_id: str = Field(..., min_length=1)
    recipient: str = Field(..., min_length=1)
    original_recipient_text: str
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    scheduled_at_utc: datetime
    original_datetime_text: str
    issuer_utc_offset_minutes: int
    created_at: datetime | None = None  # Request instant; the store uses its clock when None


class ScheduledJobUpdate(BaseModel):
    """Fields an owner may change on a PENDING job. None leaves a field as is."""

    recipient: str | None = Field(default=None, min_length=1)
    original_recipient_text: str | None = None
    content: str | None = Field(default=None, min_length=1, max_length=MAX_CONTENT_LENGTH)
    scheduled_at_utc: datetime | None = None
    original_datetime_text: str | None = None

    def changed_fields(self) -> tuple[str, ...]:
        return tuple(name for name, value in self.model_dump().items() if value is not None)

class ScheduledJob(BaseModel):
    """Full scheduled job entity as stored."""

    job_id: UUID
    owner_id: str
    recipient: str
    original_recipient_text: str
    content: str
    scheduled_at_utc: datetime
    original_datetime_text: str
    issuer_utc_offset_minutes: int
    status: JobStatus
    last_error: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
