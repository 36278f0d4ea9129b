"""
Domain events for scheduled messages.

Immutable event objects published when a job changes state. Publishers do
not know who listens; handlers get the full job so they never re-read the
store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class SchedulerEvent:
    """Base class for all scheduler events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class JobEvent(SchedulerEvent):
    """Events related to the scheduled job lifecycle."""
    job: Any = None  # ScheduledJob; typed Any to avoid a circular import


@dataclass(frozen=True)
class JobScheduled(JobEvent):
    """A new PENDING job was stored."""

    @classmethod
    def create(cls, job: Any) -> "JobScheduled":
        return cls(job=job)


@dataclass(frozen=True)
class JobDelivered(JobEvent):
    """The transport accepted the message; job is SENT."""
    attempts: int = 1

    @classmethod
    def create(cls, job: Any, attempts: int) -> "JobDelivered":
        return cls(job=job, attempts=attempts)


@dataclass(frozen=True)
class JobDeliveryFailed(JobEvent):
    """Every attempt failed; job is FAILED_TO_SEND."""
    attempts: int = 0
    reason: str = ""

    @classmethod
    def create(cls, job: Any, attempts: int, reason: str) -> "JobDeliveryFailed":
        return cls(job=job, attempts=attempts, reason=reason)


@dataclass(frozen=True)
class JobCancelled(JobEvent):
    """The owner cancelled a PENDING job."""

    @classmethod
    def create(cls, job: Any) -> "JobCancelled":
        return cls(job=job)


@dataclass(frozen=True)
class JobEdited(JobEvent):
    """The owner changed the recipient, time or content of a PENDING job."""
    changed_fields: tuple[str, ...] = ()

    @classmethod
    def create(cls, job: Any, changed_fields: tuple[str, ...]) -> "JobEdited":
        return cls(job=job, changed_fields=changed_fields)
