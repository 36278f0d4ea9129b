"""Core domain models."""

from core.models.scheduled_job import (
    ScheduledJob,
    ScheduledJobCreate,
    ScheduledJobUpdate,
    JobStatus,
    TERMINAL_STATUSES,
)
from core.models.pending_conversation import PendingConversation, MissingField
from core.models.view_stats import ViewStats

__all__ = [
    # ScheduledJob
    "ScheduledJob", "ScheduledJobCreate", "ScheduledJobUpdate", "JobStatus", "TERMINAL_STATUSES",
    # PendingConversation
    "PendingConversation", "MissingField",
    # ViewStats
    "ViewStats",
]
