"""In-process SchedulingStore for single-process deployments and tests."""

import threading
from datetime import datetime
from uuid import UUID, uuid4

from core.config import MAX_BATCH_SIZE, MAX_PENDING
from core.exceptions import (
    InvalidStatusTransitionError,
    JobNotEditableError,
    JobNotFoundError,
    PendingLimitError,
)
from core.models import JobStatus, PendingConversation, ScheduledJob, ScheduledJobCreate, ScheduledJobUpdate
from core.services.job_store import SchedulingStore, effective_batch_size
from utils.timezone import now_utc, to_utc


class InMemoryJobStore(SchedulingStore):
    """
    Dict-backed store. One lock guards every operation, which makes the
    pending-limit check and insert atomic.
    """

    def __init__(self, max_pending: int = MAX_PENDING):
        self.max_pending = max_pending
        self._jobs: dict[UUID, ScheduledJob] = {}
        self._conversations: dict[str, PendingConversation] = {}
        self._lock = threading.Lock()

    def _pending(self, owner_id: str | None = None) -> list[ScheduledJob]:
        jobs = [
            job for job in self._jobs.values()
            if job.status is JobStatus.PENDING and (owner_id is None or job.owner_id == owner_id)
        ]
        return sorted(jobs, key=lambda job: (job.scheduled_at_utc, job.created_at))

    def count_pending(self, owner_id: str) -> int:
        with self._lock:
            return len(self._pending(owner_id))

    def create(self, data: ScheduledJobCreate) -> ScheduledJob:
        with self._lock:
            current = len(self._pending(data.owner_id))
            if current >= self.max_pending:
                raise PendingLimitError(current, self.max_pending)

            now = to_utc(data.created_at) if data.created_at else now_utc()
            job = ScheduledJob(
                job_id=uuid4(),
                status=JobStatus.PENDING,
                created_at=now,
                updated_at=now,
                **data.model_dump(exclude={"scheduled_at_utc", "created_at"}),
                scheduled_at_utc=to_utc(data.scheduled_at_utc),
            )
            self._jobs[job.job_id] = job
            return job

    def get(self, job_id: UUID) -> ScheduledJob | None:
        with self._lock:
            return self._jobs.get(job_id)

    def list_due(self, now: datetime, batch_size: int = MAX_BATCH_SIZE) -> list[ScheduledJob]:
        limit = effective_batch_size(batch_size)
        now = to_utc(now)
        with self._lock:
            due = [job for job in self._pending() if job.scheduled_at_utc <= now]
        return due[:limit]

    def update_status(
        self,
        job_id: UUID,
        status: JobStatus,
        last_error: str | None = None,
    ) -> ScheduledJob:
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                raise JobNotFoundError(job_id)
            if current.status is not JobStatus.PENDING or not status.is_terminal:
                raise InvalidStatusTransitionError(job_id, current.status, status)

            updated = current.model_copy(
                update={"status": status, "last_error": last_error, "updated_at": now_utc()}
            )
            self._jobs[job_id] = updated
            return updated

    def list_pending_for_owner(self, owner_id: str, offset: int, limit: int) -> list[ScheduledJob]:
        with self._lock:
            return self._pending(owner_id)[offset:offset + limit]

    def cancel(self, owner_id: str, job_id: UUID) -> ScheduledJob:
        current = self.get(job_id)
        if current is None or current.owner_id != owner_id:
            raise JobNotFoundError(job_id)
        return self.update_status(job_id, JobStatus.CANCELLED)

    def update_job(self, owner_id: str, job_id: UUID, changes: ScheduledJobUpdate) -> ScheduledJob:
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None or current.owner_id != owner_id:
                raise JobNotFoundError(job_id)
            if current.status is not JobStatus.PENDING:
                raise JobNotEditableError(job_id, current.status)

            fields = changes.model_dump(exclude_none=True)
            if "scheduled_at_utc" in fields:
                fields["scheduled_at_utc"] = to_utc(fields["scheduled_at_utc"])
            updated = current.model_copy(update={**fields, "updated_at": now_utc()})
            self._jobs[job_id] = updated
            return updated

    def get_conversation(self, owner_id: str) -> PendingConversation | None:
        with self._lock:
            return self._conversations.get(owner_id)

    def save_conversation(self, conversation: PendingConversation) -> PendingConversation:
        with self._lock:
            existing = self._conversations.get(conversation.owner_id)
            if existing is not None:
                conversation = conversation.model_copy(update={"created_at": existing.created_at})
            self._conversations[conversation.owner_id] = conversation
            return conversation

    def delete_conversation(self, owner_id: str) -> bool:
        with self._lock:
            return self._conversations.pop(owner_id, None) is not None
