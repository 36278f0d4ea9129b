"""
Scheduling store contract and its PostgreSQL implementation.

The store is the single source of truth for scheduled jobs and pending
conversations. Two rules hold for every implementation:

- an owner never holds more than `max_pending` PENDING jobs; the count
  check and the insert are atomic per owner
- status only moves PENDING -> SENT | FAILED_TO_SEND | CANCELLED, once
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient
from core.config import MAX_BATCH_SIZE, MAX_PENDING
from core.exceptions import (
    InvalidStatusTransitionError,
    JobNotEditableError,
    JobNotFoundError,
    PendingLimitError,
)
from core.models import JobStatus, PendingConversation, ScheduledJob, ScheduledJobCreate, ScheduledJobUpdate
from utils.timezone import now_utc, to_utc

logger = logging.getLogger(__name__)


def effective_batch_size(batch_size: int) -> int:
    """Clamp a requested batch size to the hard cap."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return min(batch_size, MAX_BATCH_SIZE)


class SchedulingStore(ABC):
    """Persistence contract for scheduled jobs and pending conversations."""

    max_pending: int = MAX_PENDING

    @abstractmethod
    def count_pending(self, owner_id: str) -> int:
        """Number of PENDING jobs the owner holds."""

    @abstractmethod
    def create(self, data: ScheduledJobCreate) -> ScheduledJob:
        """
        Store a new PENDING job.

        Raises:
            PendingLimitError: Owner already holds max_pending PENDING jobs;
                nothing is stored
        """

    @abstractmethod
    def get(self, job_id: UUID) -> ScheduledJob | None:
        """Job by id, None if missing."""

    @abstractmethod
    def list_due(self, now: datetime, batch_size: int = MAX_BATCH_SIZE) -> list[ScheduledJob]:
        """
        PENDING jobs with scheduled_at_utc <= now, oldest first.

        Returns at most min(batch_size, MAX_BATCH_SIZE) jobs.
        """

    @abstractmethod
    def update_status(
        self,
        job_id: UUID,
        status: JobStatus,
        last_error: str | None = None,
    ) -> ScheduledJob:
        """
        Move a PENDING job to a terminal status.

        Raises:
            JobNotFoundError: No such job
            InvalidStatusTransitionError: Job is not PENDING, or status is
                not terminal
        """

    @abstractmethod
    def list_pending_for_owner(self, owner_id: str, offset: int, limit: int) -> list[ScheduledJob]:
        """Owner's PENDING jobs ordered by scheduled_at_utc, one page."""

    @abstractmethod
    def cancel(self, owner_id: str, job_id: UUID) -> ScheduledJob:
        """
        Cancel one of the owner's PENDING jobs.

        Raises:
            JobNotFoundError: No such job for this owner
            InvalidStatusTransitionError: Job already terminal
        """

    @abstractmethod
    def update_job(self, owner_id: str, job_id: UUID, changes: ScheduledJobUpdate) -> ScheduledJob:
        """
        Apply an owner's edit to one of their PENDING jobs. Status is untouched.

        Raises:
            JobNotFoundError: No such job for this owner
            JobNotEditableError: Job already left PENDING
        """

    @abstractmethod
    def get_conversation(self, owner_id: str) -> PendingConversation | None:
        """Owner's pending conversation, None if there is none."""

    @abstractmethod
    def save_conversation(self, conversation: PendingConversation) -> PendingConversation:
        """Insert or replace the owner's pending conversation."""

    @abstractmethod
    def delete_conversation(self, owner_id: str) -> bool:
        """True if a conversation existed and was deleted."""


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS scheduled_jobs (
    job_id UUID PRIMARY KEY,
    owner_id TEXT NOT NULL,
    recipient TEXT NOT NULL,
    original_recipient_text TEXT NOT NULL,
    content TEXT NOT NULL CHECK (char_length(content) BETWEEN 1 AND 1000),
    scheduled_at_utc TIMESTAMPTZ NOT NULL,
    original_datetime_text TEXT NOT NULL,
    issuer_utc_offset_minutes INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'PENDING'
        CHECK (status IN ('PENDING', 'SENT', 'FAILED_TO_SEND', 'CANCELLED')),
    last_error TEXT,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);

CREATE INDEX IF NOT EXISTS scheduled_jobs_due_idx
    ON scheduled_jobs (scheduled_at_utc) WHERE status = 'PENDING';

CREATE INDEX IF NOT EXISTS scheduled_jobs_owner_pending_idx
    ON scheduled_jobs (owner_id, scheduled_at_utc) WHERE status = 'PENDING';

CREATE TABLE IF NOT EXISTS pending_conversations (
    owner_id TEXT PRIMARY KEY,
    partial_content TEXT NOT NULL,
    recipient TEXT,
    missing_field TEXT NOT NULL CHECK (missing_field IN ('date', 'time', 'phone')),
    original_input_text TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);
"""


class PostgresJobStore(SchedulingStore):
    """SchedulingStore backed by PostgreSQL."""

    def __init__(self, postgres: PostgresClient, max_pending: int = MAX_PENDING):
        self.postgres = postgres
        self.max_pending = max_pending

    def ensure_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        self.postgres.execute(SCHEMA_SQL)
        logger.info("Scheduling schema ensured")

    def count_pending(self, owner_id: str) -> int:
        return self.postgres.execute_scalar(
            "SELECT COUNT(*) FROM scheduled_jobs WHERE owner_id = %s AND status = %s",
            (owner_id, JobStatus.PENDING.value),
        ) or 0

    def create(self, data: ScheduledJobCreate) -> ScheduledJob:
        job_id = uuid4()
        now = to_utc(data.created_at) if data.created_at else now_utc()

        with self.postgres.transaction() as cur:
            # Serialises concurrent creates for the same owner until commit.
            cur.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (data.owner_id,))
            cur.execute(
                "SELECT COUNT(*) AS pending FROM scheduled_jobs WHERE owner_id = %s AND status = %s",
                (data.owner_id, JobStatus.PENDING.value),
            )
            current = cur.fetchone()["pending"]
            if current >= self.max_pending:
                raise PendingLimitError(current, self.max_pending)

            cur.execute(
                """
                INSERT INTO scheduled_jobs (
                    job_id, owner_id, recipient, original_recipient_text,
                    content, scheduled_at_utc, original_datetime_text,
                    issuer_utc_offset_minutes, status, created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s,
                    %s, %s, %s,
                    %s, %s, %s, %s
                )
                RETURNING *
                """,
                self.postgres.convert_params((
                    job_id, data.owner_id, data.recipient, data.original_recipient_text,
                    data.content, to_utc(data.scheduled_at_utc), data.original_datetime_text,
                    data.issuer_utc_offset_minutes, JobStatus.PENDING.value, now, now,
                )),
            )
            row = dict(cur.fetchone())

        job = ScheduledJob.model_validate(row)
        logger.info(f"Job {job.job_id} scheduled for {job.scheduled_at_utc.isoformat()}")
        return job

    def get(self, job_id: UUID) -> ScheduledJob | None:
        row = self.postgres.execute_single(
            "SELECT * FROM scheduled_jobs WHERE job_id = %s",
            (job_id,),
        )
        if row is None:
            return None
        return ScheduledJob.model_validate(row)

    def list_due(self, now: datetime, batch_size: int = MAX_BATCH_SIZE) -> list[ScheduledJob]:
        rows = self.postgres.execute(
            """
            SELECT * FROM scheduled_jobs
            WHERE status = %s AND scheduled_at_utc <= %s
            ORDER BY scheduled_at_utc ASC
            LIMIT %s
            """,
            (JobStatus.PENDING.value, to_utc(now), effective_batch_size(batch_size)),
        )
        return [ScheduledJob.model_validate(row) for row in rows]

    def update_status(
        self,
        job_id: UUID,
        status: JobStatus,
        last_error: str | None = None,
    ) -> ScheduledJob:
        if not status.is_terminal:
            current = self.get(job_id)
            if current is None:
                raise JobNotFoundError(job_id)
            raise InvalidStatusTransitionError(job_id, current.status, status)

        # Guarded on PENDING so a job can only ever leave PENDING once.
        rows = self.postgres.execute_returning(
            """
            UPDATE scheduled_jobs
            SET status = %s, last_error = %s, updated_at = %s
            WHERE job_id = %s AND status = %s
            RETURNING *
            """,
            (status.value, last_error, now_utc(), job_id, JobStatus.PENDING.value),
        )
        if rows:
            return ScheduledJob.model_validate(rows[0])

        current = self.get(job_id)
        if current is None:
            raise JobNotFoundError(job_id)
        raise InvalidStatusTransitionError(job_id, current.status, status)

    def list_pending_for_owner(self, owner_id: str, offset: int, limit: int) -> list[ScheduledJob]:
        rows = self.postgres.execute(
            """
            SELECT * FROM scheduled_jobs
            WHERE owner_id = %s AND status = %s
            ORDER BY scheduled_at_utc ASC, created_at ASC
            OFFSET %s LIMIT %s
            """,
            (owner_id, JobStatus.PENDING.value, offset, limit),
        )
        return [ScheduledJob.model_validate(row) for row in rows]

    def cancel(self, owner_id: str, job_id: UUID) -> ScheduledJob:
        current = self.get(job_id)
        if current is None or current.owner_id != owner_id:
            raise JobNotFoundError(job_id)
        return self.update_status(job_id, JobStatus.CANCELLED)

    def update_job(self, owner_id: str, job_id: UUID, changes: ScheduledJobUpdate) -> ScheduledJob:
        scheduled_at = to_utc(changes.scheduled_at_utc) if changes.scheduled_at_utc else None
        rows = self.postgres.execute_returning(
            """
            UPDATE scheduled_jobs SET
                recipient = COALESCE(%s, recipient),
                original_recipient_text = COALESCE(%s, original_recipient_text),
                content = COALESCE(%s, content),
                scheduled_at_utc = COALESCE(%s, scheduled_at_utc),
                original_datetime_text = COALESCE(%s, original_datetime_text),
                updated_at = %s
            WHERE job_id = %s AND owner_id = %s AND status = %s
            RETURNING *
            """,
            (
                changes.recipient, changes.original_recipient_text, changes.content,
                scheduled_at, changes.original_datetime_text, now_utc(),
                job_id, owner_id, JobStatus.PENDING.value,
            ),
        )
        if rows:
            job = ScheduledJob.model_validate(rows[0])
            logger.info(f"Job {job_id} edited: {', '.join(changes.changed_fields())}")
            return job

        current = self.get(job_id)
        if current is None or current.owner_id != owner_id:
            raise JobNotFoundError(job_id)
        raise JobNotEditableError(job_id, current.status)

    def get_conversation(self, owner_id: str) -> PendingConversation | None:
        row = self.postgres.execute_single(
            "SELECT * FROM pending_conversations WHERE owner_id = %s",
            (owner_id,),
        )
        if row is None:
            return None
        return PendingConversation.model_validate(row)

    def save_conversation(self, conversation: PendingConversation) -> PendingConversation:
        row = self.postgres.execute_returning(
            """
            INSERT INTO pending_conversations (
                owner_id, partial_content, recipient, missing_field,
                original_input_text, created_at, updated_at
            ) VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (owner_id) DO UPDATE SET
                partial_content = EXCLUDED.partial_content,
                recipient = EXCLUDED.recipient,
                missing_field = EXCLUDED.missing_field,
                original_input_text = EXCLUDED.original_input_text,
                updated_at = EXCLUDED.updated_at
            RETURNING *
            """,
            (
                conversation.owner_id, conversation.partial_content, conversation.recipient,
                conversation.missing_field.value, conversation.original_input_text,
                conversation.created_at, conversation.updated_at,
            ),
        )[0]
        return PendingConversation.model_validate(row)

    def delete_conversation(self, owner_id: str) -> bool:
        rows = self.postgres.execute_returning(
            "DELETE FROM pending_conversations WHERE owner_id = %s RETURNING owner_id",
            (owner_id,),
        )
        return bool(rows)
