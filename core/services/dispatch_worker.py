"""
Delivery of due scheduled messages.

One tick: fetch up to MAX_BATCH_SIZE due PENDING jobs, oldest first, and
deliver them one at a time with bounded retries. Each job ends the tick as
SENT or FAILED_TO_SEND; a job whose status could not be recorded stays
PENDING and is picked up again next tick.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

from clients.valkey_client import ValkeyClient
from core.config import SchedulerConfig
from core.event_bus import EventBus
from core.events import JobDelivered, JobDeliveryFailed
from core.exceptions import DispatchError, TransportError
from core.models import JobStatus, ScheduledJob
from core.services.job_store import SchedulingStore
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Delivers a text to a recipient. Raises TransportError on failure."""

    def send(self, recipient: str, text: str) -> None: ...


@dataclass(frozen=True)
class DispatchSummary:
    sent: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def processed(self) -> int:
        return self.sent + self.failed + self.skipped


class DispatchLock:
    """
    Cross-process mutex on Valkey (SET NX EX).

    The TTL bounds how long a crashed holder can block other processes.
    """

    KEY = "schedbot:dispatch-lock"

    def __init__(self, valkey: ValkeyClient, ttl_seconds: int = 300):
        self.valkey = valkey
        self.ttl_seconds = ttl_seconds
        self._token: str | None = None

    def acquire(self) -> bool:
        token = uuid.uuid4().hex
        if self.valkey.set_if_absent(self.KEY, token, self.ttl_seconds):
            self._token = token
            return True
        return False

    def release(self) -> None:
        if self._token is None:
            return
        self.valkey.delete_if_equals(self.KEY, self._token)
        self._token = None


class DispatchWorker:
    """Sends due jobs through the transport and records the outcome."""

    def __init__(
        self,
        store: SchedulingStore,
        transport: Transport,
        config: SchedulerConfig,
        event_bus: EventBus | None = None,
        lock: DispatchLock | None = None,
        clock: Callable[[], datetime] = now_utc,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.transport = transport
        self.config = config
        self.event_bus = event_bus
        self.lock = lock
        self.clock = clock
        self.sleep = sleep

    def run_tick(self) -> DispatchSummary:
        """
        Deliver every job due at the start of the tick.

        Returns:
            DispatchSummary with sent / failed / skipped counts

        Raises:
            DispatchError: If due jobs could not be fetched
        """
        if self.lock is not None and not self.lock.acquire():
            logger.info("Dispatch tick skipped: another process holds the lock")
            return DispatchSummary()

        try:
            return self._dispatch_due()
        finally:
            if self.lock is not None:
                self.lock.release()

    def _dispatch_due(self) -> DispatchSummary:
        now = self.clock()
        try:
            jobs = self.store.list_due(now, self.config.max_batch_size)
        except Exception as e:
            logger.exception("Failed to fetch due jobs")
            raise DispatchError(f"Failed to fetch due jobs: {e}") from e

        if not jobs:
            return DispatchSummary()

        logger.info(f"Dispatching {len(jobs)} due job(s)")
        sent = failed = skipped = 0

        for index, job in enumerate(jobs):
            if index > 0 and self.config.inter_job_delay_seconds:
                self.sleep(self.config.inter_job_delay_seconds)

            outcome = self._dispatch_one(job)
            if outcome is JobStatus.SENT:
                sent += 1
            elif outcome is JobStatus.FAILED_TO_SEND:
                failed += 1
            else:
                skipped += 1

        summary = DispatchSummary(sent=sent, failed=failed, skipped=skipped)
        logger.info(f"Dispatch tick done: sent={sent} failed={failed} skipped={skipped}")
        return summary

    def _deliver(self, job: ScheduledJob) -> tuple[bool, int, str | None]:
        """Attempt delivery up to max_attempts times. Returns (ok, attempts, last error)."""
        last_error = None
        for attempt in range(1, self.config.max_attempts + 1):
            try:
                self.transport.send(job.recipient, job.content)
                return True, attempt, None
            except TransportError as e:
                last_error = e.reason
            except Exception as e:
                last_error = str(e) or e.__class__.__name__

            logger.warning(
                f"Attempt {attempt}/{self.config.max_attempts} failed for job {job.job_id}: {last_error}"
            )
            if attempt < self.config.max_attempts and self.config.retry_delay_seconds:
                self.sleep(self.config.retry_delay_seconds)

        return False, self.config.max_attempts, last_error

    def _dispatch_one(self, job: ScheduledJob) -> JobStatus | None:
        """Deliver one job and record its status. None if the status could not be recorded."""
        ok, attempts, last_error = self._deliver(job)
        status = JobStatus.SENT if ok else JobStatus.FAILED_TO_SEND

        try:
            updated = self.store.update_status(job.job_id, status, last_error)
        except Exception:
            logger.exception(f"Failed to record {status.value} for job {job.job_id}")
            return None

        if ok:
            logger.info(f"Job {job.job_id} sent after {attempts} attempt(s)")
            event = JobDelivered.create(updated, attempts)
        else:
            logger.error(f"Job {job.job_id} failed after {attempts} attempts: {last_error}")
            event = JobDeliveryFailed.create(updated, attempts, last_error or "")

        if self.event_bus is not None:
            self.event_bus.publish(event)
        return status
