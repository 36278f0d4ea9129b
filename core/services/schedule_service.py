"""
Structured `/schedule` command handling.

Runs the validation chain in a fixed order and stops at the first failure:

    parse -> recipient -> date/time -> content -> pending limit -> create

Nothing reaches the store until every check passed. Each failure becomes
exactly one catalog message.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from core.command_parser import parse_schedule_command
from core.config import SchedulerConfig
from core.datetime_resolver import resolve_datetime
from core.event_bus import EventBus
from core.events import JobScheduled
from core.exceptions import (
    CommandParseError,
    DateTimeError,
    InvalidContentError,
    PendingLimitError,
    RecipientError,
)
from core.models import ScheduledJob, ScheduledJobCreate
from core.recipient_resolver import resolve_recipient
from core.responses import (
    DATETIME_ERROR_RESPONSES,
    PARSE_ERROR_RESPONSES,
    RECIPIENT_ERROR_RESPONSES,
    ResponseType,
    format_confirmation,
    format_message,
)
from core.services.job_store import SchedulingStore
from core.validation import is_valid_content
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleRequest:
    """Fields of a schedule request before validation."""

    owner_id: str
    recipient_text: str
    datetime_phrase: str
    content: str


def describe_error(error: Exception) -> str:
    """Catalog message for a scheduling failure."""
    if isinstance(error, CommandParseError):
        return format_message(PARSE_ERROR_RESPONSES[error.kind])
    if isinstance(error, RecipientError):
        return format_message(RECIPIENT_ERROR_RESPONSES[error.kind], recipient=error.token)
    if isinstance(error, DateTimeError):
        return format_message(DATETIME_ERROR_RESPONSES[error.kind])
    if isinstance(error, InvalidContentError):
        return format_message(ResponseType.ERROR_INVALID_MESSAGE)
    if isinstance(error, PendingLimitError):
        return format_message(
            ResponseType.ERROR_LIMIT_REACHED,
            current_count=error.current_count,
            limit=error.max_allowed,
        )
    return format_message(ResponseType.ERROR_INTERNAL, error=str(error))


class JobScheduler:
    """
    Validate a schedule request and store it.

    Shared by the `/schedule` command and the natural-language path so both
    enforce the same rules.
    """

    def __init__(self, store: SchedulingStore, config: SchedulerConfig, event_bus: EventBus | None = None):
        self.store = store
        self.config = config
        self.event_bus = event_bus

    def schedule(self, request: ScheduleRequest, reference: datetime) -> ScheduledJob:
        """
        Run recipient, date/time, content and limit checks, then create.

        Raises:
            RecipientError, DateTimeError, InvalidContentError, PendingLimitError
        """
        recipient = resolve_recipient(request.recipient_text)

        resolved = resolve_datetime(
            request.datetime_phrase,
            reference,
            self.config.issuer_offset_minutes,
        )

        if not is_valid_content(request.content, self.config.max_content_length):
            raise InvalidContentError(f"Invalid content ({len(request.content)} chars)")

        current = self.store.count_pending(request.owner_id)
        if current >= self.config.max_pending:
            raise PendingLimitError(current, self.config.max_pending)

        # create() re-checks the limit atomically.
        job = self.store.create(ScheduledJobCreate(
            owner_id=request.owner_id,
            recipient=recipient.phone_number,
            original_recipient_text=recipient.original_input,
            content=request.content,
            scheduled_at_utc=resolved.utc_instant,
            original_datetime_text=resolved.original_phrase,
            issuer_utc_offset_minutes=resolved.issuer_offset_minutes,
            created_at=reference,
        ))

        if self.event_bus is not None:
            self.event_bus.publish(JobScheduled.create(job))

        return job


class ScheduleCommandHandler:
    """Turns one `/schedule` command into a stored job and a reply."""

    def __init__(self, scheduler: JobScheduler):
        self.scheduler = scheduler
        self.config = scheduler.config

    def handle(self, owner_id: str, text: str, reference: datetime | None = None) -> str:
        """
        Process a schedule command.

        Args:
            owner_id: Issuer identity
            text: Full command text
            reference: Instant the command was issued (defaults to now)

        Returns:
            Confirmation or the catalog message for the first failure. Never raises.
        """
        reference = reference or now_utc()

        try:
            parsed = parse_schedule_command(text, self.config.command_keyword)
            job = self.scheduler.schedule(
                ScheduleRequest(
                    owner_id=owner_id,
                    recipient_text=parsed.recipient,
                    datetime_phrase=parsed.datetime_phrase,
                    content=parsed.content,
                ),
                reference,
            )
        except (CommandParseError, RecipientError, DateTimeError, InvalidContentError, PendingLimitError) as e:
            logger.info(f"Schedule command rejected for {owner_id}: {e}")
            return describe_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error scheduling message for {owner_id}")
            return describe_error(e)

        return format_confirmation(job)
