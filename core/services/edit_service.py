"""Natural-language edits of pending scheduled messages."""

import logging
from datetime import datetime

from core.config import SchedulerConfig
from core.datetime_resolver import resolve_datetime
from core.edit_request import EditRequest, parse_edit_request, select_job
from core.event_bus import EventBus
from core.events import JobEdited
from core.exceptions import (
    DateTimeError,
    InvalidContentError,
    JobNotEditableError,
    JobNotFoundError,
    RecipientError,
)
from core.models import ScheduledJobUpdate
from core.natural_language import parse_natural_language
from core.recipient_resolver import resolve_recipient
from core.responses import (
    INVALID_UPDATE,
    NO_MESSAGE_TO_EDIT,
    ResponseType,
    format_message,
    format_update_confirmation,
)
from core.services.job_store import SchedulingStore
from core.services.schedule_service import describe_error
from core.validation import is_valid_content
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class MessageEditHandler:
    """Changes the content, time or recipient of one of the owner's PENDING jobs."""

    def __init__(self, store: SchedulingStore, config: SchedulerConfig, event_bus: EventBus | None = None):
        self.store = store
        self.config = config
        self.event_bus = event_bus

    def handle(self, owner_id: str, text: str, reference: datetime | None = None) -> str:
        """
        Apply an edit request such as "cambiar el mensaje del doctor por ...".

        New values go through the same recipient, date/time and content
        checks as a new schedule request. Never raises.
        """
        reference = reference or now_utc()
        try:
            request = parse_edit_request(text)
            pending = self.store.list_pending_for_owner(owner_id, 0, self.config.max_pending)
            job = select_job(request.selector, pending)
            if job is None:
                return NO_MESSAGE_TO_EDIT

            changes = self._changes(request, reference)
            if changes is None:
                return INVALID_UPDATE

            updated = self.store.update_job(owner_id, job.job_id, changes)
        except (RecipientError, DateTimeError, InvalidContentError) as e:
            logger.info(f"Edit rejected for {owner_id}: {e}")
            return describe_error(e)
        except (JobNotFoundError, JobNotEditableError) as e:
            # Sent or cancelled between the lookup and the update.
            logger.info(f"Edit target gone for {owner_id}: {e}")
            return NO_MESSAGE_TO_EDIT
        except Exception as e:
            logger.exception(f"Unexpected error editing a message for {owner_id}")
            return format_message(ResponseType.ERROR_INTERNAL, error=str(e))

        if self.event_bus is not None:
            self.event_bus.publish(JobEdited.create(updated, changes.changed_fields()))
        return format_update_confirmation(updated)

    def _changes(self, request: EditRequest, reference: datetime) -> ScheduledJobUpdate | None:
        """
        New values named in the request, None if it names none.

        Raises:
            RecipientError, DateTimeError, InvalidContentError
        """
        offset = self.config.issuer_offset_minutes
        parsed = parse_natural_language(request.changes, reference, offset)
        fields = {}

        if parsed.recipient is not None:
            recipient = resolve_recipient(parsed.recipient)
            fields["recipient"] = recipient.phone_number
            fields["original_recipient_text"] = recipient.original_input

        if parsed.datetime_phrase is not None:
            # A lone date keeps the implied 12:00; a lone time is the next such time.
            resolved = resolve_datetime(parsed.datetime_phrase, reference, offset)
            fields["scheduled_at_utc"] = resolved.utc_instant
            fields["original_datetime_text"] = resolved.original_phrase

        if request.replaces_content and parsed.content:
            if not is_valid_content(parsed.content, self.config.max_content_length):
                raise InvalidContentError(f"Invalid content ({len(parsed.content)} chars)")
            fields["content"] = parsed.content

        return ScheduledJobUpdate(**fields) if fields else None
