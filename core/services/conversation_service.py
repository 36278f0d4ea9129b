"""
Natural-language scheduling with follow-up questions.

When a free-text request lacks the phone, the date or the time, the partial
request is kept as the owner's PendingConversation and the next message is
read as the answer.
"""

import logging
from datetime import datetime

from core.exceptions import SchedulerError
from core.models import MissingField, PendingConversation, ScheduledJob
from core.natural_language import NaturalLanguageParse, find_phone, parse_natural_language
from core.responses import (
    INVALID_MESSAGE,
    MISSING_FIELD_RESPONSES,
    format_confirmation,
    format_message,
    ResponseType,
)
from core.services.job_store import SchedulingStore
from core.services.schedule_service import JobScheduler, ScheduleRequest, describe_error
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class ConversationService:
    """Schedules messages described in free text, asking for what is missing."""

    def __init__(self, store: SchedulingStore, scheduler: JobScheduler):
        self.store = store
        self.scheduler = scheduler
        self.config = scheduler.config

    def has_pending(self, owner_id: str) -> bool:
        return self.store.get_conversation(owner_id) is not None

    def handle_new(self, owner_id: str, text: str, reference: datetime | None = None) -> str:
        """
        Handle a fresh natural-language request.

        Returns the confirmation, a question for the missing field, or
        INVALID_MESSAGE when nothing schedulable was found. Never raises.
        """
        reference = reference or now_utc()
        try:
            parsed = self._parse(text, reference)
            if parsed.salvageable:
                return self._ask(owner_id, parsed, text, reference)
            if not parsed.valid:
                return INVALID_MESSAGE

            job = self._schedule(owner_id, parsed, reference)
            self.store.delete_conversation(owner_id)
            return format_confirmation(job)
        except SchedulerError as e:
            logger.info(f"Natural-language request rejected for {owner_id}: {e}")
            return describe_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error handling request from {owner_id}")
            return format_message(ResponseType.ERROR_INTERNAL, error=str(e))

    def handle_followup(self, owner_id: str, text: str, reference: datetime | None = None) -> str:
        """
        Merge a follow-up with the owner's pending conversation.

        Completes the job (and drops the conversation) or updates the
        conversation and asks again. Without a pending conversation the text
        is handled as a new request. Never raises.
        """
        reference = reference or now_utc()
        try:
            conversation = self.store.get_conversation(owner_id)
            if conversation is None:
                return self.handle_new(owner_id, text, reference)

            combined = self._merge(conversation, text)
            if combined is None:
                self._save(conversation, conversation.missing_field, reference)
                return MISSING_FIELD_RESPONSES[MissingField.PHONE]

            parsed = self._parse(combined, reference)
            if parsed.salvageable:
                return self._ask(owner_id, parsed, combined, reference, conversation)
            if not parsed.valid:
                self._save(conversation, conversation.missing_field, reference, original_input_text=combined)
                return MISSING_FIELD_RESPONSES[conversation.missing_field]

            job = self._schedule(owner_id, parsed, reference)
            self.store.delete_conversation(owner_id)
            return format_confirmation(job)
        except SchedulerError as e:
            logger.info(f"Follow-up rejected for {owner_id}: {e}")
            return describe_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error handling follow-up from {owner_id}")
            return format_message(ResponseType.ERROR_INTERNAL, error=str(e))

    def _parse(self, text: str, reference: datetime) -> NaturalLanguageParse:
        return parse_natural_language(text, reference, self.config.issuer_offset_minutes)

    @staticmethod
    def _merge(conversation: PendingConversation, followup: str) -> str | None:
        """
        Combined text to re-parse, None if a phone was asked for and none given.

        A date goes in front of the original request, a time after it.
        """
        followup = followup.strip()
        if conversation.missing_field is MissingField.PHONE:
            phone = find_phone(followup)
            if phone is None:
                return None
            return f"{phone} {conversation.original_input_text}"
        if conversation.missing_field is MissingField.DATE:
            return f"{followup} {conversation.original_input_text}"
        return f"{conversation.original_input_text} {followup}"

    def _ask(
        self,
        owner_id: str,
        parsed: NaturalLanguageParse,
        original_input_text: str,
        reference: datetime,
        existing: PendingConversation | None = None,
    ) -> str:
        conversation = existing or PendingConversation(
            owner_id=owner_id,
            partial_content=parsed.content,
            recipient=parsed.recipient,
            missing_field=parsed.missing,
            original_input_text=original_input_text,
            created_at=reference,
            updated_at=reference,
        )
        self._save(
            conversation,
            parsed.missing,
            reference,
            original_input_text=original_input_text,
            partial_content=parsed.content,
            recipient=parsed.recipient,
        )
        logger.info(f"Waiting for {parsed.missing.value} from {owner_id}")
        return MISSING_FIELD_RESPONSES[parsed.missing]

    def _save(
        self,
        conversation: PendingConversation,
        missing_field: MissingField,
        reference: datetime,
        **changes,
    ) -> PendingConversation:
        updated = conversation.model_copy(update={
            **changes,
            "missing_field": missing_field,
            "updated_at": reference,
        })
        return self.store.save_conversation(updated)

    def _schedule(self, owner_id: str, parsed: NaturalLanguageParse, reference: datetime) -> ScheduledJob:
        return self.scheduler.schedule(
            ScheduleRequest(
                owner_id=owner_id,
                recipient_text=parsed.recipient,
                datetime_phrase=parsed.datetime_phrase,
                content=parsed.content,
            ),
            reference,
        )
