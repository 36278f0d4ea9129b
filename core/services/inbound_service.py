"""
Entry point for every inbound chat message.

Each message goes to exactly one branch, checked in this order:

1. `/schedule ...` command (drops any pending conversation)
2. "ver mensajes" / "ver más" view request
3. payload that looks like an injection attempt -> rejected
4. "cambiar ..." / "modificar ..." edit of a pending job
5. answer to a pending conversation
6. new natural-language request
"""

import logging

from core.command_parser import is_schedule_command
from core.edit_request import is_edit_request
from core.responses import INVALID_VIEW_REQUEST, ResponseType, format_message
from core.services.conversation_service import ConversationService
from core.services.edit_service import MessageEditHandler
from core.services.schedule_service import ScheduleCommandHandler
from core.services.view_service import MessageViewHandler
from core.view_parser import ViewRequestError, classify_view_request
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class InboundMessageHandler:
    """Routes an inbound message and returns the reply text."""

    def __init__(
        self,
        commands: ScheduleCommandHandler,
        views: MessageViewHandler,
        conversations: ConversationService,
        edits: MessageEditHandler | None = None,
    ):
        self.commands = commands
        self.views = views
        self.conversations = conversations
        self.edits = edits

    def handle(self, owner_id: str, text: str) -> str:
        """Reply to one inbound message. Never raises."""
        reference = now_utc()
        try:
            if is_schedule_command(text, self.commands.config.command_keyword):
                reply = self.commands.handle(owner_id, text, reference)
                self.conversations.store.delete_conversation(owner_id)
                return reply

            view_request = classify_view_request(text)
            if view_request.valid:
                return self.views.handle(owner_id, view_request)
            if view_request.error is ViewRequestError.SUSPICIOUS:
                logger.warning(f"Rejected suspicious message from {owner_id}")
                return INVALID_VIEW_REQUEST

            if self.edits is not None and is_edit_request(text):
                return self.edits.handle(owner_id, text, reference)

            if self.conversations.has_pending(owner_id):
                return self.conversations.handle_followup(owner_id, text, reference)
            return self.conversations.handle_new(owner_id, text, reference)
        except Exception as e:
            logger.exception(f"Unexpected error routing message from {owner_id}")
            return format_message(ResponseType.ERROR_INTERNAL, error=str(e))
