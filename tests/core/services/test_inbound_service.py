"""Tests for routing inbound chat messages to the right handler."""

from unittest.mock import Mock

import pytest

from bootstrap import build_services
from core.responses import (
    INVALID_MESSAGE,
    INVALID_VIEW_REQUEST,
    MISSING_PHONE_MESSAGE,
    NO_MESSAGES,
    SHOWING_MESSAGES_HEADER,
    ResponseType,
    format_message,
)
from core.services.inbound_service import InboundMessageHandler

# Inbound handling uses the wall clock, so dates sit far in the future.
SCHEDULE = "/schedule +1234567890 $2099-12-25 10:30$ $Feliz Navidad$"


@pytest.fixture
def inbound(store, transport, view_stats, config):
    return build_services(store, transport, view_stats, config).inbound


class TestRouting:

    def test_schedule_command(self, inbound, store, owner):
        reply = inbound.handle(owner, SCHEDULE)

        assert reply.startswith("✅")
        assert store.count_pending(owner) == 1

    def test_schedule_command_drops_pending_conversation(self, inbound, store, owner):
        assert inbound.handle(owner, "mañana 10:00 recordar algo") == MISSING_PHONE_MESSAGE

        inbound.handle(owner, SCHEDULE)

        assert store.get_conversation(owner) is None

    def test_view_request(self, inbound, owner):
        assert inbound.handle(owner, "ver mensajes") == NO_MESSAGES

        inbound.handle(owner, SCHEDULE)

        assert inbound.handle(owner, "¿qué mensajes tengo?").startswith(SHOWING_MESSAGES_HEADER)

    def test_view_request_does_not_touch_conversation(self, inbound, store, owner):
        inbound.handle(owner, "mañana 10:00 recordar algo")
        inbound.handle(owner, "ver mensajes")

        assert store.get_conversation(owner) is not None

    def test_suspicious_payload_is_rejected(self, inbound, store, owner):
        assert inbound.handle(owner, "SELECT * FROM scheduled_jobs") == INVALID_VIEW_REQUEST
        assert store.get_conversation(owner) is None

    def test_followup_completes_conversation(self, inbound, store, owner):
        inbound.handle(owner, "mañana 10:00 recordar algo")

        reply = inbound.handle(owner, "+56912345678")

        assert reply.startswith("✅")
        assert store.count_pending(owner) == 1

    def test_edit_request(self, inbound, store, owner):
        inbound.handle(owner, SCHEDULE)

        reply = inbound.handle(owner, "cambiar el mensaje de navidad por Feliz Año Nuevo")

        assert reply.startswith("✏️")
        [job] = store.list_pending_for_owner(owner, 0, 10)
        assert job.content == "Feliz Año Nuevo"

    def test_edit_request_leaves_pending_conversation(self, inbound, store, owner):
        inbound.handle(owner, SCHEDULE)
        inbound.handle(owner, "mañana 10:00 recordar algo")

        inbound.handle(owner, "cambiar navidad por Felices fiestas")

        assert store.get_conversation(owner) is not None
        assert store.count_pending(owner) == 1

    def test_new_natural_language_request(self, inbound, store, owner):
        assert inbound.handle(owner, "+56912345678 mañana 10:00 hola").startswith("✅")

    def test_unrecognised_text(self, inbound, owner):
        assert inbound.handle(owner, "hola") == INVALID_MESSAGE

    def test_owners_are_isolated(self, inbound, store, owner, other_owner):
        inbound.handle(owner, "mañana 10:00 recordar algo")

        inbound.handle(other_owner, "+56912345678")

        assert store.get_conversation(owner) is not None
        assert store.count_pending(other_owner) == 0


class TestFailures:

    def test_unexpected_error_becomes_internal_reply(self, owner):
        commands = Mock()
        commands.config.command_keyword = "/schedule"
        conversations = Mock()
        conversations.has_pending.side_effect = RuntimeError("store offline")
        inbound = InboundMessageHandler(commands, Mock(), conversations)

        reply = inbound.handle(owner, "hola")

        assert reply == format_message(ResponseType.ERROR_INTERNAL, error="store offline")
