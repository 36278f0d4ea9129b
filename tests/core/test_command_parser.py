"""Tests for the /schedule command parser."""

import pytest

from core.command_parser import is_schedule_command, parse_schedule_command
from core.exceptions import CommandParseError, ParseErrorKind


class TestIsScheduleCommand:
    """Keyword detection."""

    def test_keyword_followed_by_space(self):
        assert is_schedule_command("/schedule +123456 $mañana 10:00$ $hola$") is True

    def test_keyword_followed_by_delimiter(self):
        assert is_schedule_command("/schedule$+123456$ $10:00$ $hola$") is True

    def test_bare_keyword(self):
        assert is_schedule_command("  /schedule  ") is True

    def test_keyword_prefix_of_longer_word(self):
        """'/scheduled' is not the command."""
        assert is_schedule_command("/scheduled +123456 $10:00$ $hola$") is False

    def test_keyword_is_case_sensitive(self):
        assert is_schedule_command("/SCHEDULE +123456 $10:00$ $hola$") is False

    def test_custom_keyword(self):
        assert is_schedule_command("/agendar +123456 $10:00$ $hola$", keyword="/agendar") is True


class TestParseScheduleCommand:
    """Segment extraction."""

    def test_plain_recipient_two_segments(self):
        parsed = parse_schedule_command("/schedule +1234567890 $2024-12-25 10:30$ $Feliz Navidad$")

        assert parsed.recipient == "+1234567890"
        assert parsed.datetime_phrase == "2024-12-25 10:30"
        assert parsed.content == "Feliz Navidad"

    def test_bracketed_recipient_three_segments(self):
        parsed = parse_schedule_command("/schedule $ +1234567890 $ $mañana 09:00$ $Hola$")

        assert parsed.recipient == "+1234567890"
        assert parsed.datetime_phrase == "mañana 09:00"
        assert parsed.content == "Hola"

    def test_content_keeps_inner_whitespace_and_punctuation(self):
        parsed = parse_schedule_command("/schedule +123456 $10:00$ $  ¡Hola, qué tal?  $")
        assert parsed.content == "  ¡Hola, qué tal?  "

    def test_datetime_phrase_is_trimmed(self):
        parsed = parse_schedule_command("/schedule +123456 $  mañana 10:00  $ $hola$")
        assert parsed.datetime_phrase == "mañana 10:00"

    def test_contact_name_recipient_is_passed_through(self):
        """Name resolution is not the parser's job."""
        parsed = parse_schedule_command("/schedule Mamá $mañana 10:00$ $hola$")
        assert parsed.recipient == "Mamá"


class TestParseErrors:
    """Each failure carries the right kind."""

    def _kind(self, text: str) -> ParseErrorKind:
        with pytest.raises(CommandParseError) as exc_info:
            parse_schedule_command(text)
        return exc_info.value.kind

    def test_missing_keyword(self):
        assert self._kind("hola $10:00$ $msg$") is ParseErrorKind.INVALID_FORMAT

    def test_missing_recipient(self):
        assert self._kind("/schedule $18:00$ $msg$") is ParseErrorKind.MISSING_RECIPIENT

    def test_blank_bracketed_recipient(self):
        assert self._kind("/schedule $ $ $18:00$ $msg$") is ParseErrorKind.MISSING_RECIPIENT

    def test_missing_datetime(self):
        assert self._kind("/schedule +123456 $  $ $msg$") is ParseErrorKind.MISSING_DATETIME

    def test_missing_message(self):
        assert self._kind("/schedule +123456 $10:00$ $$") is ParseErrorKind.MISSING_MESSAGE

    def test_single_segment(self):
        assert self._kind("/schedule +123456 $10:00$") is ParseErrorKind.INVALID_FORMAT

    def test_no_segments(self):
        assert self._kind("/schedule +123456 mañana hola") is ParseErrorKind.INVALID_FORMAT

    def test_too_many_segments(self):
        assert self._kind("/schedule $a$ $b$ $c$ $d$") is ParseErrorKind.INVALID_FORMAT

    def test_recipient_checked_before_datetime(self):
        assert self._kind("/schedule $ $ $ $ $msg$") is ParseErrorKind.MISSING_RECIPIENT
