"""
Parser for structured schedule commands.

Format:
    /schedule <recipient> $<date/time>$ $<message>$
    /schedule $<recipient>$ $<date/time>$ $<message>$

Segments are delimited by `$` so they can hold any whitespace or punctuation.
"""

import re
from dataclasses import dataclass

from core.exceptions import CommandParseError, ParseErrorKind

DEFAULT_COMMAND_KEYWORD = "/schedule"
SEGMENT_DELIMITER = "$"

_SEGMENT = re.compile(r"\$([^$]*)\$")


@dataclass(frozen=True)
class ParsedScheduleCommand:
    recipient: str
    datetime_phrase: str
    content: str


def is_schedule_command(text: str, keyword: str = DEFAULT_COMMAND_KEYWORD) -> bool:
    """True if text starts with the command keyword as a whole word (case-sensitive)."""
    stripped = text.strip()
    if not stripped.startswith(keyword):
        return False
    rest = stripped[len(keyword):]
    return rest == "" or rest[0].isspace() or rest[0] == SEGMENT_DELIMITER


def parse_schedule_command(text: str, keyword: str = DEFAULT_COMMAND_KEYWORD) -> ParsedScheduleCommand:
    """
    Split a schedule command into recipient, date/time phrase and content.

    Args:
        text: Full command text
        keyword: Command keyword the text must start with

    Returns:
        ParsedScheduleCommand

    Raises:
        CommandParseError: With kind INVALID_FORMAT, MISSING_RECIPIENT,
            MISSING_DATETIME or MISSING_MESSAGE
    """
    if not is_schedule_command(text, keyword):
        raise CommandParseError(
            ParseErrorKind.INVALID_FORMAT,
            f"Command must start with {keyword}",
        )

    body = text.strip()[len(keyword):].strip()
    segments = _SEGMENT.findall(body)

    if len(segments) < 2 or len(segments) > 3:
        raise CommandParseError(
            ParseErrorKind.INVALID_FORMAT,
            f"Expected 2 or 3 delimited segments, found {len(segments)}",
        )

    if len(segments) == 3:
        recipient = segments[0].strip()
        datetime_phrase, content = segments[1], segments[2]
    else:
        recipient = body[:body.index(SEGMENT_DELIMITER)].strip()
        datetime_phrase, content = segments

    if not recipient:
        raise CommandParseError(ParseErrorKind.MISSING_RECIPIENT)

    datetime_phrase = datetime_phrase.strip()
    if not datetime_phrase:
        raise CommandParseError(ParseErrorKind.MISSING_DATETIME)

    # Whitespace-only content is left to the content validator.
    if content == "":
        raise CommandParseError(ParseErrorKind.MISSING_MESSAGE)

    return ParsedScheduleCommand(
        recipient=recipient,
        datetime_phrase=datetime_phrase,
        content=content,
    )
