"""
Natural-language schedule requests.

Free text such as "agenda para mañana 15:00 +56912345678 llamar al doctor":
the phone number and the date/time may sit anywhere in the sentence, and
whatever is left after removing them (and a leading scheduling verb) is the
message body.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from core.datetime_resolver import find_datetime_expression, has_negative_time, resolve_datetime
from core.exceptions import DateTimeError, DateTimeErrorKind
from core.models import MissingField
from core.recipient_resolver import normalize_phone

_PHONE = re.compile(r"\+\d+(?:-\d+)*")

# Longest first so "agenda para" wins over "agenda".
_PREFIXES = sorted(
    [
        "agenda",
        "agenda para",
        "agendar",
        "agendar para",
        "envía",
        "envia",
        "enviar",
        "envía este mensaje",
        "envia este mensaje",
        "programa",
        "programa para",
        "programar",
        "programar para",
    ],
    key=len,
    reverse=True,
)


@dataclass(frozen=True)
class NaturalLanguageParse:
    content: str
    recipient: str | None
    scheduled_at_utc: datetime | None
    datetime_phrase: str | None
    missing: MissingField | None

    @property
    def valid(self) -> bool:
        """Complete request: content, recipient and a resolved instant."""
        return (
            self.missing is None
            and bool(self.content)
            and self.recipient is not None
            and self.scheduled_at_utc is not None
        )

    @property
    def salvageable(self) -> bool:
        """Partial request a follow-up can complete."""
        return self.missing is not None


def find_phone(text: str) -> str | None:
    """First `+digits` token in text (hyphens allowed between digits), hyphen-free."""
    match = _PHONE.search(text)
    return normalize_phone(match.group(0)) if match else None


def strip_scheduling_prefix(text: str) -> str:
    lowered = text.lower()
    for prefix in _PREFIXES:
        if lowered.startswith(prefix) and (len(text) == len(prefix) or not text[len(prefix)].isalnum()):
            return text[len(prefix):]
    return text


def _clean(text: str) -> str:
    return " ".join(text.split()).strip(" ,:;-")


def parse_natural_language(
    text: str,
    reference: datetime,
    issuer_offset_minutes: int,
) -> NaturalLanguageParse:
    """
    Extract recipient, date/time and content from free text.

    A phone number missing takes precedence over a missing date or time,
    since nothing can be scheduled without it. The instant is resolved only
    when both a date and a time are present.

    Raises:
        DateTimeError: INVALID_HOUR for a negative clock time anywhere in
            the text, or any kind when a complete date/time cannot be
            resolved to a future instant
    """
    phone_match = _PHONE.search(text)
    recipient = normalize_phone(phone_match.group(0)) if phone_match else None
    remainder = text[:phone_match.start()] + " " + text[phone_match.end():] if phone_match else text

    if has_negative_time(remainder):
        raise DateTimeError(DateTimeErrorKind.INVALID_HOUR, remainder.strip())

    expression = find_datetime_expression(remainder)
    if expression is None:
        return NaturalLanguageParse(
            content=_clean(remainder),
            recipient=recipient,
            scheduled_at_utc=None,
            datetime_phrase=None,
            missing=None,
        )

    content = _clean(strip_scheduling_prefix(_clean(expression.remove_from(remainder))))

    if recipient is None:
        missing = MissingField.PHONE
    elif not expression.has_time:
        missing = MissingField.TIME
    elif not expression.has_date:
        missing = MissingField.DATE
    else:
        missing = None

    scheduled_at_utc = None
    if missing is None:
        resolved = resolve_datetime(expression.phrase, reference, issuer_offset_minutes)
        scheduled_at_utc = resolved.utc_instant

    return NaturalLanguageParse(
        content=content,
        recipient=recipient,
        scheduled_at_utc=scheduled_at_utc,
        datetime_phrase=expression.phrase,
        missing=missing,
    )
