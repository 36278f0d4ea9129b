"""
Date/time phrase resolution.

Turns a short phrase typed by the issuer ("mañana 15:45", "2024-12-25 10:30",
"próximo lunes 08:00", "09:30") into a UTC instant. The phrase is read as
wall-clock time at the issuer's fixed UTC offset and resolved forward only:
a bare time that already passed today means the same time tomorrow.

Grammar (case-insensitive, Spanish and English keywords):

    phrase   := date [time] | time [date]
    date     := YYYY-MM-DD
              | hoy | today | mañana | tomorrow | pasado mañana
              | ayer | yesterday
              | [próximo | next | el | este | this] <weekday>
    time     := [a las | at] H:MM | HH:MM       (00:00 - 23:59, or 24:00)

A date without a time is read at 12:00. "24:00" is midnight at the start of
the day the rest of the phrase names, so "mañana 24:00" == "mañana 00:00" and
a bare "24:00" rolls to tomorrow.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from core.exceptions import DateTimeError, DateTimeErrorKind
from utils.timezone import local_to_utc, to_offset, to_utc

IMPLIED_TIME = time(12, 0)

_WEEKDAYS = {
    "lunes": 0, "monday": 0,
    "martes": 1, "tuesday": 1,
    "miércoles": 2, "miercoles": 2, "wednesday": 2,
    "jueves": 3, "thursday": 3,
    "viernes": 4, "friday": 4,
    "sábado": 5, "sabado": 5, "saturday": 5,
    "domingo": 6, "sunday": 6,
}
_RELATIVEDELTA_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)

_RELATIVE_DAYS = {
    "hoy": 0, "today": 0,
    "mañana": 1, "manana": 1, "tomorrow": 1,
    "pasado mañana": 2, "pasado manana": 2,
    "ayer": -1, "yesterday": -1,
}

_DATE = (
    r"(?:(?P<iso>\d{4}-\d{2}-\d{2})"
    r"|(?P<relative>pasado\s+ma[ñn]ana|ma[ñn]ana|hoy|ayer|today|tomorrow|yesterday)"
    r"|(?:(?:pr[óo]xim[oa]|next|el|este|this)\s+)?"
    r"(?P<weekday>" + "|".join(sorted(_WEEKDAYS, key=len, reverse=True)) + r"))"
)
_TIME = r"(?:(?:a\s+las|a\s+la|at)\s+)?(?P<hour>\d{1,2}):(?P<minute>\d{2})"

_FLAGS = re.IGNORECASE
_DATE_FIRST = re.compile(rf"{_DATE}(?:\s+{_TIME})?", _FLAGS)
_TIME_FIRST = re.compile(rf"{_TIME}(?:\s+{_DATE})?", _FLAGS)

# Used when scanning free text: parts may sit anywhere in the sentence.
_DATE_PART = re.compile(rf"(?<!\w){_DATE}(?!\w)", _FLAGS)
_TIME_PART = re.compile(rf"(?<![\w:]){_TIME}(?![\w:])", _FLAGS)

_CLOCK = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})(?!\d)")
_NEGATIVE_TIME = re.compile(r"-\s*\d{1,2}:\d{2}")


@dataclass(frozen=True)
class ResolvedDateTime:
    utc_instant: datetime
    original_phrase: str
    issuer_offset_minutes: int


@dataclass(frozen=True)
class DateTimeExpression:
    """Date and/or time parts found inside free text."""

    phrase: str  # Parts joined as "<date> <time>", ready for resolve_datetime
    spans: tuple[tuple[int, int], ...]
    has_date: bool
    has_time: bool

    def remove_from(self, text: str) -> str:
        """Return text with the matched parts cut out."""
        for start, end in sorted(self.spans, reverse=True):
            text = text[:start] + " " + text[end:]
        return text


def _is_valid_clock(hour: int, minute: int) -> bool:
    if hour == 24:
        return minute == 0
    return 0 <= hour <= 23 and 0 <= minute <= 59


def _normalize(phrase: str) -> str:
    return " ".join(phrase.split())


def _resolve_day(match: re.Match, today: date) -> date | None:
    """Calendar day named by the date part of a match, None for a bare time."""
    if match.group("iso"):
        return date.fromisoformat(match.group("iso"))

    relative = match.group("relative")
    if relative:
        key = " ".join(relative.lower().split())
        return today + timedelta(days=_RELATIVE_DAYS[key])

    weekday = match.group("weekday")
    if weekday:
        target = _RELATIVEDELTA_WEEKDAYS[_WEEKDAYS[weekday.lower()]]
        # Next occurrence strictly after today: 1 to 7 days ahead.
        return today + relativedelta(days=+1, weekday=target)

    return None


def _resolve_local(match: re.Match, local_now: datetime) -> datetime:
    """
    Wall-clock datetime named by a full-phrase match.

    Raises:
        ValueError: If the ISO date is not a real calendar date
    """
    day = _resolve_day(match, local_now.date())

    if match.group("hour") is not None:
        clock = time(int(match.group("hour")), int(match.group("minute")))
    else:
        clock = IMPLIED_TIME

    if day is not None:
        return datetime.combine(day, clock)

    candidate = datetime.combine(local_now.date(), clock)
    if candidate <= local_now:
        candidate += timedelta(days=1)
    return candidate


def has_negative_time(text: str) -> bool:
    """A minus sign right before a clock time, as in "-1:00" or "- 3:30"."""
    return _NEGATIVE_TIME.search(text) is not None


def _match_phrase(phrase: str) -> re.Match | None:
    return _DATE_FIRST.fullmatch(phrase) or _TIME_FIRST.fullmatch(phrase)


def resolve_datetime(phrase: str, reference: datetime, issuer_offset_minutes: int) -> ResolvedDateTime:
    """
    Resolve a date/time phrase to a UTC instant strictly after `reference`.

    Args:
        phrase: Date/time phrase as typed by the issuer
        reference: Aware instant the phrase is relative to (usually "now")
        issuer_offset_minutes: Issuer's fixed UTC offset, e.g. -240

    Returns:
        ResolvedDateTime with the UTC instant

    Raises:
        DateTimeError: INVALID_HOUR for negative or out-of-range clock times,
            INVALID_FORMAT when the phrase is outside the grammar,
            PAST_DATE when the instant is not after `reference`
    """
    reference = to_utc(reference)
    text = _normalize(phrase)

    if has_negative_time(text):
        raise DateTimeError(DateTimeErrorKind.INVALID_HOUR, phrase)

    clock = _CLOCK.search(text)
    if clock:
        hour, minute = int(clock.group(1)), int(clock.group(2))
        if not _is_valid_clock(hour, minute):
            raise DateTimeError(DateTimeErrorKind.INVALID_HOUR, phrase)
        if hour == 24:
            text = text[:clock.start()] + "00:00" + text[clock.end():]

    match = _match_phrase(text)
    if match is None:
        raise DateTimeError(DateTimeErrorKind.INVALID_FORMAT, phrase)

    local_now = to_offset(reference, issuer_offset_minutes).replace(tzinfo=None)
    try:
        local = _resolve_local(match, local_now)
    except ValueError:
        raise DateTimeError(DateTimeErrorKind.INVALID_FORMAT, phrase)

    utc_instant = local_to_utc(local, issuer_offset_minutes)
    if utc_instant <= reference:
        raise DateTimeError(DateTimeErrorKind.PAST_DATE, phrase)

    return ResolvedDateTime(
        utc_instant=utc_instant,
        original_phrase=phrase,
        issuer_offset_minutes=issuer_offset_minutes,
    )


def find_datetime_expression(text: str) -> DateTimeExpression | None:
    """
    Locate the first date part and the first time part anywhere in free text.

    Returns None when neither is present. The returned phrase is not
    validated; pass it to resolve_datetime for that.
    """
    date_match = _DATE_PART.search(text)
    time_match = _TIME_PART.search(text)

    if date_match is None and time_match is None:
        return None

    parts = []
    spans = []
    if date_match is not None:
        parts.append(date_match.group(0))
        spans.append(date_match.span())
    if time_match is not None:
        if date_match is not None and _overlaps(date_match.span(), time_match.span()):
            time_match = None
        else:
            parts.append(time_match.group(0))
            spans.append(time_match.span())

    return DateTimeExpression(
        phrase=" ".join(parts),
        spans=tuple(spans),
        has_date=date_match is not None,
        has_time=time_match is not None,
    )


def _overlaps(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return a[0] < b[1] and b[0] < a[1]
