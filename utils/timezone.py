"""UTC-everywhere time handling. Issuer wall-clock only exists at the edges."""

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def fixed_offset(offset_minutes: int) -> timezone:
    """
    Fixed-offset tzinfo for an issuer UTC offset in minutes (e.g. -240).

    Raises ValueError if the offset is outside +/- 24 hours.
    """
    if not -1440 < offset_minutes < 1440:
        raise ValueError(f"UTC offset out of range: {offset_minutes} minutes")
    return timezone(timedelta(minutes=offset_minutes))


def to_offset(dt: datetime, offset_minutes: int) -> datetime:
    """
    Convert UTC datetime to the issuer's fixed offset for display.

    ONLY use this at display boundaries - when rendering for humans.
    All internal operations should remain in UTC.

    Raises:
        ValueError: If datetime is naive or the offset is out of range
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime. Datetime must be timezone-aware."
        )
    return dt.astimezone(fixed_offset(offset_minutes))


def local_to_utc(local: datetime, offset_minutes: int) -> datetime:
    """Interpret a naive wall-clock datetime at a fixed offset and return it in UTC."""
    if local.tzinfo is not None:
        raise ValueError("Expected a naive wall-clock datetime")
    return local.replace(tzinfo=fixed_offset(offset_minutes)).astimezone(timezone.utc)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Raises ValueError if string has no timezone info.
    """
    s = iso_string.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return to_utc(dt)
