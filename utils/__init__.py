"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, to_offset, local_to_utc, fixed_offset, parse_iso
from utils.periodic import PeriodicTask
