"""
Listing an owner's pending scheduled messages, one page at a time.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from core.models import ScheduledJob, ViewStats
from core.responses import (
    ERROR_FETCHING_MESSAGES,
    INVALID_VIEW_REQUEST,
    MORE_MESSAGES_AVAILABLE,
    NO_MESSAGES,
    NO_MORE_MESSAGES,
    SHOWING_MESSAGES_HEADER,
    SHOWING_MORE_MESSAGES_HEADER,
    TOTAL_MESSAGES_SUMMARY,
    format_job_line,
)
from core.services.job_store import SchedulingStore
from core.view_parser import ViewRequest

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class ViewStatsRecorder(Protocol):
    def record_view(self, owner_id: str, offset: int) -> None: ...

    def get(self, owner_id: str) -> ViewStats | None: ...


@dataclass(frozen=True)
class Page:
    items: list[ScheduledJob]
    total: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total

    @property
    def remaining(self) -> int:
        return max(self.total - (self.offset + len(self.items)), 0)


class MessageViewPaginator:
    """Read-only pages of PENDING jobs, oldest scheduled first."""

    def __init__(self, store: SchedulingStore):
        self.store = store

    def page(self, owner_id: str, offset: int, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
        """
        One page of the owner's PENDING jobs.

        Raises:
            ValueError: Negative offset or non-positive page size
        """
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")

        total = self.store.count_pending(owner_id)
        items = self.store.list_pending_for_owner(owner_id, offset, page_size) if total else []
        return Page(items=items, total=total, offset=offset)


class MessageViewHandler:
    """Answers "ver mensajes" / "ver más" requests."""

    def __init__(
        self,
        paginator: MessageViewPaginator,
        view_stats: ViewStatsRecorder,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.paginator = paginator
        self.view_stats = view_stats
        self.page_size = page_size

    def _next_offset(self, owner_id: str) -> int:
        """Offset following the page the owner saw last; the second page if unknown."""
        try:
            stats = self.view_stats.get(owner_id)
        except Exception:
            logger.exception(f"Failed to read view stats for {owner_id}")
            stats = None
        last_offset = stats.last_offset if stats is not None else 0
        return last_offset + self.page_size

    def handle(self, owner_id: str, request: ViewRequest) -> str:
        """Format one page of pending messages for the owner. Never raises."""
        if not request.valid:
            return INVALID_VIEW_REQUEST

        offset = self._next_offset(owner_id) if request.is_more_request else 0

        try:
            page = self.paginator.page(owner_id, offset, self.page_size)
        except Exception:
            logger.exception(f"Failed to fetch pending messages for {owner_id} (offset={offset})")
            return ERROR_FETCHING_MESSAGES

        try:
            self.view_stats.record_view(owner_id, offset)
        except Exception:
            logger.exception(f"Failed to update view stats for {owner_id} (offset={offset})")

        if page.total == 0:
            return NO_MESSAGES

        if request.is_more_request and not page.items:
            return NO_MORE_MESSAGES

        return self._format(page, request.is_more_request)

    @staticmethod
    def _format(page: Page, is_more: bool) -> str:
        if is_more:
            header = SHOWING_MORE_MESSAGES_HEADER
        else:
            header = f"{SHOWING_MESSAGES_HEADER}\n{TOTAL_MESSAGES_SUMMARY.format(count=page.total)}"

        lines = [header, ""]
        lines.extend(
            format_job_line(page.offset + i, job)
            for i, job in enumerate(page.items, start=1)
        )
        if page.has_more:
            lines.extend(["", MORE_MESSAGES_AVAILABLE.format(count=page.remaining)])
        return "\n".join(lines)
