"""Per-owner view statistics in a Valkey hash (`viewstats:<owner_id>`)."""

import logging
from datetime import datetime

from clients.valkey_client import ValkeyClient
from core.models import ViewStats
from utils.timezone import now_utc, parse_iso

logger = logging.getLogger(__name__)

_KEY_PREFIX = "viewstats:"


class ViewStatsStore:
    """Records every successful pagination read."""

    def __init__(self, valkey: ValkeyClient):
        self.valkey = valkey

    @staticmethod
    def _key(owner_id: str) -> str:
        return f"{_KEY_PREFIX}{owner_id}"

    def record_view(self, owner_id: str, offset: int, viewed_at: datetime | None = None) -> None:
        """Increment total_views and remember the offset just shown."""
        key = self._key(owner_id)
        viewed_at = viewed_at or now_utc()
        self.valkey.hincrby(key, "total_views", 1)
        self.valkey.hset(key, {"last_offset": offset, "last_viewed_at": viewed_at.isoformat()})

    def get(self, owner_id: str) -> ViewStats | None:
        """Stats for the owner, None if they never viewed."""
        data = self.valkey.hgetall(self._key(owner_id))
        if not data:
            return None
        last_viewed_at = data.get("last_viewed_at")
        return ViewStats(
            owner_id=owner_id,
            total_views=int(data.get("total_views", 0)),
            last_offset=int(data.get("last_offset", 0)),
            last_viewed_at=parse_iso(last_viewed_at) if last_viewed_at else None,
        )


class InMemoryViewStatsStore:
    """ViewStatsStore stand-in for single-process deployments and tests."""

    def __init__(self):
        self._stats: dict[str, ViewStats] = {}

    def record_view(self, owner_id: str, offset: int, viewed_at: datetime | None = None) -> None:
        current = self._stats.get(owner_id) or ViewStats(owner_id=owner_id)
        self._stats[owner_id] = current.model_copy(update={
            "total_views": current.total_views + 1,
            "last_offset": offset,
            "last_viewed_at": viewed_at or now_utc(),
        })

    def get(self, owner_id: str) -> ViewStats | None:
        return self._stats.get(owner_id)
