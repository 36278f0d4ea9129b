"""Per-owner message viewing statistics."""

from datetime import datetime

from pydantic import BaseModel


class ViewStats(BaseModel):
    """Counters updated on every successful pagination read."""

    owner_id: str
    total_views: int = 0
    last_offset: int = 0
    last_viewed_at: datetime | None = None
