"""Tests for view statistics stores."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from clients.valkey_client import ValkeyClient
from core.services.view_stats_store import InMemoryViewStatsStore, ViewStatsStore

VIEWED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def valkey():
    return Mock(spec=ValkeyClient)


class TestValkeyViewStats:

    def test_record_view_updates_hash(self, valkey, owner):
        ViewStatsStore(valkey).record_view(owner, 10, viewed_at=VIEWED_AT)

        key = f"viewstats:{owner}"
        valkey.hincrby.assert_called_once_with(key, "total_views", 1)
        valkey.hset.assert_called_once_with(key, {"last_offset": 10, "last_viewed_at": VIEWED_AT.isoformat()})

    def test_get_parses_hash(self, valkey, owner):
        valkey.hgetall.return_value = {
            "total_views": "3",
            "last_offset": "20",
            "last_viewed_at": VIEWED_AT.isoformat(),
        }

        stats = ViewStatsStore(valkey).get(owner)

        assert stats.owner_id == owner
        assert stats.total_views == 3
        assert stats.last_offset == 20
        assert stats.last_viewed_at == VIEWED_AT

    def test_get_unknown_owner(self, valkey, owner):
        valkey.hgetall.return_value = {}
        assert ViewStatsStore(valkey).get(owner) is None


class TestInMemoryViewStats:

    def test_counts_views_and_keeps_last_offset(self, view_stats, owner):
        view_stats.record_view(owner, 0)
        view_stats.record_view(owner, 10, viewed_at=VIEWED_AT)

        stats = view_stats.get(owner)
        assert stats.total_views == 2
        assert stats.last_offset == 10
        assert stats.last_viewed_at == VIEWED_AT

    def test_unknown_owner(self, view_stats, other_owner):
        assert view_stats.get(other_owner) is None
