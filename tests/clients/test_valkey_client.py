"""Tests for ValkeyClient against a mocked redis-py client."""

from unittest.mock import MagicMock, patch

import pytest
import redis

from clients.valkey_client import ValkeyClient


@pytest.fixture
def redis_mock():
    with patch("clients.valkey_client.redis.from_url") as from_url:
        client = MagicMock()
        from_url.return_value = client
        yield client


@pytest.fixture
def valkey(redis_mock):
    return ValkeyClient("redis://localhost:6379/0")


class TestInit:

    def test_connects_and_pings(self, redis_mock):
        ValkeyClient("redis://localhost:6379/0")
        redis_mock.ping.assert_called_once()

    def test_unreachable_server_fails_fast(self, redis_mock):
        redis_mock.ping.side_effect = redis.ConnectionError("refused")

        with pytest.raises(redis.ConnectionError):
            ValkeyClient("redis://localhost:6379/0")


class TestKeys:

    def test_set_if_absent_uses_nx_and_ex(self, valkey, redis_mock):
        redis_mock.set.return_value = True

        assert valkey.set_if_absent("lock", "token", 300) is True
        redis_mock.set.assert_called_once_with("lock", "token", nx=True, ex=300)

    def test_set_if_absent_when_key_exists(self, valkey, redis_mock):
        redis_mock.set.return_value = None
        assert valkey.set_if_absent("lock", "token", 300) is False

    def test_delete_reports_existence(self, valkey, redis_mock):
        redis_mock.delete.return_value = 1
        assert valkey.delete("k") is True

        redis_mock.delete.return_value = 0
        assert valkey.delete("k") is False

    def test_delete_if_equals_runs_compare_and_delete(self, valkey, redis_mock):
        script = redis_mock.register_script.return_value
        script.return_value = 1

        assert valkey.delete_if_equals("lock", "token") is True
        script.assert_called_once_with(keys=["lock"], args=["token"])

    def test_delete_if_equals_other_holder(self, valkey, redis_mock):
        redis_mock.register_script.return_value.return_value = 0
        assert valkey.delete_if_equals("lock", "token") is False


class TestHashes:

    def test_hincrby(self, valkey, redis_mock):
        redis_mock.hincrby.return_value = 4

        assert valkey.hincrby("viewstats:x", "total_views") == 4
        redis_mock.hincrby.assert_called_once_with("viewstats:x", "total_views", 1)

    def test_hset_passes_mapping(self, valkey, redis_mock):
        valkey.hset("viewstats:x", {"last_offset": 10})
        redis_mock.hset.assert_called_once_with("viewstats:x", mapping={"last_offset": 10})

    def test_hgetall(self, valkey, redis_mock):
        redis_mock.hgetall.return_value = {"total_views": "2"}
        assert valkey.hgetall("viewstats:x") == {"total_views": "2"}
