"""
Valkey (Redis-compatible) client for view statistics and the dispatch lock.

Thin wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import logging

import redis

logger = logging.getLogger(__name__)

# Delete only if the key still holds our token, so an expired lock taken
# over by another process is never released by us.
_COMPARE_AND_DELETE = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_if_absent("lock:dispatch", token, expire_seconds=300)
        client.hincrby("viewstats:+5691234", "total_views", 1)
    """

    def __init__(self, url: str):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        self._compare_and_delete = self._client.register_script(_COMPARE_AND_DELETE)
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """
        Health check.

        Raises redis.ConnectionError if unreachable.
        """
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """Get value by key. None if the key doesn't exist."""
        return self._client.get(key)

    def set_if_absent(self, key: str, value: str, expire_seconds: int) -> bool:
        """
        SET NX EX.

        Returns True if the key was set, False if it already existed.
        """
        return bool(self._client.set(key, value, nx=True, ex=expire_seconds))

    def delete(self, key: str) -> bool:
        """True if the key existed and was deleted."""
        return self._client.delete(key) > 0

    def delete_if_equals(self, key: str, value: str) -> bool:
        """Atomically delete key only while it still holds value."""
        return bool(self._compare_and_delete(keys=[key], args=[value]))

    def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        """Increment a hash field, creating it at 0. Returns the new value."""
        return self._client.hincrby(key, field, amount)

    def hset(self, key: str, mapping: dict[str, str | int]) -> None:
        """Set several hash fields at once."""
        self._client.hset(key, mapping=mapping)

    def hgetall(self, key: str) -> dict[str, str]:
        """All fields of a hash. Empty dict if the key doesn't exist."""
        return self._client.hgetall(key)

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
