"""
Vault-backed secrets for the scheduler.

Connection strings for Postgres and Valkey and the send-gateway credentials
live under the KV v2 mount at `schedbot/<purpose>`. The process logs in with
AppRole once and refuses to start without its secrets.
"""

import logging
import os

import hvac
from hvac.exceptions import Forbidden, InvalidPath, Unauthorized

logger = logging.getLogger(__name__)

_SECRET_PREFIX = "schedbot"

# purpose -> fields read from schedbot/<purpose>
SECRET_FIELDS: dict[str, tuple[str, ...]] = {
    "database": ("url",),
    "valkey": ("url",),
    "transport": ("gateway_url", "api_key", "hmac_secret"),
}

_vault_client_instance: "VaultClient | None" = None
_secret_cache: dict[tuple[str, str], str] = {}


class VaultClient:
    """AppRole-authenticated reader for the scheduler's KV secrets."""

    def __init__(self, vault_addr: str | None = None, vault_namespace: str | None = None):
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        role_id = os.getenv("VAULT_ROLE_ID")
        secret_id = os.getenv("VAULT_SECRET_ID")

        if not self.vault_addr:
            raise ValueError("Set VAULT_ADDR to the Vault server holding the scheduler secrets")
        if not role_id or not secret_id:
            raise ValueError("Set VAULT_ROLE_ID and VAULT_SECRET_ID for the scheduler AppRole")

        options = {"url": self.vault_addr}
        if self.vault_namespace:
            options["namespace"] = self.vault_namespace
        self.client = hvac.Client(**options)

        self._login(role_id, secret_id)
        logger.info(f"Vault ready at {self.vault_addr}")

    def _login(self, role_id: str, secret_id: str) -> None:
        try:
            login = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
        except Exception as e:
            logger.error(f"Vault AppRole login rejected: {e}")
            raise PermissionError(f"Vault AppRole authentication failed: {e}") from e

        self.client.token = login["auth"]["client_token"]
        if not self.client.is_authenticated():
            raise PermissionError("Vault token not accepted after AppRole authentication")

    def read_secret(self, purpose: str) -> dict[str, str]:
        """
        All fields of `schedbot/<purpose>`.

        Raises:
            PermissionError: The secret is missing or this role may not read it.
        """
        path = f"{_SECRET_PREFIX}/{purpose}"
        try:
            version = self.client.secrets.kv.v2.read_secret_version(
                path=path, raise_on_deleted_version=True
            )
        except InvalidPath as e:
            logger.error(f"No secret at {path}")
            raise PermissionError(f"No secret at '{path}'") from e
        except (Unauthorized, Forbidden) as e:
            logger.error(f"Role may not read {path}: {e}")
            raise PermissionError(f"Role may not read '{path}': {e}") from e
        return version["data"]["data"]

    def get_secret(self, purpose: str, field: str) -> str:
        """One field of `schedbot/<purpose>`; KeyError names the field when absent."""
        values = self.read_secret(purpose)
        if field not in values:
            raise KeyError(
                f"'{field}' missing from {_SECRET_PREFIX}/{purpose} "
                f"(has: {', '.join(sorted(values))})"
            )
        return values[field]


def _vault() -> VaultClient:
    global _vault_client_instance
    if _vault_client_instance is None:
        _vault_client_instance = VaultClient()
    return _vault_client_instance


def _secret(purpose: str) -> dict[str, str]:
    """Fields of one purpose from SECRET_FIELDS, fetched once per process."""
    missing = [f for f in SECRET_FIELDS[purpose] if (purpose, f) not in _secret_cache]
    for field in missing:
        _secret_cache[(purpose, field)] = _vault().get_secret(purpose, field)
    return {f: _secret_cache[(purpose, f)] for f in SECRET_FIELDS[purpose]}


def get_database_url() -> str:
    return _secret("database")["url"]


def get_valkey_url() -> str:
    return _secret("valkey")["url"]


def get_transport_config() -> dict[str, str]:
    """gateway_url, api_key and hmac_secret for GatewayTransport."""
    return _secret("transport")
