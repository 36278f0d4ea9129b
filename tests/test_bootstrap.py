"""Tests for application wiring."""

from unittest.mock import MagicMock, patch

from starlette.testclient import TestClient

from bootstrap import build_production_services, build_services, create_app
from core.config import SchedulerConfig
from core.services.dispatch_worker import DispatchLock
from core.services.job_store import PostgresJobStore
from core.services.view_stats_store import ViewStatsStore


class TestBuildServices:

    def test_shares_store_and_bus(self, store, transport, view_stats, config):
        services = build_services(store, transport, view_stats, config)

        assert services.worker.store is store
        assert services.inbound.conversations.store is store
        assert services.worker.event_bus is services.event_bus
        assert services.dispatcher.interval_seconds == config.dispatch_interval_seconds

    def test_defaults(self, store, transport, view_stats):
        services = build_services(store, transport, view_stats)
        assert services.config == SchedulerConfig()


class TestCreateApp:

    def test_lifespan_starts_and_stops_dispatcher(self, store, transport, view_stats, config):
        services = build_services(store, transport, view_stats, config)
        app = create_app(services)

        with TestClient(app):
            assert services.dispatcher.running is True

        assert services.dispatcher.running is False

    def test_dispatcher_can_be_disabled(self, store, transport, view_stats, config):
        services = build_services(store, transport, view_stats, config)

        with TestClient(create_app(services, run_dispatcher=False)):
            assert services.dispatcher.running is False


class TestProductionWiring:

    def test_clients_built_from_vault_secrets(self):
        with patch("clients.vault_client.get_database_url", return_value="postgres://db"), \
             patch("clients.vault_client.get_valkey_url", return_value="redis://cache"), \
             patch("clients.vault_client.get_transport_config", return_value={
                 "gateway_url": "https://gw", "api_key": "k", "hmac_secret": "s",
             }), \
             patch("clients.postgres_client.PostgresClient") as postgres_cls, \
             patch("clients.valkey_client.ValkeyClient") as valkey_cls:
            services = build_production_services()

        postgres_cls.assert_called_once_with("postgres://db")
        valkey_cls.assert_called_once_with("redis://cache")
        assert isinstance(services.store, PostgresJobStore)
        postgres_cls.return_value.execute.assert_called_once()
        assert isinstance(services.inbound.views.view_stats, ViewStatsStore)
        assert isinstance(services.worker.lock, DispatchLock)
        assert services.worker.transport.gateway_url == "https://gw"
