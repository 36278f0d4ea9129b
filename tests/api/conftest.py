"""API test fixtures: the full app over in-memory services, dispatcher off."""

import pytest
from starlette.testclient import TestClient

from bootstrap import build_services, create_app


@pytest.fixture
def services(store, transport, view_stats, config, event_bus):
    return build_services(store, transport, view_stats, config, event_bus=event_bus)


@pytest.fixture
def app(services):
    return create_app(services, run_dispatcher=False)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def schedule(client, owner):
    """Schedule one message through the inbound endpoint; returns the reply."""

    def _schedule(text: str = "Feliz Navidad", owner_id: str = owner) -> str:
        response = client.post("/api/inbound", json={
            "owner_id": owner_id,
            "text": f"/schedule +1234567890 $2099-12-25 10:30$ ${text}$",
        })
        assert response.status_code == 200
        return response.json()["data"]["reply"]

    return _schedule
