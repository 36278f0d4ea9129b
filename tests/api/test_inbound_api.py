"""Tests for POST /api/inbound."""

from core.responses import INVALID_MESSAGE, NO_MESSAGES


class TestInbound:

    def test_schedule_command_reply(self, client, owner, store):
        response = client.post("/api/inbound", json={
            "owner_id": owner,
            "text": "/schedule +1234567890 $2099-12-25 10:30$ $Feliz Navidad$",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["data"]["reply"].startswith("✅ Mensaje programado con éxito")
        assert store.count_pending(owner) == 1

    def test_view_reply(self, client, owner):
        response = client.post("/api/inbound", json={"owner_id": owner, "text": "ver mensajes"})
        assert response.json()["data"]["reply"] == NO_MESSAGES

    def test_unrecognised_text_is_still_200(self, client, owner):
        response = client.post("/api/inbound", json={"owner_id": owner, "text": "hola"})

        assert response.status_code == 200
        assert response.json()["data"]["reply"] == INVALID_MESSAGE

    def test_request_id_flows_into_envelope(self, client, owner):
        response = client.post(
            "/api/inbound",
            json={"owner_id": owner, "text": "ver mensajes"},
            headers={"X-Request-ID": "gateway-7"},
        )

        assert response.headers["X-Request-ID"] == "gateway-7"
        assert response.json()["meta"]["request_id"] == "gateway-7"

    def test_missing_owner_is_validation_error(self, client):
        response = client.post("/api/inbound", json={"text": "hola"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    def test_oversized_text_rejected(self, client, owner):
        response = client.post("/api/inbound", json={"owner_id": owner, "text": "x" * 4001})
        assert response.status_code == 422
