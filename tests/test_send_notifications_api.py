"""Integration tests for the admin broadcast endpoint."""

import pytest
from conftest import make_tokens

from app.utils.user import create_access_token


@pytest.fixture
def registered(token_collection):
    def register(tokens):
        for i, token in enumerate(tokens):
            token_collection.docs.append(
                {"_id": i + 1, "token": token, "device": "ios", "owner": "user-1"}
            )
        return tokens

    return register


class TestSendNotifications:
    def test_no_tokens_makes_no_gateway_calls(self, client, admin_headers, gateway):
        response = client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {"message": "No tokens found"}
        assert gateway.batches == []

    def test_broadcasts_in_batches(self, client, admin_headers, gateway, registered):
        registered(make_tokens(250))

        response = client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=admin_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["sent_count"] == 250
        assert body["details"] == "Broadcast completed"
        assert body["failed_count"] == 0
        assert [len(batch) for batch in gateway.batches] == [100, 100, 50]

    def test_default_data_links_home(self, client, admin_headers, gateway, registered):
        registered(make_tokens(1))
        client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=admin_headers
        )
        assert gateway.batches[0][0]["data"] == {"screen": "Home"}

    def test_custom_data_is_forwarded(self, client, admin_headers, gateway, registered):
        registered(make_tokens(1))
        client.post(
            "/api/send-notifications",
            json={"title": "Hi", "body": "Test", "data": {"screen": "Events"}},
            headers=admin_headers,
        )
        assert gateway.batches[0][0]["data"] == {"screen": "Events"}

    def test_partial_failure_is_reported(self, client, admin_headers, gateway, registered):
        registered(make_tokens(250))
        gateway.fail_on = {2}

        response = client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=admin_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["sent_count"] == 250
        assert body["failed_count"] == 100
        assert body["details"] == "Broadcast completed with 1 failed batches"

    def test_dead_tokens_are_pruned(
        self, client, admin_headers, gateway, registered, token_collection
    ):
        tokens = registered(make_tokens(3))
        gateway.unregistered = {tokens[0]}

        response = client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=admin_headers
        )

        assert response.json()["pruned_count"] == 1
        assert [doc["token"] for doc in token_collection.docs] == tokens[1:]

    @pytest.mark.parametrize(
        "body", [{"title": "Hi"}, {"body": "Test"}, {"title": "", "body": "x"}]
    )
    def test_missing_title_or_body(self, client, admin_headers, body):
        response = client.post("/api/send-notifications", json=body, headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing title or body"}

    def test_requires_credentials(self, client):
        response = client.post("/api/send-notifications", json={"title": "Hi", "body": "Test"})
        assert response.status_code == 401

    def test_requires_admin_role(self, client, user_headers):
        response = client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=user_headers
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}

    def test_top_level_role_claim_is_accepted(self, client, gateway):
        token = create_access_token({"sub": "admin-2", "role": "admin"})
        response = client.post(
            "/api/send-notifications",
            json={"title": "Hi", "body": "Test"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200

    def test_store_failure_is_server_error(self, client, admin_headers, token_collection):
        token_collection.fail = True
        response = client.post(
            "/api/send-notifications", json={"title": "Hi", "body": "Test"}, headers=admin_headers
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send"}

    def test_non_json_body_is_server_error(self, client, admin_headers, gateway):
        response = client.post(
            "/api/send-notifications",
            content=b"title=Hi",
            headers={**admin_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send"}
        assert gateway.batches == []

    def test_wrongly_typed_data_is_server_error(self, client, admin_headers):
        response = client.post(
            "/api/send-notifications",
            json={"title": "Hi", "body": "Test", "data": ["screen"]},
            headers=admin_headers,
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send"}
