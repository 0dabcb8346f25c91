"""End-to-end tests for the PayPal webhook endpoint."""

from donorlink.adapter.http import ScriptedTransport
from tests.factories import configure_paypal, run_seed
from tests.harness import create_client_fixture

e2e_client = create_client_fixture()


class TestWebhookFlow:
    def test_invalid_json(self, e2e_client):
        """Should reject bodies that are not JSON."""
        client, _ = e2e_client

        response = client.post(
            "/api/webhook/paypal",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "Validation"

    def test_non_object_body(self, e2e_client):
        client, _ = e2e_client

        response = client.post("/api/webhook/paypal", json=[1, 2])

        assert response.status_code == 400

    def test_invalid_signature(self, e2e_client):
        """Should answer 400 when PayPal rejects the signature."""
        # Arrange
        client, container = e2e_client
        run_seed(client, container, configure_paypal)
        transport = client.portal.call(container.get, ScriptedTransport)
        transport.add(200, {"access_token": "tok"}, method="POST", match="/v1/oauth2/token")
        transport.add(200, {"verification_status": "FAILURE"}, match="verify-webhook")

        # Act
        response = client.post(
            "/api/webhook/paypal",
            json={"id": "WH-1", "event_type": "BILLING.SUBSCRIPTION.CANCELLED"},
        )

        # Assert
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Webhook signature invalid"

    def test_acknowledges_verified_event(self, e2e_client):
        """Should acknowledge verified events even when nothing matches."""
        client, container = e2e_client
        run_seed(client, container, configure_paypal)
        transport = client.portal.call(container.get, ScriptedTransport)
        transport.add(200, {"access_token": "tok"}, method="POST", match="/v1/oauth2/token")
        transport.add(200, {"verification_status": "SUCCESS"}, match="verify-webhook")

        response = client.post(
            "/api/webhook/paypal",
            json={
                "id": "WH-2",
                "event_type": "BILLING.SUBSCRIPTION.CANCELLED",
                "resource": {"id": "I-UNKNOWN"},
            },
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
