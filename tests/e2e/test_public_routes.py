"""End-to-end tests for health and announcements."""

from tests.factories import configure, run_seed
from tests.harness import create_client_fixture

e2e_client = create_client_fixture()


class TestPublicRoutes:
    def test_health(self, e2e_client):
        client, _ = e2e_client

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_announcement_banner(self, e2e_client):
        """Should expose the configured banner."""
        # Arrange
        client, container = e2e_client
        run_seed(
            client,
            container,
            configure,
            "announcements",
            bannerEnabled=True,
            bannerTitle="Maintenance",
            bannerTone="loud",
        )

        # Act
        response = client.get("/api/announcements")

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["enabled"] is True
        assert data["title"] == "Maintenance"
        assert data["tone"] == "info"
