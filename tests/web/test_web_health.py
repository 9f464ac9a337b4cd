"""Tests for health endpoint."""

from staarkids import __version__


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_returns_version_and_timestamp(self, client):
        data = client.get("/health").json()

        assert data["version"] == __version__
        # ISO format check
        assert "T" in data["timestamp"]
