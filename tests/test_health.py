"""
Test health checks and fallback routes.
"""


class TestHealth:
    def test_health_is_public(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"]["status"] == "healthy"
        assert "chatSubscribers" in body

    def test_root_info(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"


class TestFallbacks:
    def test_unknown_api_route(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"message": "Route introuvable"}

    def test_unknown_path(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.text == "Not found"

    def test_security_headers(self, client):
        response = client.get("/api/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
