class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    def test_api_info(self, client):
        data = client.get("/api/v1/info").json()
        assert data["endpoints"]["recommendations"] == "/api/v1/doctors/recommend"

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"
        assert response.json()["path"] == "/api/v1/nothing-here"
