"""App wiring, health probes and the response envelopes."""

from __future__ import annotations


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["data_dir"]["status"] == "healthy"

    def test_live(self, client):
        assert client.get("/health/live").json()["status"] == "healthy"

    def test_ready(self, client):
        assert client.get("/health/ready").status_code == 200

    def test_ready_fails_without_data_dir(self, client, app, tmp_path):
        app.state.store.data_dir = tmp_path / "missing"
        resp = client.get("/health/ready")
        assert resp.status_code == 503
        assert resp.json()["status"] == "unhealthy"


class TestEnvelope:
    def test_request_id_header(self, client):
        resp = client.get("/api/vocabulary", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"

    def test_success_shape(self, client):
        body = client.get("/api/vocabulary").json()
        assert body["success"] is True
        assert "elapsed_ms" in body
        assert body["warnings"] == []

    def test_problem_shape(self, client):
        resp = client.get("/api/term/nope")
        assert resp.status_code == 404
        body = resp.json()
        assert body["success"] is False
        assert body["status"] == 404
        assert body["error"] == body["title"]
        assert body["type"] == "about:blank"

    def test_unknown_catalog_route(self, client):
        assert client.get("/api/glossary/files").status_code == 422

    def test_openapi_under_prefix(self, client):
        assert client.get("/api/openapi.json").status_code == 200
