"""Application-level behavior: health, error envelopes and rate limiting."""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from kingdom_hospital import __version__


@pytest.mark.integration
class TestHealth:
    def test_healthy(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data == {"status": "healthy", "database": "ok", "version": __version__}

    def test_database_unreachable(self, client, monkeypatch):
        broken = Mock()
        broken.execute.side_effect = SQLAlchemyError("connection refused")
        monkeypatch.setattr(
            "kingdom_hospital.controllers.health_controller.SessionLocal", lambda: broken
        )

        response = client.get("/api/health")

        assert response.status_code == 503
        assert response.get_json()["data"]["status"] == "degraded"
        broken.close.assert_called_once()


@pytest.mark.integration
class TestErrorEnvelope:
    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.get_json() == {"success": False, "message": "Resource not found"}

    def test_method_not_allowed(self, client):
        response = client.patch("/api/doctors")

        assert response.status_code == 405
        assert response.get_json()["success"] is False


@pytest.mark.integration
def test_write_rate_limit(fresh_database, monkeypatch):
    from kingdom_hospital.core.limiter_config import limiter
    from kingdom_hospital.main import create_app

    monkeypatch.setenv("RATE_LIMIT_ENABLED", "1")
    monkeypatch.setenv("SEED_ON_STARTUP", "false")
    app = create_app()
    client = app.test_client()
    limiter.reset()
    try:
        statuses = [
            client.post("/api/specialties", json={"name": f"Specialty {i}"}).status_code
            for i in range(31)
        ]
    finally:
        limiter.reset()

    assert statuses[:30] == [201] * 30
    assert statuses[30] == 429
