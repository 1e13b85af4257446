from dlv_api.database import get_db
from dlv_api.main import app


class _BrokenSession:
    def query(self, *args, **kwargs):
        raise RuntimeError("database unavailable")

    def rollback(self):
        pass


def test_health_reports_connected_database(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["database"] == "connected"
    assert payload["service"] == "dlv-burundi-backend"
    assert payload["environment"] == "development"
    assert payload["uptime"] >= 0


def test_detailed_health(client):
    response = client.get("/api/health/detailed")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["checks"] == {
        "citizens_table": True,
        "auth_sessions_table": True,
        "license_applications_table": True,
        "database": True,
    }


def test_health_degrades_when_database_fails(client):
    app.dependency_overrides[get_db] = lambda: _BrokenSession()
    try:
        basic = client.get("/api/health")
        assert basic.status_code == 503
        assert basic.json()["database"] == "disconnected"
        assert basic.json()["database_error"] == "database unavailable"

        detailed = client.get("/api/health/detailed")
        assert detailed.status_code == 503
        assert detailed.json()["status"] == "degraded"
        assert detailed.json()["checks"]["database"] is False
    finally:
        app.dependency_overrides.pop(get_db, None)
