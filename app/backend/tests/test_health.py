from fastapi.testclient import TestClient


def test_liveness_and_database_checks(client: TestClient) -> None:
    assert client.get("/api/v1/health").json() == {"status": "ok"}

    database = client.get("/api/v1/health/db")
    assert database.status_code == 200
    assert database.json()["database"] == "reachable"


def test_root_reports_service_name(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"service": "Employee Tracking Backend", "status": "running"}
