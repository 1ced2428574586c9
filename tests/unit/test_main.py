"""Unit tests for the main FastAPI application."""

import pytest
from fastapi.testclient import TestClient


@pytest.mark.unit
def test_app_creation():
    """Test that the FastAPI app can be created."""
    from chipization import __version__
    from chipization.main import app

    assert app is not None
    assert app.title == "Chipization Tracker"
    assert app.version == __version__


@pytest.mark.unit
def test_health_endpoint(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "chipization-tracker",
        "version": "1.0.0",
    }


@pytest.mark.unit
def test_ready_endpoint(client: TestClient):
    """Readiness probes the configured database."""
    response = client.get("/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True
    assert data["response_time_ms"] >= 0


@pytest.mark.unit
def test_root_endpoint(client: TestClient):
    """Test the root endpoint redirects to docs."""
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/docs"


@pytest.mark.unit
def test_openapi_lists_routes(client: TestClient):
    paths = client.get("/openapi.json").json()["paths"]

    for path in (
        "/registration",
        "/accounts/{account_id}",
        "/locations/{point_id}",
        "/animals/types/{type_id}",
        "/animals/search",
        "/animals/{animal_id}/types/{type_id}",
        "/animals/{animal_id}/locations/{point_id}",
    ):
        assert path in paths
