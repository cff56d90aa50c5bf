from fastapi.testclient import TestClient
from app.main import app
import pytest

client = TestClient(app, raise_server_exceptions=False)

def test_404_not_found():
    response = client.get("/non-existent-route")
    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert "code" in data
    assert data["code"] == "HTTP_ERROR"

def test_405_method_not_allowed():
    # The webhook only accepts GET and POST
    response = client.put("/webhook")
    assert response.status_code == 405
    assert response.json()["code"] == "HTTP_ERROR"

def test_validation_error_structure():
    # We can define a temporary route to test validation
    from pydantic import BaseModel

    class Item(BaseModel):
        name: str
        price: int

    @app.post("/test-validation")
    def create_item(item: Item):
        return item

    response = client.post("/test-validation", json={"name": "foo", "price": "invalid"})
    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert "details" in data
    assert len(data["details"]) > 0

def test_custom_exception():
    from app.core.exceptions import ConfigurationError

    @app.get("/test-custom-error")
    def trigger_custom_error():
        raise ConfigurationError(message="GOOGLE_SHEET_ID is not set")

    response = client.get("/test-custom-error")
    assert response.status_code == 500
    data = response.json()
    assert data["code"] == "CONFIGURATION_ERROR"
    assert data["error"] == "GOOGLE_SHEET_ID is not set"

def test_persistence_error_maps_to_502():
    from app.core.exceptions import PersistenceError

    @app.get("/test-persistence-error")
    def trigger_persistence_error():
        raise PersistenceError("Sheets unavailable")

    response = client.get("/test-persistence-error")
    assert response.status_code == 502
    assert response.json()["code"] == "PERSISTENCE_ERROR"

def test_unhandled_exception():
    @app.get("/test-unhandled-error")
    def trigger_unhandled_error():
        raise RuntimeError("boom")

    response = client.get("/test-unhandled-error")
    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"
