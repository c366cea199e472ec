from fastapi.testclient import TestClient

from academy.main import app


def test_root_and_routes_are_mounted():
    client = TestClient(app)

    assert client.get("/").json() == {"message": "Welcome to Academy API!"}

    paths = set(client.get("/api/v1/openapi.json").json()["paths"])
    assert "/api/v1/users/login" in paths
    assert "/api/v1/formations/{formation_id}/parts/{part_id}/exam" in paths
    assert "/api/v1/progress/certificates/{part_id}" in paths


def test_protected_endpoint_requires_a_token():
    client = TestClient(app)
    response = client.get("/api/v1/users/me")
    assert response.status_code == 401
