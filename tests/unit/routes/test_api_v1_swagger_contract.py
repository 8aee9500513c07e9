import pytest


@pytest.mark.unit
def test_api_v1_swagger_json_renders(client) -> None:
    response = client.get("/api/v1/swagger.json")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload.get("swagger") == "2.0"
    assert "/projects/{project_id}/credentials" in payload["paths"]
    assert "/projects/{project_id}/credentials/{credential_id}" in payload["paths"]


@pytest.mark.unit
def test_api_v1_openapi_json_matches_swagger(client) -> None:
    response = client.get("/api/v1/openapi.json")
    assert response.status_code == 200
    assert "/health/ping" in response.get_json()["paths"]


@pytest.mark.unit
def test_api_v1_root_lists_discovery_urls(client) -> None:
    response = client.get("/api/v1/")
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["openapi_url"] == "/api/v1/openapi.json"
    assert data["health_ping_url"] == "/api/v1/health/ping"
