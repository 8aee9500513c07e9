import pytest

from credbridge import db
from credbridge.models.project_credential import ProjectCredential
from credbridge.repositories.project_credentials_repository import ProjectCredentialsRepository

_BASE = "/api/v1/projects/proj-a/credentials"


def _create_body(credential_id: str = "deploy-key", **overrides) -> dict:
    body = {
        "type": "username_password",
        "domain": "",
        "content": {
            "id": credential_id,
            "username": "deployer",
            "password": "s3cret",
            "description": "部署账号",
        },
    }
    body.update(overrides)
    return body


def _ownership_rows(app) -> list[tuple[str, str, str, str]]:
    with app.app_context():
        return [
            (row.project_id, row.credential_id, row.domain, row.creator)
            for row in ProjectCredential.query.order_by(ProjectCredential.credential_id).all()
        ]


@pytest.mark.unit
def test_api_v1_project_credentials_requires_username_header(client) -> None:
    response = client.get(_BASE)

    assert response.status_code == 401
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"] is True
    assert payload["message_code"] == "AUTHENTICATION_REQUIRED"


@pytest.mark.unit
def test_api_v1_project_credentials_create_contract(app, client, jenkins_stub, as_user) -> None:
    response = client.post(_BASE, json=_create_body(), headers=as_user("alice"))

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["error"] is False
    assert payload["data"] == {"id": "deploy-key"}
    assert {"message", "timestamp"}.issubset(payload.keys())

    stored = jenkins_stub.credentials[("proj-a", "_", "deploy-key")]
    assert stored["payload"]["username"] == "deployer"
    assert stored["payload"]["scope"] == "GLOBAL"
    assert _ownership_rows(app) == [("proj-a", "deploy-key", "_", "alice")]


@pytest.mark.unit
def test_api_v1_project_credentials_create_then_retry_conflicts(app, client, jenkins_stub, as_user) -> None:
    body = _create_body(type="secret_text", content={"id": "token", "secret": "s3cret"})

    first = client.post(_BASE, json=body, headers=as_user("alice"))
    retry = client.post(_BASE, json=body, headers=as_user("alice"))

    assert first.status_code == 200
    assert first.get_json()["data"] == {"id": "token"}
    assert retry.status_code == 409
    assert _ownership_rows(app) == [("proj-a", "token", "_", "alice")]


@pytest.mark.unit
def test_api_v1_project_credentials_create_rejects_non_object_body(app, client, jenkins_stub, as_user) -> None:
    response = client.post(_BASE, data="not-json", content_type="application/json", headers=as_user("alice"))

    assert response.status_code == 400
    assert response.get_json()["message_code"] == "JSON_REQUIRED"
    assert jenkins_stub.calls == []


@pytest.mark.unit
def test_api_v1_project_credentials_create_rejects_developer(app, client, jenkins_stub, as_user) -> None:
    response = client.post(_BASE, json=_create_body(), headers=as_user("dave"))

    assert response.status_code == 403
    payload = response.get_json()
    assert payload["message_code"] == "PROJECT_ROLE_REQUIRED"
    assert jenkins_stub.calls == []
    assert _ownership_rows(app) == []


@pytest.mark.unit
def test_api_v1_project_credentials_create_ignores_inactive_membership(client, jenkins_stub, as_user) -> None:
    response = client.post(_BASE, json=_create_body(), headers=as_user("erin"))

    assert response.status_code == 403
    assert jenkins_stub.calls == []


@pytest.mark.unit
def test_api_v1_project_credentials_platform_admin_bypasses_membership(app, client, as_user) -> None:
    response = client.post(_BASE, json=_create_body(), headers=as_user("admin"))

    assert response.status_code == 200
    assert _ownership_rows(app) == [("proj-a", "deploy-key", "_", "admin")]


@pytest.mark.unit
def test_api_v1_project_credentials_create_rejects_unknown_type(client, jenkins_stub, as_user) -> None:
    response = client.post(_BASE, json=_create_body(type="certificate"), headers=as_user("alice"))

    assert response.status_code == 400
    assert response.get_json()["message_code"] == "CREDENTIAL_TYPE_UNSUPPORTED"
    assert jenkins_stub.calls == []


@pytest.mark.unit
def test_api_v1_project_credentials_create_rejects_malformed_content(client, jenkins_stub, as_user) -> None:
    body = _create_body()
    body["content"] = {"id": "deploy-key", "username": "deployer"}

    response = client.post(_BASE, json=body, headers=as_user("alice"))

    assert response.status_code == 400
    assert "password" in response.get_json()["message"]
    assert jenkins_stub.calls == []


@pytest.mark.unit
def test_api_v1_project_credentials_create_conflict_when_id_used(app, client, jenkins_stub, as_user) -> None:
    jenkins_stub.seed("proj-a", "_", "deploy-key", "secret_text")

    response = client.post(_BASE, json=_create_body(), headers=as_user("carol"))

    assert response.status_code == 409
    payload = response.get_json()
    assert payload["message"] == "credential id [deploy-key] has been used"
    assert ("create", "proj-a", "_", "deploy-key") not in jenkins_stub.calls
    assert _ownership_rows(app) == []


@pytest.mark.unit
def test_api_v1_project_credentials_create_lookup_failure_is_bad_request(client, jenkins_stub, as_user) -> None:
    jenkins_stub.fail_with["get"] = 500

    response = client.post(_BASE, json=_create_body(), headers=as_user("alice"))

    assert response.status_code == 400
    assert ("create", "proj-a", "_", "deploy-key") not in jenkins_stub.calls


@pytest.mark.unit
def test_api_v1_project_credentials_create_passes_remote_status_through(app, client, jenkins_stub, as_user) -> None:
    jenkins_stub.fail_with["create"] = 403

    response = client.post(_BASE, json=_create_body(), headers=as_user("alice"))

    assert response.status_code == 403
    assert response.get_json()["message_code"] == "JENKINS_REQUEST_FAILED"
    assert _ownership_rows(app) == []


@pytest.mark.unit
def test_api_v1_project_credentials_create_store_failure_keeps_remote(
    app,
    client,
    jenkins_stub,
    as_user,
    monkeypatch,
) -> None:
    from sqlalchemy.exc import OperationalError

    def _fail_add(self, record):  # noqa: ARG001
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(ProjectCredentialsRepository, "add", _fail_add)

    response = client.post(_BASE, json=_create_body(), headers=as_user("alice"))

    assert response.status_code == 500
    assert response.get_json()["message_code"] == "CREDENTIAL_OWNERSHIP_WRITE_FAILED"
    assert ("proj-a", "_", "deploy-key") in jenkins_stub.credentials
    assert _ownership_rows(app) == []


@pytest.mark.unit
def test_api_v1_project_credentials_update_contract(app, client, jenkins_stub, as_user) -> None:
    jenkins_stub.seed("proj-a", "_", "api-token", "secret_text", secret="old")

    response = client.put(
        f"{_BASE}/api-token",
        json={"type": "kubeconfig", "content": {"id": "other-id", "secret": "new", "description": "轮换"}},
        headers=as_user("carol"),
    )

    assert response.status_code == 200
    assert response.get_json()["data"] == {"id": "api-token"}
    stored = jenkins_stub.credentials[("proj-a", "_", "api-token")]["payload"]
    assert stored["id"] == "api-token"
    assert stored["secret"] == "new"
    assert stored["description"] == "轮换"
    assert _ownership_rows(app) == []


@pytest.mark.unit
def test_api_v1_project_credentials_update_missing_remote_is_not_found(client, as_user) -> None:
    response = client.put(
        f"{_BASE}/missing",
        json={"content": {"secret": "new"}},
        headers=as_user("alice"),
    )

    assert response.status_code == 404


@pytest.mark.unit
def test_api_v1_project_credentials_update_validates_content_against_remote_type(
    client,
    jenkins_stub,
    as_user,
) -> None:
    jenkins_stub.seed("proj-a", "_", "ssh-key", "ssh", username="git")

    response = client.put(
        f"{_BASE}/ssh-key",
        json={"content": {"username": "git"}},
        headers=as_user("alice"),
    )

    assert response.status_code == 400
    assert ("update", "proj-a", "_", "ssh-key") not in jenkins_stub.calls


@pytest.mark.unit
def test_api_v1_project_credentials_update_rejects_unsupported_remote_type(client, jenkins_stub, as_user) -> None:
    jenkins_stub.seed("proj-a", "_", "cert", "Certificate")

    response = client.put(f"{_BASE}/cert", json={"content": {}}, headers=as_user("alice"))

    assert response.status_code == 400
    assert response.get_json()["message_code"] == "CREDENTIAL_TYPE_UNSUPPORTED"


@pytest.mark.unit
def test_api_v1_project_credentials_get_contract(app, client, jenkins_stub, as_user) -> None:
    client.post(_BASE, json=_create_body(), headers=as_user("alice"))

    response = client.get(f"{_BASE}/deploy-key", headers=as_user("carol"))

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["id"] == "deploy-key"
    assert data["type"] == "username_password"
    assert data["domain"] == "_"
    assert data["creator"] == "alice"
    assert "create_time" in data
    assert data["content"] is None
    assert ("content", "proj-a", "_", "deploy-key") not in jenkins_stub.calls


@pytest.mark.unit
def test_api_v1_project_credentials_get_scrapes_content_without_secrets(client, jenkins_stub, as_user) -> None:
    jenkins_stub.seed("proj-a", "_", "deploy-key", "username_password", description="部署账号")
    jenkins_stub.pages[("proj-a", "_", "deploy-key")] = (
        "<form>"
        '<input name="_.id" type="text" value="deploy-key"/>'
        '<input name="_.description" value="部署账号"/>'
        '<input name="_.username" value="deployer"/>'
        '<input name="_.password" type="password" value="s3cret"/>'
        "</form>"
    )

    response = client.get(f"{_BASE}/deploy-key?content=1", headers=as_user("alice"))

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert "creator" not in data
    assert data["content"] == {"id": "deploy-key", "description": "部署账号", "username": "deployer"}
    assert "s3cret" not in response.get_data(as_text=True)


@pytest.mark.unit
def test_api_v1_project_credentials_get_missing_remote_is_not_found(client, as_user) -> None:
    response = client.get(f"{_BASE}/missing", headers=as_user("alice"))

    assert response.status_code == 404
    assert response.get_json()["message_code"] == "JENKINS_REQUEST_FAILED"


@pytest.mark.unit
def test_api_v1_project_credentials_list_joins_ownership(app, client, jenkins_stub, as_user) -> None:
    client.post(_BASE, json=_create_body("created-here"), headers=as_user("alice"))
    jenkins_stub.seed("proj-a", "_", "created-in-jenkins", "secret_text")
    jenkins_stub.seed("proj-b", "_", "other-project", "secret_text")

    response = client.get(_BASE, headers=as_user("carol"))

    assert response.status_code == 200
    items = {item["id"]: item for item in response.get_json()["data"]}
    assert set(items) == {"created-here", "created-in-jenkins"}
    assert items["created-here"]["creator"] == "alice"
    assert "creator" not in items["created-in-jenkins"]


@pytest.mark.unit
def test_api_v1_project_credentials_list_rejects_non_member(client, jenkins_stub, as_user) -> None:
    response = client.get(_BASE, headers=as_user("mallory"))

    assert response.status_code == 403
    assert jenkins_stub.calls == []


@pytest.mark.unit
def test_api_v1_project_credentials_delete_contract(app, client, jenkins_stub, as_user) -> None:
    client.post(_BASE, json=_create_body(domain="ops"), headers=as_user("alice"))

    response = client.delete(f"{_BASE}/deploy-key", json={"domain": "ops"}, headers=as_user("alice"))

    assert response.status_code == 200
    assert response.get_json()["data"] == {"id": "deploy-key"}
    assert ("proj-a", "ops", "deploy-key") not in jenkins_stub.credentials
    assert _ownership_rows(app) == []


@pytest.mark.unit
def test_api_v1_project_credentials_delete_without_body_uses_default_domain(app, client, jenkins_stub, as_user) -> None:
    jenkins_stub.seed("proj-a", "_", "orphan", "secret_text")

    response = client.delete(f"{_BASE}/orphan", headers=as_user("alice"))

    assert response.status_code == 200
    assert ("delete", "proj-a", "_", "orphan") in jenkins_stub.calls


@pytest.mark.unit
def test_api_v1_project_credentials_delete_passes_remote_status_through(app, client, as_user) -> None:
    with app.app_context():
        db.session.add(ProjectCredential(project_id="proj-a", credential_id="gone", domain="_", creator="alice"))
        db.session.commit()

    response = client.delete(f"{_BASE}/gone", json={}, headers=as_user("alice"))

    assert response.status_code == 404
    assert _ownership_rows(app) == [("proj-a", "gone", "_", "alice")]
