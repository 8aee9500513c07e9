# tests/unit/routes/conftest.py
"""API 契约测试专用 fixtures.

提供 test_client、内存 Jenkins 桩与项目成员数据.
"""

from __future__ import annotations

import pytest

from credbridge import create_app, db
from credbridge.constants import CredentialType
from credbridge.errors import JenkinsApiError
from credbridge.models.project_membership import ProjectMembership
from credbridge.services.jenkins.client import JENKINS_CLIENT_EXTENSION_KEY
from credbridge.settings import Settings
from credbridge.types.jenkins import JenkinsCredential

_TYPE_NAMES = {tag: name for name, tag in CredentialType.JENKINS_TYPE_NAMES.items()}


class StubJenkinsClient:
    """按 (folder, domain, id) 保存凭据的内存 Jenkins."""

    def __init__(self) -> None:
        self.credentials: dict[tuple[str, str, str], dict] = {}
        self.pages: dict[tuple[str, str, str], str] = {}
        self.calls: list[tuple[str, ...]] = []
        self.fail_with: dict[str, int] = {}

    def seed(self, folder: str, domain: str, credential_id: str, credential_type: str, **extra: str) -> None:
        self.credentials[(folder, domain, credential_id)] = {
            "type": credential_type,
            "payload": {"id": credential_id, **extra},
        }

    def _maybe_fail(self, operation: str) -> None:
        status = self.fail_with.get(operation)
        if status is not None:
            raise JenkinsApiError(f"Jenkins 返回错误状态码 {status}", status_code=status)

    def _to_credential(self, key: tuple[str, str, str]) -> JenkinsCredential:
        folder, domain, credential_id = key
        stored = self.credentials[key]
        return JenkinsCredential(
            id=credential_id,
            type_name=_TYPE_NAMES.get(stored["type"], stored["type"]),
            display_name=f"{credential_id} ({folder})",
            description=str(stored["payload"].get("description", "")),
            domain=domain,
        )

    def get_credential_in_folder(self, domain: str, credential_id: str, folder: str) -> JenkinsCredential:
        self.calls.append(("get", folder, domain, credential_id))
        self._maybe_fail("get")
        key = (folder, domain, credential_id)
        if key not in self.credentials:
            raise JenkinsApiError("Jenkins 返回错误状态码 404", status_code=404)
        return self._to_credential(key)

    def get_credentials_in_folder(self, domain: str, folder: str) -> list[JenkinsCredential]:
        self.calls.append(("list", folder, domain))
        self._maybe_fail("list")
        return [self._to_credential(key) for key in self.credentials if key[0] == folder and key[1] == domain]

    def get_credential_content_in_folder(self, domain: str, credential_id: str, folder: str) -> str:
        self.calls.append(("content", folder, domain, credential_id))
        return self.pages.get((folder, domain, credential_id), "")

    def create_credential_in_folder(self, domain: str, credential, folder: str) -> str:
        self.calls.append(("create", folder, domain, credential.id))
        self._maybe_fail("create")
        payload = credential.to_payload()
        self.credentials[(folder, domain, credential.id)] = {"type": _stapler_to_type(payload), "payload": payload}
        return credential.id

    def update_credential_in_folder(self, domain: str, credential_id: str, credential, folder: str) -> str:
        self.calls.append(("update", folder, domain, credential_id))
        self._maybe_fail("update")
        stored = self.credentials[(folder, domain, credential_id)]
        stored["payload"] = credential.to_payload()
        return credential_id

    def delete_credential_in_folder(self, domain: str, credential_id: str, folder: str) -> str:
        self.calls.append(("delete", folder, domain, credential_id))
        self._maybe_fail("delete")
        key = (folder, domain, credential_id)
        if key not in self.credentials:
            raise JenkinsApiError("Jenkins 返回错误状态码 404", status_code=404)
        del self.credentials[key]
        return credential_id


def _stapler_to_type(payload: dict) -> str:
    stapler = str(payload.get("stapler-class", ""))
    if "UsernamePassword" in stapler:
        return CredentialType.USERNAME_PASSWORD
    if "BasicSSHUserPrivateKey" in stapler:
        return CredentialType.SSH
    if "StringCredentials" in stapler:
        return CredentialType.SECRET_TEXT
    return CredentialType.KUBECONFIG


@pytest.fixture(scope="function")
def jenkins_stub() -> StubJenkinsClient:
    return StubJenkinsClient()


@pytest.fixture(scope="function")
def app(jenkins_stub):
    """创建测试应用实例,建表并写入项目成员."""
    settings = Settings.load()
    app = create_app(settings=settings)
    app.config["TESTING"] = True
    app.extensions[JENKINS_CLIENT_EXTENSION_KEY] = jenkins_stub

    with app.app_context():
        db.create_all()
        db.session.add_all(
            [
                ProjectMembership(project_id="proj-a", username="alice", role="owner"),
                ProjectMembership(project_id="proj-a", username="carol", role="maintainer"),
                ProjectMembership(project_id="proj-a", username="dave", role="developer"),
                ProjectMembership(project_id="proj-a", username="erin", role="owner", status="inactive"),
            ],
        )
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """创建测试客户端."""
    return app.test_client()


@pytest.fixture(scope="function")
def as_user():
    """构造网关透传身份的请求头."""

    def _headers(username: str) -> dict[str, str]:
        return {"X-Token-Username": username}

    return _headers
