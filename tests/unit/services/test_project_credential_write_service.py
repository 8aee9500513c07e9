import pytest
from sqlalchemy.exc import IntegrityError

from credbridge.errors import (
    AuthorizationError,
    ConflictError,
    DatabaseError,
    JenkinsApiError,
    ValidationError,
)
from credbridge.models.project_credential import ProjectCredential
from credbridge.repositories.project_credentials_repository import ProjectCredentialsRepository
from credbridge.schemas.credentials import CredentialRequestPayload, DeleteCredentialPayload
from credbridge.services.credentials.project_credential_write_service import ProjectCredentialWriteService
from credbridge.services.jenkins.payloads import SshCredential
from credbridge.services.projects.project_access_service import ProjectAccessService
from credbridge.types.jenkins import JenkinsCredential


class _StubAccessService(ProjectAccessService):
    def __init__(self, *, allowed: bool = True) -> None:
        self._allowed = allowed
        self.checked: list[tuple[str, str, tuple[str, ...]]] = []

    def ensure_user_in_role(self, username, project_id, roles):
        self.checked.append((username, project_id, tuple(roles)))
        if not self._allowed:
            raise AuthorizationError(message_key="PROJECT_ROLE_REQUIRED")
        return "owner"


class _StubRepository(ProjectCredentialsRepository):
    def __init__(self, *, fail: bool = False, deleted: int = 1) -> None:
        self.added: list[ProjectCredential] = []
        self.deleted_keys: list[tuple[str, str, str]] = []
        self._fail = fail
        self._deleted = deleted

    def add(self, record: ProjectCredential) -> ProjectCredential:
        if self._fail:
            raise IntegrityError("INSERT", {}, Exception("duplicate key"))
        self.added.append(record)
        return record

    def delete(self, project_id: str, credential_id: str, domain: str | None) -> int:
        if self._fail:
            raise IntegrityError("DELETE", {}, Exception("locked"))
        self.deleted_keys.append((project_id, credential_id, domain))
        return self._deleted


class _StubJenkins:
    def __init__(self, *, existing: JenkinsCredential | None = None, lookup_status: int = 404) -> None:
        self.existing = existing
        self.lookup_status = lookup_status
        self.created: list[tuple[str, object, str]] = []
        self.updated: list[tuple[str, str, object, str]] = []
        self.deleted: list[tuple[str, str, str]] = []

    def get_credential_in_folder(self, domain, credential_id, folder):
        if self.existing is None:
            raise JenkinsApiError(status_code=self.lookup_status)
        return self.existing

    def create_credential_in_folder(self, domain, credential, folder):
        self.created.append((domain, credential, folder))
        return credential.id

    def update_credential_in_folder(self, domain, credential_id, credential, folder):
        self.updated.append((domain, credential_id, credential, folder))
        return credential_id

    def delete_credential_in_folder(self, domain, credential_id, folder):
        self.deleted.append((domain, credential_id, folder))
        return credential_id


def _service(*, jenkins=None, repository=None, access=None) -> ProjectCredentialWriteService:
    return ProjectCredentialWriteService(
        repository or _StubRepository(),
        access_service=access or _StubAccessService(),
        jenkins_client=jenkins or _StubJenkins(),
    )


def _ssh_payload(**content) -> CredentialRequestPayload:
    body = {"id": "git-key", "username": "git", "private_key": "-----BEGIN KEY-----", **content}
    return CredentialRequestPayload.model_validate({"type": "ssh", "domain": " ", "content": body})


@pytest.mark.unit
def test_create_builds_jenkins_payload_and_records_ownership() -> None:
    jenkins = _StubJenkins()
    repository = _StubRepository()
    access = _StubAccessService()

    credential_id = _service(jenkins=jenkins, repository=repository, access=access).create(
        "proj-a",
        _ssh_payload(passphrase="pp"),
        operator="alice",
    )

    assert credential_id == "git-key"
    assert access.checked == [("alice", "proj-a", ("owner", "maintainer"))]
    domain, credential, folder = jenkins.created[0]
    assert (domain, folder) == ("_", "proj-a")
    assert isinstance(credential, SshCredential)
    assert credential.passphrase == "pp"
    record = repository.added[0]
    assert (record.project_id, record.credential_id, record.domain, record.creator) == (
        "proj-a",
        "git-key",
        "_",
        "alice",
    )
    assert record.create_time is not None


@pytest.mark.unit
def test_create_requires_credential_id() -> None:
    jenkins = _StubJenkins()

    with pytest.raises(ValidationError):
        _service(jenkins=jenkins).create("proj-a", _ssh_payload(id="  "), operator="alice")

    assert jenkins.created == []


@pytest.mark.unit
def test_create_checks_role_before_decoding_content() -> None:
    payload = CredentialRequestPayload.model_validate({"type": "unknown", "content": {}})

    with pytest.raises(AuthorizationError):
        _service(access=_StubAccessService(allowed=False)).create("proj-a", payload, operator="dave")


@pytest.mark.unit
def test_create_rejects_existing_credential_id() -> None:
    existing = JenkinsCredential(
        id="git-key",
        type_name="Secret text",
        display_name="git-key",
        description="",
        domain="_",
    )
    jenkins = _StubJenkins(existing=existing)
    repository = _StubRepository()

    with pytest.raises(ConflictError) as exc:
        _service(jenkins=jenkins, repository=repository).create("proj-a", _ssh_payload(), operator="alice")

    assert exc.value.message == "credential id [git-key] has been used"
    assert jenkins.created == []
    assert repository.added == []


@pytest.mark.unit
def test_create_maps_non_404_lookup_failure_to_validation_error() -> None:
    jenkins = _StubJenkins(lookup_status=401)

    with pytest.raises(ValidationError) as exc:
        _service(jenkins=jenkins).create("proj-a", _ssh_payload(), operator="alice")

    assert exc.value.extra["jenkins_status_code"] == 401
    assert jenkins.created == []


@pytest.mark.unit
def test_create_store_failure_raises_database_error_without_remote_rollback() -> None:
    jenkins = _StubJenkins()

    with pytest.raises(DatabaseError) as exc:
        _service(jenkins=jenkins, repository=_StubRepository(fail=True)).create(
            "proj-a",
            _ssh_payload(),
            operator="alice",
        )

    assert exc.value.message_key == "CREDENTIAL_OWNERSHIP_WRITE_FAILED"
    assert len(jenkins.created) == 1
    assert jenkins.deleted == []


@pytest.mark.unit
def test_update_uses_remote_type_and_path_id() -> None:
    existing = JenkinsCredential(
        id="kube",
        type_name="Kubernetes configuration (kubeconfig)",
        display_name="kube",
        description="",
        domain="ops",
    )
    jenkins = _StubJenkins(existing=existing)
    repository = _StubRepository()
    payload = CredentialRequestPayload.model_validate(
        {"type": "secret_text", "domain": "ops", "content": {"id": "ignored", "content": "apiVersion: v1"}},
    )

    updated_id = _service(jenkins=jenkins, repository=repository).update("proj-a", "kube", payload, operator="carol")

    assert updated_id == "kube"
    domain, credential_id, credential, folder = jenkins.updated[0]
    assert (domain, credential_id, folder) == ("ops", "kube", "proj-a")
    assert credential.to_payload()["id"] == "kube"
    assert credential.to_payload()["kubeconfigSource"]["content"] == "apiVersion: v1"
    assert repository.added == []
    assert repository.deleted_keys == []


@pytest.mark.unit
def test_update_passes_remote_lookup_status_through() -> None:
    payload = CredentialRequestPayload.model_validate({"content": {"secret": "x"}})

    with pytest.raises(JenkinsApiError) as exc:
        _service(jenkins=_StubJenkins(lookup_status=404)).update("proj-a", "missing", payload, operator="alice")

    assert exc.value.status_code == 404


@pytest.mark.unit
def test_delete_removes_remote_then_ownership_with_default_domain() -> None:
    jenkins = _StubJenkins()
    repository = _StubRepository(deleted=0)

    deleted_id = _service(jenkins=jenkins, repository=repository).delete(
        "proj-a",
        "old-key",
        DeleteCredentialPayload.model_validate({}),
        operator="alice",
    )

    assert deleted_id == "old-key"
    assert jenkins.deleted == [("_", "old-key", "proj-a")]
    assert repository.deleted_keys == [("proj-a", "old-key", "_")]


@pytest.mark.unit
def test_delete_store_failure_raises_database_error() -> None:
    jenkins = _StubJenkins()

    with pytest.raises(DatabaseError):
        _service(jenkins=jenkins, repository=_StubRepository(fail=True)).delete(
            "proj-a",
            "old-key",
            DeleteCredentialPayload.model_validate({"domain": "ops"}),
            operator="alice",
        )

    assert jenkins.deleted == [("ops", "old-key", "proj-a")]
