"""项目凭据读操作 Service.

合并 Jenkins 中的凭据与本地归属记录,按需抓取凭据配置页中的非敏感字段.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from credbridge.constants import ProjectRole, normalize_domain
from credbridge.errors import DatabaseError
from credbridge.repositories.project_credentials_repository import ProjectCredentialsRepository
from credbridge.services.credentials.credential_response_builder import build_credential_view
from credbridge.services.jenkins import get_jenkins_client, parse_credential_content
from credbridge.services.projects import ProjectAccessService

if TYPE_CHECKING:
    from credbridge.models.project_credential import ProjectCredential
    from credbridge.services.jenkins import JenkinsClient
    from credbridge.types.credentials import ProjectCredentialView


class ProjectCredentialReadService:
    """项目凭据读取服务."""

    def __init__(
        self,
        repository: ProjectCredentialsRepository | None = None,
        *,
        access_service: ProjectAccessService | None = None,
        jenkins_client: JenkinsClient | None = None,
    ) -> None:
        self._repository = repository or ProjectCredentialsRepository()
        self._access_service = access_service or ProjectAccessService()
        self._jenkins_client = jenkins_client

    @property
    def jenkins(self) -> JenkinsClient:
        return self._jenkins_client or get_jenkins_client()

    def get_credential(
        self,
        project_id: str,
        credential_id: str,
        *,
        operator: str,
        domain: str | None = None,
        include_content: bool = False,
    ) -> ProjectCredentialView:
        """读取单个凭据.

        Args:
            project_id: 项目 ID,同时也是 Jenkins folder 名.
            credential_id: 凭据 ID.
            operator: 调用方用户名.
            domain: 凭据域,为空时使用全局域.
            include_content: 是否抓取配置页中的 id/description/username 等字段.

        """
        self._access_service.ensure_user_in_role(operator, project_id, ProjectRole.CREDENTIAL_MANAGERS)

        resolved_domain = normalize_domain(domain)
        remote = self.jenkins.get_credential_in_folder(resolved_domain, credential_id, project_id)
        record = self._load_record(project_id, credential_id, resolved_domain)
        view = build_credential_view(remote, record)

        if include_content:
            html = self.jenkins.get_credential_content_in_folder(resolved_domain, credential_id, project_id)
            view.content = parse_credential_content(html, view.type)
        return view

    def list_credentials(
        self,
        project_id: str,
        *,
        operator: str,
        domain: str | None = None,
    ) -> list[ProjectCredentialView]:
        """列出项目 folder 下指定域的全部凭据,按 (id, domain) 关联归属记录."""
        self._access_service.ensure_user_in_role(operator, project_id, ProjectRole.CREDENTIAL_MANAGERS)

        resolved_domain = normalize_domain(domain)
        remotes = self.jenkins.get_credentials_in_folder(resolved_domain, project_id)
        try:
            records = self._repository.list_by_project(project_id, domain)
        except SQLAlchemyError as exc:
            raise DatabaseError(extra={"project_id": project_id, "exception": str(exc)}) from exc

        index: dict[tuple[str, str], ProjectCredential] = {
            (record.credential_id, record.domain): record for record in records
        }
        return [build_credential_view(remote, index.get((remote.id, remote.domain))) for remote in remotes]

    def _load_record(self, project_id: str, credential_id: str, domain: str) -> ProjectCredential | None:
        try:
            return self._repository.get(project_id, credential_id, domain)
        except SQLAlchemyError as exc:
            raise DatabaseError(
                extra={"project_id": project_id, "credential_id": credential_id, "exception": str(exc)},
            ) from exc
