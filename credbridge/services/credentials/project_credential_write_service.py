"""项目凭据写操作 Service.

职责:
- 校验调用方角色,按类型解码 content 并转换为 Jenkins 载荷
- 调用 Jenkins 完成创建/更新/删除,同步维护本地归属记录
- 不返回 Response、不 commit

Jenkins 写成功而本地归属记录写失败时不回滚 Jenkins,错误以 DatabaseError 抛出.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from sqlalchemy.exc import SQLAlchemyError

from credbridge.constants import CredentialType, ErrorMessages, ProjectRole, normalize_domain
from credbridge.errors import (
    ConflictError,
    DatabaseError,
    JenkinsApiError,
    ValidationError,
    get_jenkins_status_code,
)
from credbridge.models.project_credential import ProjectCredential
from credbridge.repositories.project_credentials_repository import ProjectCredentialsRepository
from credbridge.schemas.credentials import decode_credential_content
from credbridge.services.jenkins import get_jenkins_client
from credbridge.services.projects import ProjectAccessService
from credbridge.utils.structlog_config import log_error, log_info
from credbridge.utils.time_utils import time_utils

if TYPE_CHECKING:
    from credbridge.schemas.credentials import CredentialRequestPayload, DeleteCredentialPayload
    from credbridge.services.jenkins import JenkinsClient


class ProjectCredentialWriteService:
    """项目凭据写操作服务."""

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

    def create(self, project_id: str, payload: CredentialRequestPayload, *, operator: str) -> str:
        """在项目 folder 下创建凭据并记录归属.

        Returns:
            str: 新凭据 ID.

        Raises:
            AuthorizationError: 调用方不是项目 owner/maintainer.
            ValidationError: 类型未知、content 不合法或 ID 为空.
            ConflictError: 凭据 ID 在该 domain 下已存在.
            JenkinsApiError: Jenkins 创建失败,状态码透传.
            DatabaseError: 归属记录写入失败.

        """
        self._access_service.ensure_user_in_role(operator, project_id, ProjectRole.CREDENTIAL_MANAGERS)

        content = decode_credential_content(payload.type, payload.content)
        if not content.id:
            raise ValidationError("id不能为空")
        domain = normalize_domain(payload.domain)

        self._ensure_credential_id_unused(project_id, domain, content.id)
        self.jenkins.create_credential_in_folder(domain, content.to_jenkins(content.id), project_id)

        record = ProjectCredential(
            project_id=project_id,
            credential_id=content.id,
            domain=domain,
            creator=operator,
            create_time=time_utils.now(),
        )
        try:
            self._repository.add(record)
        except SQLAlchemyError as exc:
            self._raise_ownership_error("create", exc, project_id=project_id, credential_id=content.id, domain=domain)

        log_info(
            "创建项目凭据",
            module="credentials",
            project_id=project_id,
            credential_id=content.id,
            credential_type=payload.type,
            domain=domain,
            operator=operator,
        )
        return content.id

    def update(
        self,
        project_id: str,
        credential_id: str,
        payload: CredentialRequestPayload,
        *,
        operator: str,
    ) -> str:
        """更新已有凭据.

        类型以 Jenkins 中的 typeName 为准,请求体中的 ``type`` 与 content 内的 id 均被忽略.
        """
        self._access_service.ensure_user_in_role(operator, project_id, ProjectRole.CREDENTIAL_MANAGERS)

        domain = normalize_domain(payload.domain)
        remote = self.jenkins.get_credential_in_folder(domain, credential_id, project_id)
        credential_type = CredentialType.from_jenkins_type_name(remote.type_name)
        if credential_type is None:
            raise ValidationError(
                ErrorMessages.CREDENTIAL_TYPE_UNSUPPORTED.format(credential_type=remote.type_name or "-"),
                message_key="CREDENTIAL_TYPE_UNSUPPORTED",
                extra={"credential_id": credential_id, "type_name": remote.type_name},
            )

        content = decode_credential_content(credential_type, payload.content)
        self.jenkins.update_credential_in_folder(
            domain,
            credential_id,
            content.to_jenkins(credential_id),
            project_id,
        )

        log_info(
            "更新项目凭据",
            module="credentials",
            project_id=project_id,
            credential_id=credential_id,
            credential_type=credential_type,
            domain=domain,
            operator=operator,
        )
        return credential_id

    def delete(
        self,
        project_id: str,
        credential_id: str,
        payload: DeleteCredentialPayload,
        *,
        operator: str,
    ) -> str:
        """删除 Jenkins 凭据及其归属记录,归属记录不存在时不报错."""
        self._access_service.ensure_user_in_role(operator, project_id, ProjectRole.CREDENTIAL_MANAGERS)

        domain = normalize_domain(payload.domain)
        self.jenkins.delete_credential_in_folder(domain, credential_id, project_id)

        try:
            deleted = self._repository.delete(project_id, credential_id, domain)
        except SQLAlchemyError as exc:
            self._raise_ownership_error("delete", exc, project_id=project_id, credential_id=credential_id, domain=domain)

        log_info(
            "删除项目凭据",
            module="credentials",
            project_id=project_id,
            credential_id=credential_id,
            domain=domain,
            ownership_deleted=deleted,
            operator=operator,
        )
        return credential_id

    def _ensure_credential_id_unused(self, project_id: str, domain: str, credential_id: str) -> None:
        try:
            self.jenkins.get_credential_in_folder(domain, credential_id, project_id)
        except JenkinsApiError as exc:
            if exc.is_not_found:
                return
            raise ValidationError(
                f"查询凭据 [{credential_id}] 失败: {exc.message}",
                extra={"credential_id": credential_id, "jenkins_status_code": get_jenkins_status_code(exc)},
            ) from exc
        raise ConflictError(
            ErrorMessages.CREDENTIAL_ID_USED.format(credential_id=credential_id),
            message_key="CREDENTIAL_ID_USED",
            extra={"project_id": project_id, "credential_id": credential_id, "domain": domain},
        )

    @staticmethod
    def _raise_ownership_error(
        action: str,
        exc: SQLAlchemyError,
        *,
        project_id: str,
        credential_id: str,
        domain: str,
    ) -> NoReturn:
        log_error(
            "凭据归属记录写入失败",
            module="credentials",
            exception=exc,
            action=action,
            project_id=project_id,
            credential_id=credential_id,
            domain=domain,
        )
        raise DatabaseError(
            ErrorMessages.CREDENTIAL_OWNERSHIP_WRITE_FAILED,
            message_key="CREDENTIAL_OWNERSHIP_WRITE_FAILED",
            extra={"project_id": project_id, "credential_id": credential_id, "exception": str(exc)},
        ) from exc
