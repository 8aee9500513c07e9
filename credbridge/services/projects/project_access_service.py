"""项目成员角色校验 Service."""

from __future__ import annotations

from collections.abc import Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from credbridge.constants import ErrorMessages
from credbridge.errors import AuthorizationError, DatabaseError
from credbridge.repositories.project_memberships_repository import ProjectMembershipsRepository
from credbridge.settings import DEFAULT_PLATFORM_ADMIN_USERNAME
from credbridge.utils.structlog_config import log_warning


class ProjectAccessService:
    """校验调用方在项目中的角色."""

    def __init__(
        self,
        repository: ProjectMembershipsRepository | None = None,
        *,
        platform_admin_username: str | None = None,
    ) -> None:
        self._repository = repository or ProjectMembershipsRepository()
        self._platform_admin_username = platform_admin_username

    @property
    def platform_admin_username(self) -> str:
        if self._platform_admin_username is not None:
            return self._platform_admin_username
        return str(current_app.config.get("PLATFORM_ADMIN_USERNAME") or DEFAULT_PLATFORM_ADMIN_USERNAME)

    def ensure_user_in_role(self, username: str, project_id: str, roles: Iterable[str]) -> str:
        """要求用户在项目中拥有指定角色之一.

        平台管理员直接放行.

        Returns:
            str: 用户的有效角色,平台管理员返回 ``"admin"``.

        Raises:
            AuthorizationError: 用户不是项目成员或角色不在 ``roles`` 中.
            DatabaseError: 查询成员表失败.

        """
        allowed = tuple(roles)
        if username and username == self.platform_admin_username:
            return "admin"

        try:
            role = self._repository.get_active_role(project_id, username)
        except SQLAlchemyError as exc:
            raise DatabaseError(extra={"project_id": project_id, "exception": str(exc)}) from exc

        if role is None or role not in allowed:
            log_warning(
                "项目角色校验未通过",
                module="projects",
                project_id=project_id,
                username=username,
                role=role,
                required_roles=list(allowed),
            )
            raise AuthorizationError(
                ErrorMessages.PROJECT_ROLE_REQUIRED.format(
                    username=username,
                    project_id=project_id,
                    roles="/".join(allowed),
                ),
                message_key="PROJECT_ROLE_REQUIRED",
                extra={"project_id": project_id, "username": username, "role": role},
            )
        return role
