"""项目相关服务."""

from credbridge.services.projects.project_access_service import ProjectAccessService

__all__ = ["ProjectAccessService"]
