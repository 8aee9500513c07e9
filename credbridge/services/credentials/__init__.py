"""项目凭据服务."""

from credbridge.services.credentials.project_credential_read_service import ProjectCredentialReadService
from credbridge.services.credentials.project_credential_write_service import ProjectCredentialWriteService

__all__ = ["ProjectCredentialReadService", "ProjectCredentialWriteService"]
