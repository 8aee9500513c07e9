"""项目凭据归属 Repository.

职责:
- 负责归属记录的读取与落库(add/delete/flush)
- 不做序列化、不返回 Response、不 commit
"""

from __future__ import annotations

from typing import cast

from credbridge import db
from credbridge.constants import normalize_domain
from credbridge.models.project_credential import ProjectCredential


class ProjectCredentialsRepository:
    """项目凭据归属 Repository."""

    def add(self, record: ProjectCredential) -> ProjectCredential:
        db.session.add(record)
        db.session.flush()
        return record

    def get(self, project_id: str, credential_id: str, domain: str | None) -> ProjectCredential | None:
        return cast(
            "ProjectCredential | None",
            ProjectCredential.query.filter_by(
                project_id=project_id,
                credential_id=credential_id,
                domain=normalize_domain(domain),
            ).first(),
        )

    def list_by_project(self, project_id: str, domain: str | None = None) -> list[ProjectCredential]:
        query = ProjectCredential.query.filter_by(project_id=project_id)
        if domain:
            query = query.filter_by(domain=normalize_domain(domain))
        return query.order_by(ProjectCredential.create_time.desc()).all()

    def delete(self, project_id: str, credential_id: str, domain: str | None) -> int:
        """删除匹配的归属记录,返回删除行数(无匹配时为 0)."""
        deleted = ProjectCredential.query.filter_by(
            project_id=project_id,
            credential_id=credential_id,
            domain=normalize_domain(domain),
        ).delete(synchronize_session=False)
        db.session.flush()
        return int(deleted or 0)
