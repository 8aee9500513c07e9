"""项目成员 Repository(只读)."""

from __future__ import annotations

from credbridge.constants import MembershipStatus
from credbridge.models.project_membership import ProjectMembership


class ProjectMembershipsRepository:
    """项目成员查询 Repository."""

    def get_active_role(self, project_id: str, username: str) -> str | None:
        """返回用户在项目中的有效角色,非成员或成员已停用时返回 None."""
        membership = ProjectMembership.query.filter_by(
            project_id=project_id,
            username=username,
            status=MembershipStatus.ACTIVE,
        ).first()
        if membership is None:
            return None
        return str(membership.role)
