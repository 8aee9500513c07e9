"""凭据桥 - 项目成员模型."""

from __future__ import annotations

from credbridge import db
from credbridge.constants import MembershipStatus
from credbridge.utils.time_utils import time_utils


class ProjectMembership(db.Model):
    """项目成员.

    成员管理不在本服务范围内,这里只读取角色用于权限校验.

    Attributes:
        project_id: 项目 ID.
        username: 成员用户名.
        role: 成员角色(owner/maintainer/developer/reporter).
        status: 成员状态,仅 active 参与校验.
        grant_by: 授权人.
        create_time: 加入时间.

    """

    __tablename__ = "project_membership"

    project_id = db.Column(db.String(255), primary_key=True)
    username = db.Column(db.String(255), primary_key=True)
    role = db.Column(db.String(50), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=MembershipStatus.ACTIVE)
    grant_by = db.Column(db.String(255), nullable=True)
    create_time = db.Column(db.DateTime(timezone=True), nullable=False, default=time_utils.now)

    def __repr__(self) -> str:
        return f"<ProjectMembership {self.project_id}/{self.username}:{self.role}>"
