"""凭据桥 - 项目凭据归属模型."""

from __future__ import annotations

from credbridge import db
from credbridge.constants import DEFAULT_DOMAIN
from credbridge.utils.time_utils import time_utils


class ProjectCredential(db.Model):
    """项目凭据归属记录.

    凭据本身保存在 Jenkins 中,本表只记录归属与审计信息:
    远端创建成功后写入,远端删除成功后删除,自身从不更新.

    Attributes:
        project_id: 项目 ID,同时也是 Jenkins folder 名.
        credential_id: Jenkins 凭据 ID.
        domain: Jenkins 凭据域,`_` 表示全局域.
        creator: 创建人用户名.
        create_time: 创建时间.

    """

    __tablename__ = "project_credential"

    project_id = db.Column(db.String(255), primary_key=True)
    credential_id = db.Column(db.String(255), primary_key=True)
    domain = db.Column(db.String(255), primary_key=True, default=DEFAULT_DOMAIN)
    creator = db.Column(db.String(255), nullable=False)
    create_time = db.Column(db.DateTime(timezone=True), nullable=False, default=time_utils.now)

    def __repr__(self) -> str:
        return f"<ProjectCredential {self.project_id}/{self.domain}/{self.credential_id}>"
