"""创建项目凭据归属表与项目成员表.

Revision ID: 20260301100000
Revises:
Create Date: 2026-03-01

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20260301100000"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """执行升级迁移.

    新建 `project_credential`(凭据归属)与 `project_membership`(项目成员)两张表.
    """
    op.create_table(
        "project_credential",
        sa.Column("project_id", sa.String(length=255), nullable=False),
        sa.Column("credential_id", sa.String(length=255), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False, server_default="_"),
        sa.Column("creator", sa.String(length=255), nullable=False),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("project_id", "credential_id", "domain"),
    )
    op.create_table(
        "project_membership",
        sa.Column("project_id", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("grant_by", sa.String(length=255), nullable=True),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("project_id", "username"),
    )
    op.create_index("ix_project_membership_role", "project_membership", ["role"])


def downgrade() -> None:
    """执行降级迁移,仅用于回滚与排障."""
    op.drop_index("ix_project_membership_role", table_name="project_membership")
    op.drop_table("project_membership")
    op.drop_table("project_credential")
