"""项目成员角色常量."""

from __future__ import annotations

from typing import ClassVar


class ProjectRole:
    """项目成员角色."""

    OWNER = "owner"
    MAINTAINER = "maintainer"
    DEVELOPER = "developer"
    REPORTER = "reporter"

    ALL: ClassVar[tuple[str, ...]] = (OWNER, MAINTAINER, DEVELOPER, REPORTER)

    # 凭据的增删改查均要求 owner/maintainer
    CREDENTIAL_MANAGERS: ClassVar[tuple[str, ...]] = (OWNER, MAINTAINER)


class MembershipStatus:
    """项目成员状态."""

    ACTIVE = "active"
    INACTIVE = "inactive"


__all__ = ["MembershipStatus", "ProjectRole"]
