"""项目凭据相关类型定义."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from credbridge.types.jenkins import CredentialFingerprint


@dataclass(slots=True)
class CredentialContent:
    """从凭据配置页抓取的非敏感字段.

    密码、passphrase、secret 等敏感字段不在此结构中.
    """

    id: str = ""
    description: str = ""
    username: str | None = None
    private_key: str | None = None
    content: str | None = None


@dataclass(slots=True)
class ProjectCredentialView:
    """对外返回的项目凭据视图."""

    id: str
    type: str | None
    display_name: str
    description: str
    domain: str
    fingerprint: CredentialFingerprint | None = None
    create_time: datetime | None = None
    creator: str | None = None
    content: CredentialContent | None = None
