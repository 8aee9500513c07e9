"""Jenkins 凭据接口相关类型定义."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class UsageRange:
    """指纹使用记录中的构建号区间."""

    start: int
    end: int


@dataclass(slots=True)
class FingerprintUsage:
    """凭据指纹的一条使用记录(任务名 + 构建区间)."""

    name: str
    ranges: list[UsageRange] = field(default_factory=list)


@dataclass(slots=True)
class CredentialFingerprint:
    """Jenkins 计算的凭据指纹."""

    file_name: str
    hash: str
    usage: list[FingerprintUsage] = field(default_factory=list)


@dataclass(slots=True)
class JenkinsCredential:
    """Jenkins 返回的单个凭据.

    Jenkins 响应中不包含 domain,由客户端按请求的 domain 回填.
    """

    id: str
    type_name: str
    display_name: str
    description: str
    domain: str
    fingerprint: CredentialFingerprint | None = None
