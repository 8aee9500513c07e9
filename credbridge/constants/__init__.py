"""常量模块。

集中管理系统常量，包括错误消息、HTTP 相关常量、凭据类型与项目角色等。
"""

# 导入HTTP状态码常量（使用Python标准库）
from http import HTTPStatus as HttpStatus

# 导入凭据类型常量
from .credential_types import DEFAULT_DOMAIN, GLOBAL_SCOPE, CredentialType, StaplerClass, normalize_domain

# 导入HTTP头常量
from .http_headers import HttpHeaders

# 导入项目角色常量
from .project_roles import MembershipStatus, ProjectRole

# 导入所有系统常量
from .system_constants import (
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    SuccessMessages,
)

__all__ = [
    "DEFAULT_DOMAIN",
    "GLOBAL_SCOPE",
    "CredentialType",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpHeaders",
    "HttpStatus",
    "MembershipStatus",
    "ProjectRole",
    "StaplerClass",
    "SuccessMessages",
    "normalize_domain",
]
