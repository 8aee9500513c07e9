"""凭据桥 - 常量定义模块

统一管理错误分类、严重度与提示文案.
"""

from enum import Enum


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BUSINESS = "business"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    EXTERNAL = "external"
    NETWORK = "network"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# 错误消息常量
class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "服务器内部错误"
    VALIDATION_ERROR = "数据验证失败"
    PERMISSION_DENIED = "权限不足"
    RESOURCE_NOT_FOUND = "资源不存在"
    INVALID_REQUEST = "无效的请求"
    AUTHENTICATION_REQUIRED = "请先登录"
    JSON_REQUIRED = "请求必须是JSON格式"

    # 项目成员
    PROJECT_ROLE_REQUIRED = "用户 [{username}] 在项目 [{project_id}] 中的角色不属于 {roles}"

    # 数据库错误
    DATABASE_QUERY_ERROR = "数据库查询错误"
    CONSTRAINT_VIOLATION = "数据约束错误"

    # 凭据
    CREDENTIAL_ID_USED = "credential id [{credential_id}] has been used"
    CREDENTIAL_TYPE_UNSUPPORTED = "不支持的凭据类型: {credential_type}"
    JENKINS_REQUEST_FAILED = "Jenkins 请求失败"
    CREDENTIAL_OWNERSHIP_WRITE_FAILED = "凭据归属记录写入失败"


# 成功消息常量
class SuccessMessages:
    """成功消息常量."""

    OPERATION_SUCCESS = "操作成功"

    CREDENTIAL_CREATED = "凭据创建成功"
    CREDENTIAL_UPDATED = "凭据更新成功"
    CREDENTIAL_DELETED = "凭据删除成功"


__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "SuccessMessages",
]
