"""凭据桥 - 统一异常定义.

集中维护业务异常类型、严重度与 HTTP 状态码映射.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from werkzeug.exceptions import HTTPException

from credbridge.constants import HttpStatus
from credbridge.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity

if TYPE_CHECKING:
    from credbridge.types.structures import LoggerExtra


@dataclass(frozen=True, slots=True)
class ExceptionMetadata:
    """异常的元信息."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str


class AppError(Exception):
    """统一的基础业务异常.

    Args:
        message: 自定义错误文案,若为空则根据 ``message_key`` 推导.
        message_key: 覆盖默认 message_key 的可选值.
        extra: 结构化日志附加字段.
        severity: 错误严重度.
        category: 错误分类.
        status_code: 覆盖默认 HTTP 状态码.

    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        extra: LoggerExtra | None = None,
        severity: ErrorSeverity | None = None,
        category: ErrorCategory | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message_key = message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, ErrorMessages.INTERNAL_ERROR)
        self.extra = dict(extra or {})
        self._severity = severity or self.metadata.severity
        self._category = category or self.metadata.category
        self._status_code = status_code or self.metadata.status_code
        super().__init__(self.message)

    @property
    def severity(self) -> ErrorSeverity:
        return self._severity

    @property
    def category(self) -> ErrorCategory:
        return self._category

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def recoverable(self) -> bool:
        """严重度为 LOW/MEDIUM 时视为可恢复."""
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class ValidationError(AppError):
    """表示输入参数或请求体验证失败.

    常用于请求体解码失败、字段缺失等场景,默认返回 400.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class AuthenticationError(AppError):
    """表示调用方身份缺失,默认返回 401."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.UNAUTHORIZED,
        category=ErrorCategory.AUTHENTICATION,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="AUTHENTICATION_REQUIRED",
    )


class AuthorizationError(AppError):
    """表示当前主体在项目中缺少所需角色,默认返回 403."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.FORBIDDEN,
        category=ErrorCategory.AUTHORIZATION,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="PERMISSION_DENIED",
    )


class NotFoundError(AppError):
    """表示请求的资源不存在,默认返回 404."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.NOT_FOUND,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.LOW,
        default_message_key="RESOURCE_NOT_FOUND",
    )


class ConflictError(AppError):
    """表示资源状态冲突,例如凭据 ID 已被占用,默认返回 409."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.CONFLICT,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="CONSTRAINT_VIOLATION",
    )


class ExternalServiceError(AppError):
    """表示下游依赖不可用或返回错误,默认返回 502."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_GATEWAY,
        category=ErrorCategory.EXTERNAL,
        severity=ErrorSeverity.HIGH,
        default_message_key="JENKINS_REQUEST_FAILED",
    )


class JenkinsApiError(ExternalServiceError):
    """Jenkins 接口调用失败.

    ``status_code`` 透传 Jenkins 返回的 HTTP 状态码;网络层失败时为 502.
    4xx 视为调用方可修正的问题,严重度降为 MEDIUM.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int = HttpStatus.BAD_GATEWAY,
        extra: LoggerExtra | None = None,
    ) -> None:
        severity = ErrorSeverity.MEDIUM if HttpStatus.BAD_REQUEST <= status_code < 500 else ErrorSeverity.HIGH
        super().__init__(
            message,
            message_key="JENKINS_REQUEST_FAILED",
            extra={**dict(extra or {}), "jenkins_status_code": status_code},
            severity=severity,
            status_code=status_code,
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == HttpStatus.NOT_FOUND


class DatabaseError(AppError):
    """表示数据库查询或写入失败,默认返回 500."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="DATABASE_QUERY_ERROR",
    )


class SystemError(AppError):
    """表示系统级未知错误,默认返回 500."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )


def get_jenkins_status_code(error: BaseException) -> int:
    """提取 Jenkins 错误对应的 HTTP 状态码.

    Jenkins 错误直接透传远端状态码,其余异常一律视为 500.
    """
    if isinstance(error, JenkinsApiError):
        return error.status_code
    return HttpStatus.INTERNAL_SERVER_ERROR


def map_exception_to_status(error: Exception, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """根据异常类型推导 HTTP 状态码.

    Args:
        error: 捕获到的异常对象.
        default: 无法匹配时的默认状态码.

    Returns:
        int: 与异常对应的 HTTP 状态码.

    """
    if isinstance(error, AppError):
        return error.status_code

    if isinstance(error, HTTPException):
        code = getattr(error, "code", None)
        if code is not None:
            return int(code)

    return default


__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DatabaseError",
    "ExternalServiceError",
    "JenkinsApiError",
    "NotFoundError",
    "SystemError",
    "ValidationError",
    "get_jenkins_status_code",
    "map_exception_to_status",
]
