"""API v1 decorators.

API v1 的错误语义始终为 JSON,统一通过 AppError 体系输出标准错误封套.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from flask import current_app, request
from flask_login import current_user

from credbridge.constants import ErrorMessages, HttpHeaders
from credbridge.errors import AuthenticationError

P = ParamSpec("P")
R = TypeVar("R")


def api_login_required(func: Callable[P, R]) -> Callable[P, R]:
    """要求请求携带网关透传的用户名."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not current_user.is_authenticated:
            raise AuthenticationError(
                ErrorMessages.AUTHENTICATION_REQUIRED,
                message_key="AUTHENTICATION_REQUIRED",
                extra={
                    "request_path": request.path,
                    "request_method": request.method,
                    "username_header": current_app.config.get("AUTH_USERNAME_HEADER", HttpHeaders.X_TOKEN_USERNAME),
                },
            )
        return func(*args, **kwargs)

    return wrapper


def current_operator_username() -> str:
    """返回当前调用方用户名,需在 api_login_required 之后调用."""
    return str(getattr(current_user, "username", "") or "")
