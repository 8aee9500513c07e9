"""网关透传身份的 Flask-Login 适配(Infra).

上游网关完成认证后,通过请求头(默认 `X-Token-Username`)透传用户名.
本模块把该请求头转换为 Flask-Login 的当前用户,供 `current_user` 使用.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app
from flask_login import LoginManager, UserMixin

from credbridge.constants import HttpHeaders

if TYPE_CHECKING:
    from flask import Flask, Request


class Operator(UserMixin):
    """网关透传的调用方.

    仅携带用户名,项目角色由 ProjectAccessService 按需查询.
    """

    def __init__(self, username: str) -> None:
        self.username = username

    def get_id(self) -> str:
        return self.username

    def __repr__(self) -> str:
        return f"<Operator {self.username}>"


def load_operator_from_request(request: Request) -> Operator | None:
    """从请求头解析调用方,缺失或为空时返回 None."""
    header_name = current_app.config.get("AUTH_USERNAME_HEADER", HttpHeaders.X_TOKEN_USERNAME)
    username = (request.headers.get(header_name) or "").strip()
    if not username:
        return None
    return Operator(username)


def init_login_manager(app: Flask, login_manager: LoginManager) -> None:
    """注册 request_loader.

    未认证请求由 `api_login_required` 抛出 AuthenticationError,全局错误处理器输出 401 封套.
    """
    login_manager.init_app(app)
    login_manager.request_loader(load_operator_from_request)


__all__ = ["Operator", "init_login_manager", "load_operator_from_request"]
