"""凭据桥 - Flask 应用初始化.

为 DevOps 平台的项目提供 Jenkins 凭据管理接口,本地仅维护凭据归属记录.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue
from flask_cors import CORS
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from credbridge.constants import HttpHeaders
from credbridge.settings import Settings
from credbridge.types.extensions import CredBridgeFlask

# 初始化扩展
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
cors = CORS()


from credbridge.api import register_api_blueprints  # noqa: E402
from credbridge.infra.auth import init_login_manager  # noqa: E402
from credbridge.infra.logging.request_middleware import register_request_logging  # noqa: E402
from credbridge.services.jenkins import init_jenkins_client  # noqa: E402
from credbridge.utils.response_utils import unified_error_response  # noqa: E402
from credbridge.utils.structlog_config import (  # noqa: E402
    ErrorContext,
    configure_structlog,
    enhanced_error_handler,
)


def create_app(*, settings: Settings | None = None) -> CredBridgeFlask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.

    Returns:
        CredBridgeFlask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = CredBridgeFlask(__name__)

    # 配置应用
    configure_app(app, resolved_settings)

    # 初始化扩展
    initialize_extensions(app, resolved_settings)

    # 注册 API
    register_api_blueprints(app, resolved_settings)

    # 配置日志
    configure_logging(app)

    # 配置统一日志系统
    configure_structlog(app)
    register_request_logging(app)

    # 设置全局日志级别
    log_level_name = str(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger().setLevel(getattr(logging, log_level_name, logging.INFO))

    # 注册增强的错误处理器
    app.enhanced_error_handler = enhanced_error_handler

    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        """全局错误处理."""
        payload, status_code = unified_error_response(error, context=ErrorContext(error, request))
        return jsonify(payload), status_code

    return app


def configure_app(app: Flask, settings: Settings) -> None:
    """写入 Settings 提供的配置.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,包含环境变量解析、默认值与校验结果.

    """
    app.config.from_mapping(settings.to_flask_config())
    app.config.setdefault("APPLICATION_ROOT", "/")
    if settings.environment.strip().lower() in {"testing", "test"}:
        app.config["TESTING"] = True


def initialize_extensions(app: Flask, settings: Settings) -> None:
    """初始化数据库、登录、CORS 与 Jenkins 客户端.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,用于扩展初始化参数注入.

    """
    # 初始化数据库
    db.init_app(app)
    migrate.init_app(app, db)

    # 网关透传身份
    init_login_manager(app, login_manager)

    # 初始化CORS
    cors.init_app(
        app,
        resources={
            r"/api/*": {
                "origins": list(settings.cors_origins),
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                "allow_headers": [
                    HttpHeaders.CONTENT_TYPE,
                    HttpHeaders.AUTHORIZATION,
                    HttpHeaders.X_REQUEST_ID,
                    settings.auth_username_header,
                ],
                "expose_headers": [HttpHeaders.X_REQUEST_ID],
            },
        },
    )

    init_jenkins_client(app, settings)


def configure_logging(app: Flask) -> None:
    """配置日志系统与文件处理器.

    调试与测试模式下不落盘.
    """
    if app.debug or app.testing:
        return

    log_path = Path(app.config["LOG_FILE"])
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=app.config["LOG_MAX_SIZE"],
        backupCount=app.config["LOG_BACKUP_COUNT"],
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"),
    )
    file_handler.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
    app.logger.addHandler(file_handler)
    logging.getLogger().addHandler(file_handler)

    app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
    app.logger.info("凭据桥应用启动")


from credbridge.models import project_credential, project_membership  # noqa: F401, E402
