# tests/unit/conftest.py
"""单元测试专用 fixtures."""

import pytest


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    unit tests 不依赖真实 Jenkins/数据库,也不受开发者本机环境变量影响.
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("JENKINS_URL", "http://jenkins.test")
    monkeypatch.setenv("JENKINS_USERNAME", "")
    monkeypatch.setenv("JENKINS_API_TOKEN", "")
    monkeypatch.setenv("JENKINS_USE_CRUMB", "false")
    monkeypatch.setenv("PLATFORM_ADMIN_USERNAME", "admin")
    monkeypatch.setenv("AUTH_USERNAME_HEADER", "X-Token-Username")
