from __future__ import annotations

import pytest
from werkzeug.exceptions import BadRequest

from credbridge import create_app, db
from credbridge.errors import AuthorizationError, DatabaseError, SystemError
from credbridge.infra.route_safety import safe_route_call
from credbridge.settings import Settings


class _SessionSpy:
    def __init__(self, monkeypatch, *, commit_error: Exception | None = None) -> None:
        self.commits = 0
        self.rollbacks = 0
        self._commit_error = commit_error
        monkeypatch.setattr(db.session, "commit", self._commit)
        monkeypatch.setattr(db.session, "rollback", self._rollback)

    def _commit(self) -> None:
        self.commits += 1
        if self._commit_error is not None:
            raise self._commit_error

    def _rollback(self) -> None:
        self.rollbacks += 1


@pytest.fixture
def app_context():
    app = create_app(settings=Settings.load())
    with app.app_context():
        yield app


@pytest.mark.unit
def test_success_commits_and_returns_result(app_context, monkeypatch) -> None:
    spy = _SessionSpy(monkeypatch)

    result = safe_route_call(lambda: "deploy-key", module="credentials", action="create", public_error="创建失败")

    assert result == "deploy-key"
    assert (spy.commits, spy.rollbacks) == (1, 0)


@pytest.mark.unit
def test_app_error_rolls_back_and_is_reraised(app_context, monkeypatch) -> None:
    spy = _SessionSpy(monkeypatch)
    error = AuthorizationError("角色不足")

    def _raise() -> None:
        raise error

    with pytest.raises(AuthorizationError) as excinfo:
        safe_route_call(_raise, module="credentials", action="delete", public_error="删除失败")

    assert excinfo.value is error
    assert (spy.commits, spy.rollbacks) == (0, 1)


@pytest.mark.unit
def test_http_exception_is_reraised(app_context, monkeypatch) -> None:
    _SessionSpy(monkeypatch)

    def _raise() -> None:
        raise BadRequest()

    with pytest.raises(BadRequest):
        safe_route_call(_raise, module="credentials", action="get", public_error="获取失败")


@pytest.mark.unit
def test_unexpected_error_is_wrapped_with_public_message(app_context, monkeypatch) -> None:
    spy = _SessionSpy(monkeypatch)

    def _raise() -> None:
        raise RuntimeError("boom")

    with pytest.raises(SystemError) as excinfo:
        safe_route_call(_raise, module="credentials", action="list", public_error="获取凭据列表失败")

    assert excinfo.value.message == "获取凭据列表失败"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert spy.rollbacks == 1


@pytest.mark.unit
def test_custom_fallback_and_expected_exceptions(app_context, monkeypatch) -> None:
    _SessionSpy(monkeypatch)

    def _raise_key_error() -> None:
        raise KeyError("domain")

    with pytest.raises(KeyError):
        safe_route_call(
            _raise_key_error,
            module="credentials",
            action="update",
            public_error="更新失败",
            expected_exceptions=(KeyError,),
        )

    def _raise_runtime() -> None:
        raise RuntimeError("boom")

    with pytest.raises(DatabaseError):
        safe_route_call(
            _raise_runtime,
            module="credentials",
            action="update",
            public_error="更新失败",
            fallback_exception=DatabaseError,
        )


@pytest.mark.unit
def test_commit_failure_rolls_back_and_wraps(app_context, monkeypatch) -> None:
    spy = _SessionSpy(monkeypatch, commit_error=RuntimeError("disk full"))

    with pytest.raises(SystemError) as excinfo:
        safe_route_call(lambda: "ok", module="credentials", action="create", public_error="创建失败")

    assert excinfo.value.message == "创建失败"
    assert (spy.commits, spy.rollbacks) == (1, 1)


@pytest.mark.unit
def test_app_error_extra_is_logged(app_context, monkeypatch) -> None:
    _SessionSpy(monkeypatch)
    logged: list[dict] = []
    monkeypatch.setattr(
        "credbridge.infra.route_safety.log_with_context",
        lambda level, event, **kwargs: logged.append({"level": level, **kwargs}),
    )

    def _raise() -> None:
        raise DatabaseError("归属记录写入失败", extra={"project_id": "proj-a", "credential_id": "deploy-key"})

    with pytest.raises(DatabaseError):
        safe_route_call(_raise, module="credentials", action="create", public_error="创建失败")

    assert logged[0]["level"] == "warning"
    assert logged[0]["extra"]["error_type"] == "DatabaseError"
    assert logged[0]["extra"]["error_extra"] == {"project_id": "proj-a", "credential_id": "deploy-key"}
