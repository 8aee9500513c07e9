"""API v1 query 参数解析工具.

约束:
- 仅用于 API 层的 query params(`request.args`)
- 通过 `flask_restx.reqparse.RequestParser` 统一解析并配合 `@ns.expect(parser)`
"""

from __future__ import annotations

from typing import Any, Final

from flask_restx import reqparse

from credbridge.types.converters import as_optional_str

_DEFAULT_BUNDLE_ERRORS: Final[bool] = True


def new_parser(*, bundle_errors: bool = _DEFAULT_BUNDLE_ERRORS) -> reqparse.RequestParser:
    """构造统一配置的 RequestParser."""
    return reqparse.RequestParser(bundle_errors=bundle_errors)


def optional_text(value: Any) -> str | None:
    """去空白后的字符串,空串视为未提供."""
    return as_optional_str(value)

