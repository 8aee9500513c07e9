"""请求体/凭据 content 的 schema 校验.

pydantic 的校验错误只取第一条,转换为中文文案后以项目的 ValidationError 抛出.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from credbridge.errors import ValidationError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic 错误类型 -> 中文文案
_ERROR_TYPE_MESSAGES: dict[str, str] = {
    "missing": "{field}不能为空",
    "string_type": "{field}必须是字符串",
    "dict_type": "{field}必须是 JSON 对象",
    "model_type": "请求体必须是 JSON 对象",
}


def validate_or_raise(model: type[ModelT], payload: object, *, message_key: str = "VALIDATION_ERROR") -> ModelT:
    """校验 payload 并返回模型实例.

    Raises:
        ValidationError: 校验失败,文案取第一条错误.

    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors = exc.errors()
        if not errors:
            raise ValidationError("参数校验失败", message_key=message_key) from None
        first = errors[0]
        field = _first_field(first)
        raise ValidationError(
            _describe_error(first, field),
            message_key=message_key,
            extra={"schema": model.__name__, "field": field, "error_type": first.get("type")},
        ) from None


def _first_field(error: ErrorDetails) -> str | None:
    loc = error.get("loc")
    if isinstance(loc, tuple) and loc and isinstance(loc[0], str):
        return loc[0]
    return None


def _describe_error(error: ErrorDetails, field: str | None) -> str:
    # model_validator/field_validator 中 raise 的 ValueError 直接透传原文案
    ctx = error.get("ctx")
    if isinstance(ctx, dict) and isinstance(ctx.get("error"), BaseException):
        return str(ctx["error"])

    template = _ERROR_TYPE_MESSAGES.get(str(error.get("type")))
    if template is not None and (field or "{field}" not in template):
        return template.format(field=field)

    msg = error.get("msg")
    if isinstance(msg, str) and msg.strip():
        return f"{field}: {msg}" if field else msg
    return "参数校验失败"
