"""项目凭据写路径 schema."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import StrictStr, field_validator, model_validator

from credbridge.constants import CredentialType, ErrorMessages
from credbridge.errors import ValidationError
from credbridge.schemas.base import PayloadSchema
from credbridge.schemas.validation import validate_or_raise
from credbridge.services.jenkins.payloads import (
    JenkinsCredentialPayload,
    KubeconfigCredential,
    SecretTextCredential,
    SshCredential,
    UsernamePasswordCredential,
)


def _require_fields(data: Any, *, required: tuple[str, ...]) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError("content 必须是 JSON 对象")
    for field in required:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError(f"{field}不能为空")
    return data


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


class CredentialRequestPayload(PayloadSchema):
    """创建/更新凭据的请求体.

    `content` 的具体结构取决于凭据类型,在权限校验之后再按类型解码.
    更新接口会忽略 `type`,以 Jenkins 中的实际类型为准.
    """

    type: StrictStr = ""
    domain: StrictStr = ""
    content: dict[str, Any] | None = None

    @field_validator("type", "domain", mode="before")
    @classmethod
    def _parse_optional_string(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @field_validator("type", "domain")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class DeleteCredentialPayload(PayloadSchema):
    """删除凭据的请求体,domain 为空时表示全局域."""

    domain: StrictStr = ""

    @field_validator("domain", mode="before")
    @classmethod
    def _parse_domain(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @field_validator("domain")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class _CredentialContent(PayloadSchema):
    id: StrictStr = ""
    description: StrictStr = ""

    @field_validator("id", "description", mode="before")
    @classmethod
    def _parse_optional_string(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        return value.strip()

    def to_jenkins(self, credential_id: str) -> JenkinsCredentialPayload:
        raise NotImplementedError


class UsernamePasswordContent(_CredentialContent):
    """用户名密码凭据内容."""

    username: StrictStr
    password: StrictStr

    @model_validator(mode="before")
    @classmethod
    def _validate_required_fields(cls, data: Any) -> Any:
        return _require_fields(data, required=("username", "password"))

    def to_jenkins(self, credential_id: str) -> UsernamePasswordCredential:
        return UsernamePasswordCredential(
            id=credential_id,
            username=self.username,
            password=self.password,
            description=self.description,
        )


class SshContent(_CredentialContent):
    """SSH 私钥凭据内容."""

    username: StrictStr
    private_key: StrictStr
    passphrase: StrictStr = ""

    @model_validator(mode="before")
    @classmethod
    def _validate_required_fields(cls, data: Any) -> Any:
        return _require_fields(data, required=("username", "private_key"))

    @field_validator("passphrase", mode="before")
    @classmethod
    def _parse_passphrase(cls, value: Any) -> Any:
        return _none_to_empty(value)

    def to_jenkins(self, credential_id: str) -> SshCredential:
        return SshCredential(
            id=credential_id,
            username=self.username,
            passphrase=self.passphrase,
            private_key=self.private_key,
            description=self.description,
        )


class SecretTextContent(_CredentialContent):
    """Secret text 凭据内容."""

    secret: StrictStr

    @model_validator(mode="before")
    @classmethod
    def _validate_required_fields(cls, data: Any) -> Any:
        return _require_fields(data, required=("secret",))

    def to_jenkins(self, credential_id: str) -> SecretTextCredential:
        return SecretTextCredential(id=credential_id, secret=self.secret, description=self.description)


class KubeconfigContent(_CredentialContent):
    """kubeconfig 凭据内容."""

    content: StrictStr

    @model_validator(mode="before")
    @classmethod
    def _validate_required_fields(cls, data: Any) -> Any:
        return _require_fields(data, required=("content",))

    def to_jenkins(self, credential_id: str) -> KubeconfigCredential:
        return KubeconfigCredential(id=credential_id, content=self.content, description=self.description)


CONTENT_SCHEMAS: dict[str, type[_CredentialContent]] = {
    CredentialType.USERNAME_PASSWORD: UsernamePasswordContent,
    CredentialType.SSH: SshContent,
    CredentialType.SECRET_TEXT: SecretTextContent,
    CredentialType.KUBECONFIG: KubeconfigContent,
}


def decode_credential_content(credential_type: str, content: object) -> _CredentialContent:
    """按凭据类型解码 content.

    Raises:
        ValidationError: 类型未知或 content 结构不合法.

    """
    schema = CONTENT_SCHEMAS.get(credential_type)
    if schema is None:
        raise ValidationError(
            ErrorMessages.CREDENTIAL_TYPE_UNSUPPORTED.format(credential_type=credential_type or "-"),
            message_key="CREDENTIAL_TYPE_UNSUPPORTED",
        )
    return validate_or_raise(schema, content)


__all__ = [
    "CONTENT_SCHEMAS",
    "CredentialRequestPayload",
    "DeleteCredentialPayload",
    "KubeconfigContent",
    "SecretTextContent",
    "SshContent",
    "UsernamePasswordContent",
    "decode_credential_content",
]
