"""Jenkins 凭据插件的 stapler JSON 载荷.

每种凭据类型一个 dataclass,`to_payload()` 输出 `createCredentials`/`updateSubmit`
所需的 JSON 结构.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from credbridge.constants import GLOBAL_SCOPE, StaplerClass

if TYPE_CHECKING:
    from credbridge.types.structures import JsonDict


@dataclass(slots=True)
class UsernamePasswordCredential:
    """用户名密码凭据."""

    id: str
    username: str
    password: str
    description: str = ""
    scope: str = GLOBAL_SCOPE

    def to_payload(self) -> JsonDict:
        return {
            "scope": self.scope,
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "description": self.description,
            "stapler-class": StaplerClass.USERNAME_PASSWORD,
        }


@dataclass(slots=True)
class SshCredential:
    """SSH 私钥凭据,私钥以 DirectEntry 方式提交."""

    id: str
    username: str
    private_key: str
    passphrase: str = ""
    description: str = ""
    scope: str = GLOBAL_SCOPE

    def to_payload(self) -> JsonDict:
        return {
            "scope": self.scope,
            "id": self.id,
            "username": self.username,
            "passphrase": self.passphrase,
            "privateKeySource": {
                "stapler-class": StaplerClass.SSH_DIRECT_ENTRY,
                "privateKey": self.private_key,
            },
            "description": self.description,
            "stapler-class": StaplerClass.SSH,
        }


@dataclass(slots=True)
class SecretTextCredential:
    """Secret text 凭据."""

    id: str
    secret: str
    description: str = ""
    scope: str = GLOBAL_SCOPE

    def to_payload(self) -> JsonDict:
        return {
            "scope": self.scope,
            "id": self.id,
            "secret": self.secret,
            "description": self.description,
            "stapler-class": StaplerClass.SECRET_TEXT,
        }


@dataclass(slots=True)
class KubeconfigCredential:
    """kubeconfig 凭据,内容以 DirectEntry 方式提交."""

    id: str
    content: str
    description: str = ""
    scope: str = GLOBAL_SCOPE

    def to_payload(self) -> JsonDict:
        return {
            "scope": self.scope,
            "id": self.id,
            "description": self.description,
            "kubeconfigSource": {
                "stapler-class": StaplerClass.KUBECONFIG_DIRECT_ENTRY,
                "content": self.content,
            },
            "stapler-class": StaplerClass.KUBECONFIG,
        }


JenkinsCredentialPayload = UsernamePasswordCredential | SshCredential | SecretTextCredential | KubeconfigCredential


def wrap_create_request(credential: JenkinsCredentialPayload) -> JsonDict:
    """`createCredentials` 要求凭据包在 `credentials` 字段下."""
    return {"credentials": credential.to_payload()}


__all__ = [
    "JenkinsCredentialPayload",
    "KubeconfigCredential",
    "SecretTextCredential",
    "SshCredential",
    "UsernamePasswordCredential",
    "wrap_create_request",
]
