"""凭据类型常量.

统一维护对外类型标签、Jenkins typeName 与 stapler-class 之间的映射.
"""

from __future__ import annotations

from typing import ClassVar


class CredentialType:
    """凭据类型标签."""

    USERNAME_PASSWORD = "username_password"
    SSH = "ssh"
    SECRET_TEXT = "secret_text"
    KUBECONFIG = "kubeconfig"

    ALL: ClassVar[tuple[str, ...]] = (USERNAME_PASSWORD, SSH, SECRET_TEXT, KUBECONFIG)

    # Jenkins 接口返回的 typeName -> 类型标签
    JENKINS_TYPE_NAMES: ClassVar[dict[str, str]] = {
        "Username with password": USERNAME_PASSWORD,
        "SSH Username with private key": SSH,
        "Secret text": SECRET_TEXT,
        "Kubernetes configuration (kubeconfig)": KUBECONFIG,
    }

    @classmethod
    def from_jenkins_type_name(cls, type_name: str | None) -> str | None:
        """根据 Jenkins typeName 推导类型标签,无法识别时返回 None."""
        if not type_name:
            return None
        return cls.JENKINS_TYPE_NAMES.get(type_name.strip())


class StaplerClass:
    """Jenkins 凭据插件使用的 stapler-class."""

    USERNAME_PASSWORD = "com.cloudbees.plugins.credentials.impl.UsernamePasswordCredentialsImpl"
    SSH = "com.cloudbees.jenkins.plugins.sshcredentials.impl.BasicSSHUserPrivateKey"
    SSH_DIRECT_ENTRY = "com.cloudbees.jenkins.plugins.sshcredentials.impl.BasicSSHUserPrivateKey$DirectEntryPrivateKeySource"
    SECRET_TEXT = "org.jenkinsci.plugins.plaincredentials.impl.StringCredentialsImpl"
    KUBECONFIG = "com.microsoft.jenkins.kubernetes.credentials.KubeconfigCredentials"
    KUBECONFIG_DIRECT_ENTRY = (
        "com.microsoft.jenkins.kubernetes.credentials.KubeconfigCredentials$DirectEntryKubeconfigSource"
    )


GLOBAL_SCOPE = "GLOBAL"
DEFAULT_DOMAIN = "_"


def normalize_domain(domain: str | None) -> str:
    """空 domain 统一回落为全局域 `_`."""
    cleaned = (domain or "").strip()
    return cleaned or DEFAULT_DOMAIN


__all__ = [
    "DEFAULT_DOMAIN",
    "GLOBAL_SCOPE",
    "CredentialType",
    "StaplerClass",
    "normalize_domain",
]
