"""凭据配置页(HTML)解析.

Jenkins 的 JSON 接口不返回用户名、私钥、kubeconfig 等字段,
需要从 `.../credential/<id>/update` 页面的表单中抓取.
密码、passphrase、secret 等敏感字段一律不抓取.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from credbridge.constants import CredentialType
from credbridge.types.credentials import CredentialContent

_ID_SELECTOR = "input[name*=id][type=text]"
_DESCRIPTION_SELECTOR = "input[name*=description]"
_USERNAME_SELECTOR = "input[name*=username]"
_PRIVATE_KEY_SELECTOR = "textarea[name*=privateKey]"
_KUBECONFIG_SELECTOR = "textarea[name*=content]"


def _last_match(soup: BeautifulSoup, selector: str) -> Tag | None:
    # 同名字段出现多次时以最后一个为准
    matches = soup.select(selector)
    return matches[-1] if matches else None


def _attr_value(soup: BeautifulSoup, selector: str) -> str:
    node = _last_match(soup, selector)
    if node is None:
        return ""
    value = node.get("value")
    if isinstance(value, list):
        return " ".join(value)
    return value or ""


def _text_value(soup: BeautifulSoup, selector: str) -> str:
    node = _last_match(soup, selector)
    return node.get_text() if node is not None else ""


def parse_credential_content(html: str, credential_type: str | None) -> CredentialContent:
    """按凭据类型从配置页中抓取非敏感字段.

    Args:
        html: 凭据配置页的原始 HTML.
        credential_type: 凭据类型标签,未知类型只抓取 id 与 description.

    Returns:
        CredentialContent: 抓取结果,未出现的字段为空串或 None.

    """
    soup = BeautifulSoup(html or "", "lxml")
    content = CredentialContent(
        id=_attr_value(soup, _ID_SELECTOR),
        description=_attr_value(soup, _DESCRIPTION_SELECTOR),
    )

    if credential_type == CredentialType.USERNAME_PASSWORD:
        content.username = _attr_value(soup, _USERNAME_SELECTOR)
    elif credential_type == CredentialType.SSH:
        content.username = _attr_value(soup, _USERNAME_SELECTOR)
        content.private_key = _text_value(soup, _PRIVATE_KEY_SELECTOR)
    elif credential_type == CredentialType.KUBECONFIG:
        content.content = _text_value(soup, _KUBECONFIG_SELECTOR)

    return content


__all__ = ["parse_credential_content"]
