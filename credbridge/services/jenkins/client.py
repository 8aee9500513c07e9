"""Jenkins 凭据接口客户端.

封装 folder 级凭据仓库的增删改查,以及凭据配置页(HTML)的读取.
所有方法对非成功响应统一抛出 JenkinsApiError,状态码透传 Jenkins 返回值.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING
from urllib.parse import quote

import requests
from flask import current_app
from requests.auth import HTTPBasicAuth

from credbridge.constants import HttpHeaders, HttpStatus, normalize_domain
from credbridge.errors import JenkinsApiError
from credbridge.services.jenkins.payloads import wrap_create_request
from credbridge.types.jenkins import CredentialFingerprint, FingerprintUsage, JenkinsCredential, UsageRange
from credbridge.utils.structlog_config import get_jenkins_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flask import Flask

    from credbridge.services.jenkins.payloads import JenkinsCredentialPayload
    from credbridge.settings import Settings

JENKINS_CLIENT_EXTENSION_KEY = "jenkins_client"
_DEPTH_PARAMS = {"depth": "1"}


def _quote_segment(value: str) -> str:
    return quote(value, safe="")


def _parse_fingerprint(raw: object) -> CredentialFingerprint | None:
    if not isinstance(raw, dict):
        return None
    usage: list[FingerprintUsage] = []
    for item in raw.get("usage") or []:
        if not isinstance(item, dict):
            continue
        ranges_holder = item.get("ranges") or {}
        raw_ranges = ranges_holder.get("ranges") if isinstance(ranges_holder, dict) else None
        ranges = [
            UsageRange(start=int(entry.get("start", 0)), end=int(entry.get("end", 0)))
            for entry in raw_ranges or []
            if isinstance(entry, dict)
        ]
        usage.append(FingerprintUsage(name=str(item.get("name") or ""), ranges=ranges))
    return CredentialFingerprint(
        file_name=str(raw.get("fileName") or ""),
        hash=str(raw.get("hash") or ""),
        usage=usage,
    )


def parse_credential(raw: Mapping[str, object], domain: str) -> JenkinsCredential:
    """把 Jenkins JSON 转换为 JenkinsCredential,并回填请求的 domain."""
    return JenkinsCredential(
        id=str(raw.get("id") or ""),
        type_name=str(raw.get("typeName") or ""),
        display_name=str(raw.get("displayName") or ""),
        description=str(raw.get("description") or ""),
        domain=domain,
        fingerprint=_parse_fingerprint(raw.get("fingerprint")),
    )


class JenkinsClient:
    """Jenkins folder 级凭据仓库客户端.

    Attributes:
        base_url: Jenkins 根地址,不含结尾斜杠.
        timeout: 单次请求超时时间(秒).
        use_crumb: POST 前是否先获取 CSRF crumb.

    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str = "",
        api_token: str = "",
        timeout: float = 30.0,
        verify_ssl: bool = True,
        use_crumb: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.use_crumb = use_crumb
        self.session = session or requests.Session()
        self.session.verify = verify_ssl
        if username:
            self.session.auth = HTTPBasicAuth(username, api_token)
        self._logger = get_jenkins_logger()

    # ------------------------------------------------------------------
    # 路径拼装
    # ------------------------------------------------------------------
    @staticmethod
    def _domain_path(folder: str, domain: str) -> str:
        return (
            f"/job/{_quote_segment(folder)}/credentials/store/folder/domain/"
            f"{_quote_segment(normalize_domain(domain))}"
        )

    @classmethod
    def _credential_path(cls, folder: str, domain: str, credential_id: str) -> str:
        return f"{cls._domain_path(folder, domain)}/credential/{_quote_segment(credential_id)}"

    # ------------------------------------------------------------------
    # 底层请求
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        started_at = time.perf_counter()
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=data,
                headers=dict(headers or {}),
                timeout=self.timeout,
                allow_redirects=method == "GET",
            )
        except requests.RequestException as exc:
            self._logger.warning(
                "Jenkins 请求失败",
                module="jenkins",
                method=method,
                path=path,
                error_type=exc.__class__.__name__,
            )
            raise JenkinsApiError(
                f"Jenkins 请求失败: {exc.__class__.__name__}",
                status_code=HttpStatus.BAD_GATEWAY,
                extra={"method": method, "path": path},
            ) from exc

        duration_ms = round((time.perf_counter() - started_at) * 1000)
        self._logger.debug(
            "Jenkins 请求完成",
            module="jenkins",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        # POST 成功后 Jenkins 通常返回 302 跳转,不跟随
        if not response.ok:
            raise JenkinsApiError(
                f"Jenkins 返回错误状态码 {response.status_code}",
                status_code=response.status_code,
                extra={"method": method, "path": path},
            )
        return response

    def _get_json(self, path: str) -> dict[str, object]:
        response = self._request("GET", path, params=_DEPTH_PARAMS)
        try:
            payload = response.json()
        except ValueError as exc:
            raise JenkinsApiError(
                "Jenkins 响应不是合法的 JSON",
                status_code=HttpStatus.BAD_GATEWAY,
                extra={"path": path},
            ) from exc
        if not isinstance(payload, dict):
            raise JenkinsApiError(
                "Jenkins 响应结构异常",
                status_code=HttpStatus.BAD_GATEWAY,
                extra={"path": path},
            )
        return payload

    def _crumb_headers(self) -> dict[str, str]:
        if not self.use_crumb:
            return {}
        response = self._request("GET", "/crumbIssuer/api/json")
        try:
            payload = response.json()
        except ValueError as exc:
            raise JenkinsApiError(
                "Jenkins crumb 响应不是合法的 JSON",
                status_code=HttpStatus.BAD_GATEWAY,
            ) from exc
        field = str(payload.get("crumbRequestField") or HttpHeaders.JENKINS_CRUMB)
        return {field: str(payload.get("crumb") or "")}

    def _post_form(self, path: str, payload: Mapping[str, object] | None = None) -> None:
        data = {"json": json.dumps(payload)} if payload is not None else None
        self._request("POST", path, data=data, headers=self._crumb_headers())

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------
    def get_credential_in_folder(self, domain: str, credential_id: str, folder: str) -> JenkinsCredential:
        """读取 folder 内指定 domain 下的单个凭据."""
        resolved_domain = normalize_domain(domain)
        payload = self._get_json(f"{self._credential_path(folder, resolved_domain, credential_id)}/api/json")
        return parse_credential(payload, resolved_domain)

    def get_credentials_in_folder(self, domain: str, folder: str) -> list[JenkinsCredential]:
        """列出 folder 内指定 domain 下的全部凭据."""
        resolved_domain = normalize_domain(domain)
        payload = self._get_json(f"{self._domain_path(folder, resolved_domain)}/api/json")
        raw_items = payload.get("credentials") or []
        if not isinstance(raw_items, list):
            return []
        return [parse_credential(item, resolved_domain) for item in raw_items if isinstance(item, dict)]

    def get_credential_content_in_folder(self, domain: str, credential_id: str, folder: str) -> str:
        """读取凭据配置页的原始 HTML."""
        response = self._request("GET", f"{self._credential_path(folder, domain, credential_id)}/update")
        return response.text

    # ------------------------------------------------------------------
    # 写入
    # ------------------------------------------------------------------
    def create_credential_in_folder(self, domain: str, credential: JenkinsCredentialPayload, folder: str) -> str:
        """在 folder 的指定 domain 下创建凭据,返回凭据 ID."""
        self._post_form(f"{self._domain_path(folder, domain)}/createCredentials", wrap_create_request(credential))
        return credential.id

    def update_credential_in_folder(
        self,
        domain: str,
        credential_id: str,
        credential: JenkinsCredentialPayload,
        folder: str,
    ) -> str:
        """提交凭据配置更新,返回凭据 ID."""
        self._post_form(f"{self._credential_path(folder, domain, credential_id)}/updateSubmit", credential.to_payload())
        return credential_id

    def delete_credential_in_folder(self, domain: str, credential_id: str, folder: str) -> str:
        """删除凭据,返回凭据 ID."""
        self._post_form(f"{self._credential_path(folder, domain, credential_id)}/doDelete")
        return credential_id


def init_jenkins_client(app: Flask, settings: Settings) -> JenkinsClient:
    """根据 Settings 创建客户端并挂载到 app.extensions."""
    client = JenkinsClient(
        settings.jenkins_url,
        username=settings.jenkins_username,
        api_token=settings.jenkins_api_token,
        timeout=settings.jenkins_timeout_seconds,
        verify_ssl=settings.jenkins_verify_ssl,
        use_crumb=settings.jenkins_use_crumb,
    )
    app.extensions[JENKINS_CLIENT_EXTENSION_KEY] = client
    return client


def get_jenkins_client() -> JenkinsClient:
    """从当前应用获取 Jenkins 客户端."""
    return current_app.extensions[JENKINS_CLIENT_EXTENSION_KEY]


__all__ = [
    "JENKINS_CLIENT_EXTENSION_KEY",
    "JenkinsClient",
    "get_jenkins_client",
    "init_jenkins_client",
    "parse_credential",
]
