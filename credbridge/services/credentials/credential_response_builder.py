"""项目凭据对外视图的组装与序列化."""

from __future__ import annotations

from typing import TYPE_CHECKING

from credbridge.constants import CredentialType
from credbridge.types.credentials import ProjectCredentialView
from credbridge.utils.time_utils import time_utils

if TYPE_CHECKING:
    from credbridge.models.project_credential import ProjectCredential
    from credbridge.types.credentials import CredentialContent
    from credbridge.types.jenkins import CredentialFingerprint, JenkinsCredential
    from credbridge.types.structures import JsonDict


def build_credential_view(
    remote: JenkinsCredential,
    record: ProjectCredential | None = None,
) -> ProjectCredentialView:
    """合并 Jenkins 凭据与本地归属记录.

    归属记录缺失时(例如凭据直接在 Jenkins 中创建)不返回 create_time/creator.
    """
    view = ProjectCredentialView(
        id=remote.id,
        type=CredentialType.from_jenkins_type_name(remote.type_name),
        display_name=remote.display_name,
        description=remote.description,
        domain=remote.domain,
        fingerprint=remote.fingerprint,
    )
    if record is not None:
        view.create_time = record.create_time
        view.creator = record.creator
    return view


def _serialize_fingerprint(fingerprint: CredentialFingerprint) -> JsonDict:
    return {
        "file_name": fingerprint.file_name,
        "hash": fingerprint.hash,
        "usage": [
            {
                "name": usage.name,
                "ranges": {"ranges": [{"start": item.start, "end": item.end} for item in usage.ranges]},
            }
            for usage in fingerprint.usage
        ],
    }


def _serialize_content(content: CredentialContent) -> JsonDict:
    payload: JsonDict = {"id": content.id, "description": content.description}
    if content.username is not None:
        payload["username"] = content.username
    if content.private_key is not None:
        payload["private_key"] = content.private_key
    if content.content is not None:
        payload["content"] = content.content
    return payload


def serialize_credential_view(view: ProjectCredentialView) -> JsonDict:
    """转换为响应 JSON,空的可选字段不输出."""
    payload: JsonDict = {
        "id": view.id,
        "type": view.type,
        "display_name": view.display_name,
        "description": view.description,
        "domain": view.domain,
    }
    if view.fingerprint is not None:
        payload["fingerprint"] = _serialize_fingerprint(view.fingerprint)
    if view.create_time is not None:
        payload["create_time"] = time_utils.to_json_serializable(view.create_time)
    if view.creator:
        payload["creator"] = view.creator
    payload["content"] = _serialize_content(view.content) if view.content is not None else None
    return payload


__all__ = ["build_credential_view", "serialize_credential_view"]
