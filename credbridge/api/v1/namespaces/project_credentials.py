"""Project credentials namespace.

`/api/v1/projects/<project_id>/credentials` 下的凭据增删改查.
"""

from __future__ import annotations

from typing import Any

from flask import request
from flask_restx import Namespace, fields

from credbridge.api.v1.models.envelope import get_error_envelope_model, make_success_envelope_model
from credbridge.api.v1.resources.base import BaseResource
from credbridge.api.v1.resources.decorators import api_login_required, current_operator_username
from credbridge.api.v1.resources.query_parsers import new_parser, optional_text
from credbridge.constants import ErrorMessages, normalize_domain
from credbridge.constants.system_constants import SuccessMessages
from credbridge.errors import ValidationError
from credbridge.schemas.credentials import CredentialRequestPayload, DeleteCredentialPayload
from credbridge.schemas.validation import validate_or_raise
from credbridge.services.credentials import ProjectCredentialReadService, ProjectCredentialWriteService
from credbridge.services.credentials.credential_response_builder import serialize_credential_view

ns = Namespace("project_credentials", description="项目凭据管理")

ErrorEnvelope = get_error_envelope_model(ns)

CredentialWritePayloadModel = ns.model(
    "ProjectCredentialWritePayload",
    {
        "type": fields.String(
            required=False,
            description="凭据类型,创建时必填,更新时忽略",
            enum=["username_password", "ssh", "secret_text", "kubeconfig"],
        ),
        "domain": fields.String(required=False, description="凭据域,为空表示全局域 `_`"),
        "content": fields.Raw(required=True, description="按类型区分的凭据内容"),
    },
)

CredentialDeletePayloadModel = ns.model(
    "ProjectCredentialDeletePayload",
    {
        "domain": fields.String(required=False, description="凭据域,为空表示全局域 `_`"),
    },
)

CredentialIdData = ns.model(
    "ProjectCredentialIdData",
    {
        "id": fields.String(required=True, description="凭据ID", example="deploy-key"),
    },
)

CredentialViewModel = ns.model(
    "ProjectCredentialView",
    {
        "id": fields.String(required=True),
        "type": fields.String(required=False),
        "display_name": fields.String(),
        "description": fields.String(),
        "domain": fields.String(),
        "fingerprint": fields.Raw(required=False, description="Jenkins 指纹信息"),
        "create_time": fields.String(required=False, description="归属记录创建时间(ISO8601)"),
        "creator": fields.String(required=False),
        "content": fields.Raw(required=False, description="配置页抓取的非敏感字段"),
    },
)

CredentialWriteSuccessEnvelope = make_success_envelope_model(
    ns, "ProjectCredentialWriteSuccessEnvelope", CredentialIdData
)
CredentialDetailSuccessEnvelope = make_success_envelope_model(
    ns, "ProjectCredentialDetailSuccessEnvelope", CredentialViewModel
)
CredentialListSuccessEnvelope = ns.model(
    "ProjectCredentialListSuccessEnvelope",
    {
        "success": fields.Boolean(required=True, example=True),
        "error": fields.Boolean(required=True, example=False),
        "message": fields.String(required=True),
        "timestamp": fields.String(required=True),
        "data": fields.List(fields.Nested(CredentialViewModel)),
    },
)

_list_query_parser = new_parser()
_list_query_parser.add_argument("domain", type=optional_text, location="args", help="凭据域")

_detail_query_parser = new_parser()
_detail_query_parser.add_argument("domain", type=optional_text, location="args", help="凭据域")
_detail_query_parser.add_argument("content", type=optional_text, location="args", help="非空时抓取凭据内容")


def _parse_json_object(*, allow_empty: bool = False) -> dict[str, Any]:
    if allow_empty and not request.get_data(cache=True):
        return {}
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError(ErrorMessages.JSON_REQUIRED, message_key="JSON_REQUIRED")
    return payload


@ns.route("/<string:project_id>/credentials")
class ProjectCredentialsResource(BaseResource):
    method_decorators = [api_login_required]

    @ns.expect(_list_query_parser)
    @ns.response(200, "OK", CredentialListSuccessEnvelope)
    @ns.response(401, "Unauthorized", ErrorEnvelope)
    @ns.response(403, "Forbidden", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def get(self, project_id: str):
        parsed = _list_query_parser.parse_args()
        domain = parsed.get("domain")
        operator = current_operator_username()

        def _execute():
            views = ProjectCredentialReadService().list_credentials(project_id, operator=operator, domain=domain)
            return self.success(
                data=[serialize_credential_view(view) for view in views],
                message=SuccessMessages.OPERATION_SUCCESS,
            )

        return self.safe_call(
            _execute,
            module="credentials",
            action="list_project_credentials",
            public_error="获取项目凭据列表失败",
            context={"project_id": project_id, "domain": normalize_domain(domain)},
        )

    @ns.expect(CredentialWritePayloadModel, validate=False)
    @ns.response(200, "OK", CredentialWriteSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(401, "Unauthorized", ErrorEnvelope)
    @ns.response(403, "Forbidden", ErrorEnvelope)
    @ns.response(409, "Conflict", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def post(self, project_id: str):
        operator = current_operator_username()

        def _execute():
            payload = validate_or_raise(CredentialRequestPayload, _parse_json_object())
            credential_id = ProjectCredentialWriteService().create(project_id, payload, operator=operator)
            return self.success(data={"id": credential_id}, message=SuccessMessages.CREDENTIAL_CREATED)

        return self.safe_call(
            _execute,
            module="credentials",
            action="create_project_credential",
            public_error="创建项目凭据失败",
            context={"project_id": project_id},
        )


@ns.route("/<string:project_id>/credentials/<string:credential_id>")
class ProjectCredentialDetailResource(BaseResource):
    method_decorators = [api_login_required]

    @ns.expect(_detail_query_parser)
    @ns.response(200, "OK", CredentialDetailSuccessEnvelope)
    @ns.response(401, "Unauthorized", ErrorEnvelope)
    @ns.response(403, "Forbidden", ErrorEnvelope)
    @ns.response(404, "Not Found", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def get(self, project_id: str, credential_id: str):
        parsed = _detail_query_parser.parse_args()
        domain = parsed.get("domain")
        include_content = bool(parsed.get("content"))
        operator = current_operator_username()

        def _execute():
            view = ProjectCredentialReadService().get_credential(
                project_id,
                credential_id,
                operator=operator,
                domain=domain,
                include_content=include_content,
            )
            return self.success(data=serialize_credential_view(view), message=SuccessMessages.OPERATION_SUCCESS)

        return self.safe_call(
            _execute,
            module="credentials",
            action="get_project_credential",
            public_error="获取项目凭据详情失败",
            context={
                "project_id": project_id,
                "credential_id": credential_id,
                "domain": normalize_domain(domain),
                "include_content": include_content,
            },
        )

    @ns.expect(CredentialWritePayloadModel, validate=False)
    @ns.response(200, "OK", CredentialWriteSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(401, "Unauthorized", ErrorEnvelope)
    @ns.response(403, "Forbidden", ErrorEnvelope)
    @ns.response(404, "Not Found", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def put(self, project_id: str, credential_id: str):
        operator = current_operator_username()

        def _execute():
            payload = validate_or_raise(CredentialRequestPayload, _parse_json_object())
            updated_id = ProjectCredentialWriteService().update(project_id, credential_id, payload, operator=operator)
            return self.success(data={"id": updated_id}, message=SuccessMessages.CREDENTIAL_UPDATED)

        return self.safe_call(
            _execute,
            module="credentials",
            action="update_project_credential",
            public_error="更新项目凭据失败",
            context={"project_id": project_id, "credential_id": credential_id},
        )

    @ns.expect(CredentialDeletePayloadModel, validate=False)
    @ns.response(200, "OK", CredentialWriteSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(401, "Unauthorized", ErrorEnvelope)
    @ns.response(403, "Forbidden", ErrorEnvelope)
    @ns.response(404, "Not Found", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def delete(self, project_id: str, credential_id: str):
        operator = current_operator_username()

        def _execute():
            payload = validate_or_raise(DeleteCredentialPayload, _parse_json_object(allow_empty=True))
            deleted_id = ProjectCredentialWriteService().delete(project_id, credential_id, payload, operator=operator)
            return self.success(data={"id": deleted_id}, message=SuccessMessages.CREDENTIAL_DELETED)

        return self.safe_call(
            _execute,
            module="credentials",
            action="delete_project_credential",
            public_error="删除项目凭据失败",
            context={"project_id": project_id, "credential_id": credential_id},
        )
