# Overview: Flask API routes for clients (CRM).

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models.auth import ROLE_ADMIN, ROLE_OWNER
from ..pagination import page_params
from ..services import client_service
from ..validation import EMAIL, TEXT, FieldRule, ModelValidationPolicy, validate_payload

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")

_OPTIONAL_FIELDS = {
    "email": FieldRule(EMAIL, message="Email inválido"),
    "phone": FieldRule(TEXT, max_length=32),
    "cpf": FieldRule(TEXT, min_length=11, max_length=14, message="CPF inválido"),
    "cnpj": FieldRule(TEXT, min_length=14, max_length=18, message="CNPJ inválido"),
    "address": FieldRule(TEXT, max_length=255),
    "city": FieldRule(TEXT, max_length=120),
    "state": FieldRule(TEXT, max_length=64),
    "zipCode": FieldRule(TEXT, max_length=16),
    "notes": FieldRule(TEXT),
}

CLIENT_CREATE_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, required=True, max_length=255, message="Nome é obrigatório"),
    **_OPTIONAL_FIELDS,
})

CLIENT_UPDATE_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, nullable=False, max_length=255, message="Nome não pode estar vazio"),
    **_OPTIONAL_FIELDS,
})


def _normalize_blank_documents(payload):
    # Blank email/cpf/cnpj are stored as NULL
    if isinstance(payload, dict):
        for key in ("email", "cpf", "cnpj"):
            if isinstance(payload.get(key), str) and not payload[key].strip():
                payload[key] = None
    return payload


@clients_bp.get("")
@require_auth
def list_clients(ctx):
    """
    Query params: page, limit, search (name, email, CPF or CNPJ).
    """
    page, limit = page_params(request.args)
    result = client_service.list_clients(
        ctx.company_id, page=page, limit=limit, search=request.args.get("search")
    )
    return jsonify(result), 200


@clients_bp.get("/search/document")
@require_auth
def find_by_document(ctx):
    client = client_service.find_by_document(ctx.company_id, request.args.get("document"))
    return jsonify(client.to_dict()), 200


@clients_bp.get("/<int:client_id>")
@require_auth
def get_client(client_id: int, ctx):
    client = client_service.get_client(ctx.company_id, client_id)
    return jsonify(client_service.client_detail(client)), 200


@clients_bp.post("")
@require_auth
def create_client(ctx):
    payload = _normalize_blank_documents(request.get_json(silent=True))
    patch = validate_payload(payload=payload, policy=CLIENT_CREATE_POLICY, partial=False)
    client = client_service.create_client(ctx.company_id, patch, ctx.user_id)
    return jsonify(client.to_dict(sales_count=0)), 201


@clients_bp.put("/<int:client_id>")
@require_auth
def update_client(client_id: int, ctx):
    payload = _normalize_blank_documents(request.get_json(silent=True))
    patch = validate_payload(payload=payload, policy=CLIENT_UPDATE_POLICY, partial=True)
    client = client_service.update_client(ctx.company_id, client_id, patch, ctx.user_id)
    return jsonify(client.to_dict()), 200


@clients_bp.delete("/<int:client_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def delete_client(client_id: int, ctx):
    client_service.delete_client(ctx.company_id, client_id, ctx.user_id)
    return jsonify({"message": "Cliente deletado com sucesso"}), 200
