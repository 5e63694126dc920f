# Overview: Flask API routes for categories.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth
from ..models.ledger import CATEGORY_TYPES
from ..services import category_service
from ..validation import COLOR, ENUM, TEXT, FieldRule, ModelValidationPolicy, validate_payload

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")

_TYPE_MESSAGE = "Tipo deve ser REVENUE, EXPENSE, BOTH ou PRODUCT"
_COLOR_MESSAGE = "Cor deve estar no formato hexadecimal (#RRGGBB)"

CATEGORY_CREATE_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, required=True, max_length=120, message="Nome é obrigatório"),
    "type": FieldRule(ENUM, required=True, choices=CATEGORY_TYPES, message=_TYPE_MESSAGE),
    "description": FieldRule(TEXT),
    "color": FieldRule(COLOR, message=_COLOR_MESSAGE),
})

CATEGORY_UPDATE_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, nullable=False, max_length=120, message="Nome não pode estar vazio"),
    "type": FieldRule(ENUM, nullable=False, choices=CATEGORY_TYPES, message=_TYPE_MESSAGE),
    "description": FieldRule(TEXT),
    "color": FieldRule(COLOR, message=_COLOR_MESSAGE),
})


@categories_bp.get("")
@require_auth
def list_categories(ctx):
    """
    Query params:
    - type: REVENUE | EXPENSE | BOTH | PRODUCT (optional, unknown values are ignored)
    """
    category_type = (request.args.get("type") or "").upper()
    if category_type not in CATEGORY_TYPES:
        category_type = None
    return jsonify(category_service.list_categories(ctx.company_id, category_type)), 200


@categories_bp.get("/<int:category_id>")
@require_auth
def get_category(category_id: int, ctx):
    category = category_service.get_category(ctx.company_id, category_id)
    return jsonify(category_service.category_detail(category)), 200


@categories_bp.post("")
@require_auth
def create_category(ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=CATEGORY_CREATE_POLICY, partial=False)
    category = category_service.create_category(ctx.company_id, patch, ctx.user_id)
    return jsonify(category_service.category_detail(category)), 201


@categories_bp.put("/<int:category_id>")
@require_auth
def update_category(category_id: int, ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=CATEGORY_UPDATE_POLICY, partial=True)
    category = category_service.update_category(ctx.company_id, category_id, patch, ctx.user_id)
    return jsonify(category_service.category_detail(category)), 200


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category(category_id: int, ctx):
    category_service.delete_category(ctx.company_id, category_id, ctx.user_id)
    return jsonify({"message": "Categoria deletada com sucesso"}), 200
