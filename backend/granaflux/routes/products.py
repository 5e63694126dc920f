# Overview: Flask API routes for products and manual stock adjustments.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models.auth import ROLE_ADMIN, ROLE_CASHIER, ROLE_OWNER
from ..models.inventory import MOVEMENT_TYPES
from ..pagination import page_params
from ..services import inventory_service, products_service
from ..validation import (
    ENUM,
    INTEGER,
    MONEY,
    REFERENCE,
    TEXT,
    FieldRule,
    ModelValidationPolicy,
    query_int,
    validate_payload,
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")

PRODUCT_CREATE_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, required=True, max_length=255, message="Nome é obrigatório"),
    "model": FieldRule(TEXT, max_length=120),
    "description": FieldRule(TEXT),
    "price": FieldRule(MONEY, attr="price_cents", required=True, minimum=0,
                       message="Preço deve ser um número maior ou igual a 0"),
    "stock": FieldRule(INTEGER, minimum=0, message="Estoque deve ser um número inteiro maior ou igual a 0"),
    "minStock": FieldRule(INTEGER, minimum=0,
                          message="Estoque mínimo deve ser um número inteiro maior ou igual a 0"),
    "categoryId": FieldRule(REFERENCE, required=True, message="Categoria é obrigatória"),
})

# No stock field: stock only changes through POST /<id>/stock
PRODUCT_UPDATE_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, nullable=False, max_length=255, message="Nome não pode estar vazio"),
    "model": FieldRule(TEXT, max_length=120),
    "description": FieldRule(TEXT),
    "price": FieldRule(MONEY, attr="price_cents", nullable=False, minimum=0,
                       message="Preço deve ser um número maior ou igual a 0"),
    "minStock": FieldRule(INTEGER, nullable=False, minimum=0,
                          message="Estoque mínimo deve ser um número inteiro maior ou igual a 0"),
    "categoryId": FieldRule(REFERENCE, nullable=False, message="Categoria inválida"),
})

STOCK_POLICY = ModelValidationPolicy(fields={
    "quantity": FieldRule(INTEGER, required=True, message="Quantidade deve ser um número inteiro"),
    "type": FieldRule(ENUM, attr="movement_type", required=True, choices=MOVEMENT_TYPES,
                      message="Tipo deve ser IN, OUT ou ADJUSTMENT"),
    "reason": FieldRule(TEXT, required=True, max_length=255, message="Motivo é obrigatório"),
})


@products_bp.get("")
@require_auth
def list_products(ctx):
    """
    Query params:
    - page, limit
    - categoryId: only products of this category
    - lowStock=true: only products at or below minStock
    """
    page, limit = page_params(request.args)
    result = products_service.list_products(
        ctx.company_id,
        page=page,
        limit=limit,
        category_id=query_int(request.args, "categoryId", minimum=1),
        low_stock=request.args.get("lowStock", "").lower() == "true",
    )
    return jsonify(result), 200


@products_bp.get("/<int:product_id>")
@require_auth
def get_product(product_id: int, ctx):
    product = products_service.get_product(ctx.company_id, product_id)
    return jsonify(products_service.product_detail(product)), 200


@products_bp.post("")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN, ROLE_CASHIER)
def create_product(ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=PRODUCT_CREATE_POLICY, partial=False)
    product = products_service.create_product(ctx.company_id, patch, ctx.user_id)
    return jsonify(product.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def update_product(product_id: int, ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=PRODUCT_UPDATE_POLICY, partial=True)
    product = products_service.update_product(ctx.company_id, product_id, patch, ctx.user_id)
    return jsonify(product.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def delete_product(product_id: int, ctx):
    products_service.delete_product(ctx.company_id, product_id, ctx.user_id)
    return jsonify({"message": "Produto deletado com sucesso"}), 200


@products_bp.post("/<int:product_id>/stock")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN, ROLE_CASHIER)
def adjust_stock(product_id: int, ctx):
    """
    Body: {quantity, type: IN | OUT | ADJUSTMENT, reason}

    IN adds, OUT subtracts, ADJUSTMENT sets the absolute value.
    """
    patch = validate_payload(payload=request.get_json(silent=True), policy=STOCK_POLICY, partial=False)
    product = inventory_service.adjust_stock(
        company_id=ctx.company_id,
        product_id=product_id,
        movement_type=patch["movement_type"],
        quantity=patch["quantity"],
        reason=patch["reason"],
        user_id=ctx.user_id,
    )
    return jsonify(product.to_dict()), 200
