# Overview: Flask API routes for the caller's company profile.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models.auth import ROLE_ADMIN, ROLE_OWNER
from ..services import company_service
from ..validation import EMAIL, REFERENCE, TEXT, FieldRule, ModelValidationPolicy, validate_payload

companies_bp = Blueprint("companies", __name__, url_prefix="/api/companies")

COMPANY_POLICY = ModelValidationPolicy(fields={
    "name": FieldRule(TEXT, nullable=False, max_length=255, message="Nome não pode estar vazio"),
    "cnpj": FieldRule(TEXT, max_length=18),
    "email": FieldRule(EMAIL),
    "phone": FieldRule(TEXT, max_length=32),
    "address": FieldRule(TEXT, max_length=255),
    "city": FieldRule(TEXT, max_length=120),
    "state": FieldRule(TEXT, max_length=64),
    "zipCode": FieldRule(TEXT, max_length=16),
    "defaultSalesCategoryId": FieldRule(REFERENCE),
})


@companies_bp.get("/me")
@require_auth
def my_company(ctx):
    company = company_service.get_company(ctx.company_id)
    return jsonify(company.to_dict()), 200


@companies_bp.put("/me")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def update_my_company(ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=COMPANY_POLICY, partial=True)
    company = company_service.update_company(ctx.company_id, patch, ctx.user_id)
    return jsonify(company.to_dict()), 200
