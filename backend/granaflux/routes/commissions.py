# Overview: Flask API routes for commissions; listings, per-user report and rate configuration.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models.auth import COMMISSIONED_ROLES, ROLE_ADMIN, ROLE_OWNER
from ..pagination import page_params
from ..services import commission_service, reporting_service
from ..validation import NUMBER, FieldRule, ModelValidationPolicy, query_datetime, query_int, validate_payload

commissions_bp = Blueprint("commissions", __name__, url_prefix="/api/commissions")

RATE_POLICY = ModelValidationPolicy(fields={
    "percentage": FieldRule(
        NUMBER,
        required=True,
        minimum=0,
        maximum=commission_service.MAX_PERCENTAGE,
        message="Percentual deve ser um número entre 0 e 50",
    ),
})


def _period():
    return reporting_service.resolve_period(
        month=query_int(request.args, "month"),
        year=query_int(request.args, "year"),
        start=query_datetime(request.args, "startDate"),
        end=query_datetime(request.args, "endDate"),
    )


@commissions_bp.get("")
@require_auth
def list_commissions(ctx):
    """
    Query params: page, limit, userId, month + year (or startDate/endDate).

    CASHIER and USER callers always get their own commissions; userId is ignored.
    """
    page, limit = page_params(request.args)
    if ctx.role in COMMISSIONED_ROLES:
        user_id = ctx.user_id
    else:
        user_id = query_int(request.args, "userId", minimum=1)

    start, end = _period()
    result = commission_service.list_commissions(
        ctx.company_id, page=page, limit=limit, user_id=user_id, start=start, end=end
    )
    return jsonify(result), 200


@commissions_bp.get("/reports/by-user")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def commissions_by_user(ctx):
    start, end = _period()
    return jsonify(reporting_service.commissions_by_user(ctx.company_id, start=start, end=end)), 200


@commissions_bp.get("/config/<int:user_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def get_rate(user_id: int, ctx):
    return jsonify(commission_service.get_rate(ctx.company_id, user_id)), 200


@commissions_bp.put("/config/<int:user_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def set_rate(user_id: int, ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=RATE_POLICY, partial=False)
    payload = commission_service.set_rate(ctx.company_id, user_id, patch["percentage"], ctx.user_id)
    return jsonify({"message": "Configuração de comissão atualizada", **payload}), 200
