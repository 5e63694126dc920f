# Overview: Flask API routes for sales; creation, queries and the per-seller report.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import INTERNAL_ERROR_MESSAGE, ServiceError, error_response
from ..models.auth import ROLE_ADMIN, ROLE_CASHIER, ROLE_OWNER
from ..pagination import page_params
from ..services import reporting_service, sales_service
from ..services.sales_service import SaleError
from ..validation import query_datetime, query_int

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN, ROLE_CASHIER)
def create_sale(ctx):
    """
    Create a sale and apply its stock, revenue and commission effects.

    Body: {clientId?, clientName?, items: [{productId?, itemName, description?,
    quantity, unitPrice}], paymentMethod, discount?, notes?}
    """
    try:
        sale = sales_service.create_sale(
            company_id=ctx.company_id,
            seller=ctx.user,
            payload=request.get_json(silent=True),
        )
        return jsonify(sale.to_dict(include_relations=True)), 201

    except SaleError as e:
        current_app.logger.warning("Sale rejected user_id=%s reason=%s", ctx.user_id, e.message)
        return error_response(e)
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create sale user_id=%s", ctx.user_id)
        return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500


@sales_bp.get("")
@require_auth
def list_sales(ctx):
    """
    Query params: page, limit, sellerId, startDate, endDate (ISO-8601).
    """
    page, limit = page_params(request.args)
    result = sales_service.list_sales(
        ctx.company_id,
        page=page,
        limit=limit,
        seller_id=query_int(request.args, "sellerId", minimum=1),
        start=query_datetime(request.args, "startDate"),
        end=query_datetime(request.args, "endDate"),
    )
    return jsonify(result), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale(sale_id: int, ctx):
    sale = sales_service.get_sale(ctx.company_id, sale_id)
    return jsonify(sale.to_dict(include_relations=True)), 200


@sales_bp.get("/reports/by-seller")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def sales_by_seller(ctx):
    start, end = reporting_service.resolve_period(
        month=query_int(request.args, "month"),
        year=query_int(request.args, "year"),
        start=query_datetime(request.args, "startDate"),
        end=query_datetime(request.args, "endDate"),
    )
    return jsonify(reporting_service.sales_by_seller(ctx.company_id, start=start, end=end)), 200
