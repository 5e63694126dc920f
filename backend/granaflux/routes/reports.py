# Overview: Flask API routes for financial reports.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth
from ..services import reporting_service
from ..time_utils import utcnow
from ..validation import query_datetime, query_int

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
def dashboard(ctx):
    """
    Query params: month + year, or startDate/endDate (ISO-8601). Unbounded when absent.
    """
    start, end = reporting_service.resolve_period(
        month=query_int(request.args, "month"),
        year=query_int(request.args, "year"),
        start=query_datetime(request.args, "startDate"),
        end=query_datetime(request.args, "endDate"),
    )
    return jsonify(reporting_service.dashboard(ctx.company_id, start=start, end=end)), 200


@reports_bp.get("/monthly")
@require_auth
def monthly(ctx):
    year = query_int(request.args, "year", minimum=1970, maximum=9999) or utcnow().year
    return jsonify(reporting_service.monthly(ctx.company_id, year=year)), 200


@reports_bp.get("/cash-flow")
@require_auth
def cash_flow(ctx):
    report = reporting_service.cash_flow(
        ctx.company_id,
        start=query_datetime(request.args, "startDate"),
        end=query_datetime(request.args, "endDate"),
    )
    return jsonify(report), 200
