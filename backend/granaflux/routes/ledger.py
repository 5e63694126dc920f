# Overview: Flask API routes for revenues and expenses; both resources share one set of handlers.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth
from ..pagination import page_params
from ..services import ledger_service
from ..services.ledger_service import EXPENSES, REVENUES, LedgerKind
from ..validation import (
    DATETIME,
    MONEY,
    REFERENCE,
    TEXT,
    FieldRule,
    ModelValidationPolicy,
    query_datetime,
    query_int,
    validate_payload,
)

revenues_bp = Blueprint("revenues", __name__, url_prefix="/api/revenues")
expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")

_FIELD_MESSAGES = {
    "description": "Descrição é obrigatória",
    "amount": "Valor deve ser numérico",
    "date": "Data inválida",
    "categoryId": "Categoria é obrigatória",
}

LEDGER_CREATE_POLICY = ModelValidationPolicy(fields={
    "description": FieldRule(TEXT, required=True, max_length=255, message=_FIELD_MESSAGES["description"]),
    "amount": FieldRule(MONEY, attr="amount_cents", required=True, minimum=0, message=_FIELD_MESSAGES["amount"]),
    "date": FieldRule(DATETIME, message=_FIELD_MESSAGES["date"]),
    "categoryId": FieldRule(REFERENCE, required=True, message=_FIELD_MESSAGES["categoryId"]),
    "notes": FieldRule(TEXT),
    "attachment": FieldRule(TEXT, max_length=500),
})

LEDGER_UPDATE_POLICY = ModelValidationPolicy(fields={
    "description": FieldRule(TEXT, nullable=False, max_length=255, message=_FIELD_MESSAGES["description"]),
    "amount": FieldRule(MONEY, attr="amount_cents", nullable=False, minimum=0, message=_FIELD_MESSAGES["amount"]),
    "date": FieldRule(DATETIME, nullable=False, message=_FIELD_MESSAGES["date"]),
    "categoryId": FieldRule(REFERENCE, nullable=False, message=_FIELD_MESSAGES["categoryId"]),
    "notes": FieldRule(TEXT),
    "attachment": FieldRule(TEXT, max_length=500),
})


def _register(bp: Blueprint, kind: LedgerKind, deleted_message: str) -> None:
    @bp.get("")
    @require_auth
    def list_entries(ctx):
        """
        Query params: page, limit, categoryId, startDate, endDate (ISO-8601).
        """
        page, limit = page_params(request.args)
        result = ledger_service.list_entries(
            kind,
            ctx.company_id,
            page=page,
            limit=limit,
            category_id=query_int(request.args, "categoryId", minimum=1),
            start_date=query_datetime(request.args, "startDate"),
            end_date=query_datetime(request.args, "endDate"),
        )
        return jsonify(result), 200

    @bp.get("/<int:entry_id>")
    @require_auth
    def get_entry(entry_id: int, ctx):
        return jsonify(ledger_service.get_entry(kind, ctx.company_id, entry_id).to_dict()), 200

    @bp.post("")
    @require_auth
    def create_entry(ctx):
        patch = validate_payload(payload=request.get_json(silent=True), policy=LEDGER_CREATE_POLICY, partial=False)
        entry = ledger_service.create_entry(kind, ctx.company_id, ctx.user_id, patch)
        return jsonify(entry.to_dict()), 201

    @bp.put("/<int:entry_id>")
    @require_auth
    def update_entry(entry_id: int, ctx):
        patch = validate_payload(payload=request.get_json(silent=True), policy=LEDGER_UPDATE_POLICY, partial=True)
        entry = ledger_service.update_entry(kind, ctx.company_id, entry_id, patch, ctx.user_id)
        return jsonify(entry.to_dict()), 200

    @bp.delete("/<int:entry_id>")
    @require_auth
    def delete_entry(entry_id: int, ctx):
        ledger_service.delete_entry(kind, ctx.company_id, entry_id, ctx.user_id)
        return jsonify({"message": deleted_message}), 200


_register(revenues_bp, REVENUES, "Receita deletada com sucesso")
_register(expenses_bp, EXPENSES, "Despesa deletada com sucesso")
