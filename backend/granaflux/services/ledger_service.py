# Overview: Service-layer operations for revenues and expenses (direct ledger entry).

"""
Revenues and expenses share one implementation, parameterised by LedgerKind.

Category compatibility:
- revenues may only be filed under REVENUE or BOTH categories
- expenses may only be filed under EXPENSE or BOTH categories

Revenues derived from a sale (sale_id set) are part of that sale's record
and cannot be edited or deleted through the ledger endpoints.
"""

from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..errors import BusinessRuleError
from ..extensions import db
from ..models import Category, Expense, Revenue
from ..models.ledger import EXPENSE_CATEGORY_TYPES, REVENUE_CATEGORY_TYPES
from ..pagination import paginate
from ..time_utils import utcnow
from .tenant_service import get_scoped, scoped_query


@dataclass(frozen=True)
class LedgerKind:
    model: type
    category_types: tuple[str, ...]
    collection_key: str
    not_found_message: str
    label: str


REVENUES = LedgerKind(
    model=Revenue,
    category_types=REVENUE_CATEGORY_TYPES,
    collection_key="revenues",
    not_found_message="Receita não encontrada",
    label="Revenue",
)

EXPENSES = LedgerKind(
    model=Expense,
    category_types=EXPENSE_CATEGORY_TYPES,
    collection_key="expenses",
    not_found_message="Despesa não encontrada",
    label="Expense",
)


def _resolve_category(kind: LedgerKind, company_id: int, category_id: int) -> Category:
    category = scoped_query(Category, company_id).filter(
        Category.id == category_id,
        Category.type.in_(kind.category_types),
    ).first()
    if category is None:
        raise BusinessRuleError("Categoria inválida")
    return category


def list_entries(
    kind: LedgerKind,
    company_id: int,
    *,
    page: int,
    limit: int,
    category_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> dict:
    model = kind.model
    query = scoped_query(model, company_id)
    if category_id:
        query = query.filter(model.category_id == category_id)
    if start_date:
        query = query.filter(model.date >= start_date)
    if end_date:
        query = query.filter(model.date <= end_date)

    query = query.order_by(model.date.desc(), model.id.desc())
    rows, pagination = paginate(query, page=page, limit=limit)
    return {
        kind.collection_key: [row.to_dict() for row in rows],
        "pagination": pagination,
    }


def get_entry(kind: LedgerKind, company_id: int, entry_id: int):
    return get_scoped(kind.model, entry_id, company_id, kind.not_found_message)


def create_entry(kind: LedgerKind, company_id: int, user_id: int, patch: dict):
    _resolve_category(kind, company_id, patch["category_id"])

    entry = kind.model(
        company_id=company_id,
        user_id=user_id,
        category_id=patch["category_id"],
        description=patch["description"],
        amount_cents=patch["amount_cents"],
        date=patch.get("date") or utcnow(),
        notes=patch.get("notes"),
        attachment=patch.get("attachment"),
    )
    db.session.add(entry)
    db.session.commit()

    current_app.logger.info(
        "%s created id=%s amount_cents=%s user_id=%s",
        kind.label, entry.id, entry.amount_cents, user_id,
    )
    return entry


def _ensure_editable(entry) -> None:
    if getattr(entry, "sale_id", None) is not None:
        raise BusinessRuleError("Receita gerada por venda não pode ser alterada")


def update_entry(kind: LedgerKind, company_id: int, entry_id: int, patch: dict, user_id: int):
    entry = get_entry(kind, company_id, entry_id)
    _ensure_editable(entry)

    if "category_id" in patch:
        _resolve_category(kind, company_id, patch["category_id"])

    for field in ("description", "amount_cents", "date", "category_id", "notes", "attachment"):
        if field in patch:
            setattr(entry, field, patch[field])

    db.session.commit()
    current_app.logger.info("%s updated id=%s user_id=%s", kind.label, entry.id, user_id)
    return entry


def delete_entry(kind: LedgerKind, company_id: int, entry_id: int, user_id: int) -> None:
    entry = get_entry(kind, company_id, entry_id)
    _ensure_editable(entry)

    db.session.delete(entry)
    db.session.commit()
    current_app.logger.info("%s deleted id=%s user_id=%s", kind.label, entry_id, user_id)

