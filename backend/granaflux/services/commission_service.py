# Overview: Service-layer operations for commissions; rate policy, listing and rate configuration.

"""
Commission policy

- Only sellers whose role is CASHIER or USER earn commission.
- The rate is the seller's persisted CommissionRate, or the configured
  DEFAULT_COMMISSION_PERCENTAGE (5%) when none exists.
- The amount is fixed at sale time: rate applied to the sale's final total,
  rounded half-up to the cent. It is never recalculated.
"""

from datetime import datetime

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Commission, CommissionRate, Sale, User
from ..models.auth import COMMISSIONED_ROLES
from ..money import apply_rate_bps, bps_to_percentage, from_cents, percentage_to_bps
from ..pagination import paginate
from .tenant_service import get_scoped, scoped_query

MAX_PERCENTAGE = 50
USER_NOT_FOUND_MESSAGE = "Funcionário não encontrado"


def default_rate_bps() -> int:
    return percentage_to_bps(current_app.config.get("DEFAULT_COMMISSION_PERCENTAGE", 5.0))


def effective_rate_bps(company_id: int, user_id: int) -> int:
    rate = db.session.query(CommissionRate.rate_bps).filter(
        CommissionRate.company_id == company_id,
        CommissionRate.user_id == user_id,
    ).scalar()
    return rate if rate is not None else default_rate_bps()


def earns_commission(role: str) -> bool:
    return role in COMMISSIONED_ROLES


def build_commission(sale: Sale, seller: User) -> Commission | None:
    """Commission row for a sale, or None when the seller's role earns none. Does not add it."""
    if not earns_commission(seller.role):
        return None

    rate_bps = effective_rate_bps(sale.company_id, seller.id)
    return Commission(
        company_id=sale.company_id,
        sale_id=sale.id,
        user_id=seller.id,
        rate_bps=rate_bps,
        amount_cents=apply_rate_bps(sale.final_total_cents, rate_bps),
    )


def list_commissions(
    company_id: int,
    *,
    page: int,
    limit: int,
    user_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict:
    """
    Commission listing with a summary over every matching row (not just the page).

    Callers that must only see their own commissions pass their own user_id.
    """
    query = scoped_query(Commission, company_id)
    if user_id is not None:
        query = query.filter(Commission.user_id == user_id)
    if start is not None:
        query = query.filter(Commission.created_at >= start)
    if end is not None:
        query = query.filter(Commission.created_at <= end)

    total_cents = query.with_entities(func.coalesce(func.sum(Commission.amount_cents), 0)).scalar()

    query = query.order_by(Commission.created_at.desc(), Commission.id.desc())
    commissions, pagination = paginate(query, page=page, limit=limit)

    return {
        "commissions": [c.to_dict() for c in commissions],
        "summary": {
            "totalCommissions": from_cents(int(total_cents or 0)),
            "commissionsCount": pagination["total"],
        },
        "pagination": pagination,
    }


def _rate_payload(user: User, rate: CommissionRate | None) -> dict:
    rate_bps = rate.rate_bps if rate is not None else default_rate_bps()
    return {
        "userId": user.id,
        "user": user.to_summary(),
        "percentage": bps_to_percentage(rate_bps),
        "isDefault": rate is None,
        "eligible": earns_commission(user.role),
    }


def get_rate(company_id: int, user_id: int) -> dict:
    user = get_scoped(User, user_id, company_id, USER_NOT_FOUND_MESSAGE)
    rate = scoped_query(CommissionRate, company_id).filter(CommissionRate.user_id == user.id).first()
    return _rate_payload(user, rate)


def set_rate(company_id: int, user_id: int, percentage: float, actor_id: int) -> dict:
    """Persist the commission rate applied to this user's future sales."""
    user = get_scoped(User, user_id, company_id, USER_NOT_FOUND_MESSAGE)

    rate = scoped_query(CommissionRate, company_id).filter(CommissionRate.user_id == user.id).first()
    if rate is None:
        rate = CommissionRate(company_id=company_id, user_id=user.id)
        db.session.add(rate)
    rate.rate_bps = percentage_to_bps(percentage)
    rate.updated_by_id = actor_id

    db.session.commit()
    current_app.logger.info(
        "Commission rate configured user_id=%s rate_bps=%s configured_by=%s",
        user.id, rate.rate_bps, actor_id,
    )

    payload = _rate_payload(user, rate)
    payload["message"] = "Percentual de comissão configurado com sucesso"
    return payload
