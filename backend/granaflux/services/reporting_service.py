# Overview: Service-layer operations for reporting; read-only aggregations scoped by company.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import extract, func

from ..errors import ValidationError
from ..extensions import db
from ..models import Category, Commission, Expense, Revenue, Sale, User
from ..money import from_cents
from ..time_utils import month_window, to_utc_z

MONTH_NAMES = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)


def resolve_period(
    *,
    month: int | None,
    year: int | None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> tuple[datetime | None, datetime | None]:
    """month+year wins over an explicit start/end range; neither means unbounded."""
    if month is not None and year is not None:
        try:
            return month_window(month, year)
        except ValueError:
            raise ValidationError([{"field": "month", "message": "Mês deve estar entre 1 e 12"}])
    return start, end


def _ratio(part: int, whole: int) -> float:
    if not whole:
        return 0
    return round(part / whole * 100, 2)


def _window(query, column, start, end):
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column <= end)
    return query


def _by_category(model, company_id: int, start, end) -> list[dict]:
    query = db.session.query(
        Category.id,
        Category.name,
        Category.color,
        func.coalesce(func.sum(model.amount_cents), 0).label("total_cents"),
        func.count(model.id).label("count"),
    ).join(Category, Category.id == model.category_id).filter(model.company_id == company_id)
    query = _window(query, model.date, start, end)

    rows = query.group_by(Category.id, Category.name, Category.color).all()
    grand_total = sum(int(r.total_cents) for r in rows)

    result = [
        {
            "categoryId": r.id,
            "name": r.name,
            "color": r.color,
            "total": from_cents(int(r.total_cents)),
            "count": int(r.count),
            "percentage": _ratio(int(r.total_cents), grand_total),
        }
        for r in rows
    ]
    result.sort(key=lambda item: item["total"], reverse=True)
    return result


def _total(model, company_id: int, start, end) -> tuple[int, int]:
    query = db.session.query(
        func.coalesce(func.sum(model.amount_cents), 0),
        func.count(model.id),
    ).filter(model.company_id == company_id)
    total_cents, count = _window(query, model.date, start, end).one()
    return int(total_cents), int(count)


def _recent_transactions(company_id: int, start, end, limit: int = 10) -> list[dict]:
    entries = []
    for model, kind in ((Revenue, "REVENUE"), (Expense, "EXPENSE")):
        query = _window(db.session.query(model).filter(model.company_id == company_id), model.date, start, end)
        for entry in query.order_by(model.date.desc(), model.id.desc()).limit(limit).all():
            entries.append((entry.date, kind, entry))

    entries.sort(key=lambda item: item[0], reverse=True)
    return [
        {
            "id": entry.id,
            "type": kind,
            "description": entry.description,
            "amount": from_cents(entry.amount_cents),
            "date": to_utc_z(entry.date),
            "category": entry.category.name if entry.category else None,
            "categoryColor": entry.category.color if entry.category else None,
        }
        for _, kind, entry in entries[:limit]
    ]


def dashboard(company_id: int, *, start: datetime | None = None, end: datetime | None = None) -> dict:
    revenue_cents, revenue_count = _total(Revenue, company_id, start, end)
    expense_cents, expense_count = _total(Expense, company_id, start, end)
    net_cents = revenue_cents - expense_cents

    return {
        "summary": {
            "totalRevenues": from_cents(revenue_cents),
            "totalExpenses": from_cents(expense_cents),
            "netProfit": from_cents(net_cents),
            "profitMargin": _ratio(net_cents, revenue_cents),
            "revenuesCount": revenue_count,
            "expensesCount": expense_count,
        },
        "revenuesByCategory": _by_category(Revenue, company_id, start, end),
        "expensesByCategory": _by_category(Expense, company_id, start, end),
        "recentTransactions": _recent_transactions(company_id, start, end),
    }


def _monthly_totals(model, company_id: int, start: datetime, end: datetime) -> dict[int, int]:
    month_expr = extract("month", model.date)
    rows = (
        db.session.query(month_expr.label("month"), func.sum(model.amount_cents))
        .filter(model.company_id == company_id, model.date >= start, model.date <= end)
        .group_by(month_expr)
        .all()
    )
    return {int(month): int(total or 0) for month, total in rows}


def monthly(company_id: int, *, year: int) -> dict:
    """Twelve rows (January..December) of revenues, expenses and balance."""
    start, _ = month_window(1, year)
    _, end = month_window(12, year)

    revenues = _monthly_totals(Revenue, company_id, start, end)
    expenses = _monthly_totals(Expense, company_id, start, end)

    months = []
    for month in range(1, 13):
        rev = revenues.get(month, 0)
        exp = expenses.get(month, 0)
        months.append({
            "month": month,
            "monthName": MONTH_NAMES[month - 1],
            "revenues": from_cents(rev),
            "expenses": from_cents(exp),
            "balance": from_cents(rev - exp),
        })

    total_rev = sum(revenues.values())
    total_exp = sum(expenses.values())
    return {
        "year": year,
        "months": months,
        "totals": {
            "revenues": from_cents(total_rev),
            "expenses": from_cents(total_exp),
            "balance": from_cents(total_rev - total_exp),
        },
    }


def cash_flow(company_id: int, *, start: datetime | None = None, end: datetime | None = None) -> dict:
    inflow, _ = _total(Revenue, company_id, start, end)
    outflow, _ = _total(Expense, company_id, start, end)
    return {
        "startDate": to_utc_z(start),
        "endDate": to_utc_z(end),
        "inflow": from_cents(inflow),
        "outflow": from_cents(outflow),
        "net": from_cents(inflow - outflow),
    }


def _users_by_id(company_id: int, user_ids) -> dict[int, User]:
    if not user_ids:
        return {}
    users = db.session.query(User).filter(User.company_id == company_id, User.id.in_(list(user_ids))).all()
    return {u.id: u for u in users}


def commissions_by_user(company_id: int, *, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
    """
    Per user: total commission, count, total of the commissioned sales and
    averageCommissionRate = totalCommissions / totalSales * 100 (0 without sales).
    """
    query = db.session.query(
        Commission.user_id,
        func.sum(Commission.amount_cents).label("commission_cents"),
        func.count(Commission.id).label("count"),
        func.sum(Sale.final_total_cents).label("sales_cents"),
    ).join(Sale, Sale.id == Commission.sale_id).filter(Commission.company_id == company_id)
    rows = _window(query, Commission.created_at, start, end).group_by(Commission.user_id).all()

    users = _users_by_id(company_id, {r.user_id for r in rows})
    report = []
    for r in rows:
        user = users.get(r.user_id)
        commission_cents = int(r.commission_cents or 0)
        sales_cents = int(r.sales_cents or 0)
        report.append({
            "user": {**user.to_summary(), "role": user.role} if user else {"id": r.user_id},
            "totalCommissions": from_cents(commission_cents),
            "commissionsCount": int(r.count),
            "totalSales": from_cents(sales_cents),
            "averageCommissionRate": _ratio(commission_cents, sales_cents),
        })
    report.sort(key=lambda item: item["totalCommissions"], reverse=True)
    return report


def sales_by_seller(company_id: int, *, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
    """Per seller: sum of final totals, number of sales and commissions earned on them."""
    sales_query = db.session.query(
        Sale.seller_id,
        func.sum(Sale.final_total_cents).label("sales_cents"),
        func.count(Sale.id).label("count"),
    ).filter(Sale.company_id == company_id)
    sales_rows = _window(sales_query, Sale.created_at, start, end).group_by(Sale.seller_id).all()

    commission_query = db.session.query(
        Sale.seller_id,
        func.sum(Commission.amount_cents).label("commission_cents"),
    ).join(Commission, Commission.sale_id == Sale.id).filter(Sale.company_id == company_id)
    commission_rows = _window(commission_query, Sale.created_at, start, end).group_by(Sale.seller_id).all()
    commissions = {r.seller_id: int(r.commission_cents or 0) for r in commission_rows}

    users = _users_by_id(company_id, {r.seller_id for r in sales_rows})
    report = []
    for r in sales_rows:
        seller = users.get(r.seller_id)
        report.append({
            "seller": seller.to_summary() if seller else {"id": r.seller_id},
            "totalSales": from_cents(int(r.sales_cents or 0)),
            "salesCount": int(r.count),
            "totalCommissions": from_cents(commissions.get(r.seller_id, 0)),
        })
    report.sort(key=lambda item: item["totalSales"], reverse=True)
    return report
