# Overview: Service-layer operations for categories; classification of ledger entries and products.

from flask import current_app
from sqlalchemy import func

from ..errors import BusinessRuleError, ConflictError
from ..extensions import db
from ..models import Category, Company, Expense, Product, Revenue
from ..models.ledger import (
    CATEGORY_EXPENSE,
    CATEGORY_REVENUE,
    DEFAULT_CATEGORY_COLOR,
    REVENUE_CATEGORY_TYPES,
)
from .tenant_service import get_scoped, scoped_query

DEFAULT_SALES_CATEGORY_NAME = "Vendas"

# (name, type, color) seeded for every new company
DEFAULT_CATEGORIES = (
    (DEFAULT_SALES_CATEGORY_NAME, CATEGORY_REVENUE, "#10B981"),
    ("Serviços", CATEGORY_REVENUE, "#3B82F6"),
    ("Folha de Pagamento", CATEGORY_EXPENSE, "#EF4444"),
    ("Fornecedores", CATEGORY_EXPENSE, "#F59E0B"),
    ("Marketing", CATEGORY_EXPENSE, "#8B5CF6"),
    ("Aluguel", CATEGORY_EXPENSE, "#EC4899"),
    ("Impostos", CATEGORY_EXPENSE, "#6B7280"),
    ("Matéria Prima", CATEGORY_EXPENSE, "#14B8A6"),
)

NOT_FOUND_MESSAGE = "Categoria não encontrada"


def create_default_categories(company_id: int) -> Category:
    """Seed the default categories; returns the sales category. Does not commit."""
    sales_category = None
    for name, category_type, color in DEFAULT_CATEGORIES:
        category = Category(company_id=company_id, name=name, type=category_type, color=color)
        db.session.add(category)
        if name == DEFAULT_SALES_CATEGORY_NAME:
            sales_category = category
    db.session.flush()
    return sales_category


def reference_counts(category_ids: list[int]) -> dict[int, dict]:
    """{category_id: {"revenues": n, "expenses": n, "products": n}} in three grouped queries."""
    counts = {cid: {"revenues": 0, "expenses": 0, "products": 0} for cid in category_ids}
    if not category_ids:
        return counts

    for key, model in (("revenues", Revenue), ("expenses", Expense), ("products", Product)):
        rows = (
            db.session.query(model.category_id, func.count(model.id))
            .filter(model.category_id.in_(category_ids))
            .group_by(model.category_id)
            .all()
        )
        for category_id, count in rows:
            counts[category_id][key] = count
    return counts


def list_categories(company_id: int, category_type: str | None = None) -> list[dict]:
    query = scoped_query(Category, company_id)
    if category_type:
        query = query.filter(Category.type == category_type)
    categories = query.order_by(Category.name.asc(), Category.id.asc()).all()

    counts = reference_counts([c.id for c in categories])
    return [c.to_dict(counts=counts[c.id]) for c in categories]


def get_category(company_id: int, category_id: int) -> Category:
    return get_scoped(Category, category_id, company_id, NOT_FOUND_MESSAGE)


def category_detail(category: Category) -> dict:
    return category.to_dict(counts=reference_counts([category.id])[category.id])


def _ensure_unique_name(company_id: int, name: str, category_type: str, exclude_id: int | None = None) -> None:
    query = scoped_query(Category, company_id).filter(
        func.lower(Category.name) == name.lower(),
        Category.type == category_type,
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise ConflictError("Já existe uma categoria com este nome")


def create_category(company_id: int, patch: dict, user_id: int) -> Category:
    _ensure_unique_name(company_id, patch["name"], patch["type"])

    category = Category(
        company_id=company_id,
        name=patch["name"],
        type=patch["type"],
        description=patch.get("description"),
        color=patch.get("color") or DEFAULT_CATEGORY_COLOR,
    )
    db.session.add(category)
    db.session.commit()

    current_app.logger.info("Category created category_id=%s user_id=%s", category.id, user_id)
    return category


def update_category(company_id: int, category_id: int, patch: dict, user_id: int) -> Category:
    category = get_category(company_id, category_id)

    name = patch.get("name", category.name)
    category_type = patch.get("type", category.type)
    if name != category.name or category_type != category.type:
        _ensure_unique_name(company_id, name, category_type, exclude_id=category.id)

    company = db.session.get(Company, company_id)
    if (
        company.default_sales_category_id == category.id
        and category_type not in REVENUE_CATEGORY_TYPES
    ):
        raise BusinessRuleError("A categoria padrão de vendas deve ser do tipo REVENUE ou BOTH")

    for field in ("name", "type", "description"):
        if field in patch:
            setattr(category, field, patch[field])
    if "color" in patch:
        category.color = patch["color"] or DEFAULT_CATEGORY_COLOR

    db.session.commit()
    current_app.logger.info("Category updated category_id=%s user_id=%s", category.id, user_id)
    return category


def delete_category(company_id: int, category_id: int, user_id: int) -> None:
    category = get_category(company_id, category_id)
    counts = reference_counts([category.id])[category.id]

    if counts["revenues"] or counts["expenses"]:
        raise BusinessRuleError(
            "Não é possível deletar uma categoria que possui receitas ou despesas associadas"
        )
    if counts["products"]:
        raise BusinessRuleError("Não é possível deletar uma categoria que possui produtos associados")

    company = db.session.get(Company, company_id)
    if company.default_sales_category_id == category.id:
        raise BusinessRuleError("Não é possível deletar a categoria padrão de vendas")

    db.session.delete(category)
    db.session.commit()
    current_app.logger.info("Category deleted category_id=%s user_id=%s", category_id, user_id)
