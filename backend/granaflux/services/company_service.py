# Overview: Service-layer operations for the caller's company profile.

from flask import current_app

from ..errors import BusinessRuleError, ConflictError
from ..extensions import db
from ..models import Category, Company
from ..models.ledger import REVENUE_CATEGORY_TYPES
from .tenant_service import scoped_query

COMPANY_FIELDS = ("name", "cnpj", "email", "phone", "address", "city", "state", "zip_code")


def get_company(company_id: int) -> Company:
    return db.session.get(Company, company_id)


def update_company(company_id: int, patch: dict, actor_id: int) -> Company:
    company = get_company(company_id)

    if patch.get("cnpj") and patch["cnpj"] != company.cnpj:
        taken = db.session.query(Company.id).filter(Company.cnpj == patch["cnpj"], Company.id != company.id).first()
        if taken is not None:
            raise ConflictError("CNPJ já está em uso")

    if "default_sales_category_id" in patch:
        category_id = patch["default_sales_category_id"]
        if category_id is not None:
            category = scoped_query(Category, company_id).filter(
                Category.id == category_id,
                Category.type.in_(REVENUE_CATEGORY_TYPES),
            ).first()
            if category is None:
                raise BusinessRuleError("Categoria de vendas inválida")
        company.default_sales_category_id = category_id

    for field in COMPANY_FIELDS:
        if field in patch:
            setattr(company, field, patch[field])

    db.session.commit()
    current_app.logger.info("Company updated company_id=%s by=%s", company.id, actor_id)
    return company
