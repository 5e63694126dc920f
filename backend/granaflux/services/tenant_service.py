"""
Tenant scoping helpers.

Every id that arrives from a client must be resolved inside the caller's
company. A row of another company is indistinguishable from a missing row:
both raise NotFoundError, so callers cannot probe other tenants.

USAGE:
    product = get_scoped(Product, product_id, ctx.company_id, "Produto não encontrado")
"""

from flask import current_app

from ..errors import NotFoundError
from ..extensions import db


def scoped_query(model, company_id: int):
    """Base query for a tenant-owned model, filtered to one company."""
    return db.session.query(model).filter(model.company_id == company_id)


def get_scoped(model, entity_id, company_id: int, message: str, *, error_cls=NotFoundError):
    """
    Load `model` by id within `company_id` or raise `error_cls(message)`.
    """
    if entity_id is None:
        raise error_cls(message)

    entity = scoped_query(model, company_id).filter(model.id == entity_id).first()
    if entity is None:
        other = db.session.query(model.company_id).filter(model.id == entity_id).scalar()
        if other is not None:
            current_app.logger.warning(
                "Cross-tenant lookup blocked model=%s id=%s company_id=%s",
                model.__tablename__, entity_id, company_id,
            )
        raise error_cls(message)
    return entity
