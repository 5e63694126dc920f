# Overview: Service-layer operations for products; catalog CRUD scoped to the caller's company.

from flask import current_app

from ..errors import BusinessRuleError
from ..extensions import db
from ..models import Category, Product, SaleItem, StockMovement
from ..pagination import paginate
from . import inventory_service
from .tenant_service import get_scoped, scoped_query

NOT_FOUND_MESSAGE = "Produto não encontrado"

# Stock is not in this list: it only moves through inventory_service
EDITABLE_FIELDS = ("name", "model", "description", "price_cents", "min_stock", "category_id")


def _ensure_category(company_id: int, category_id: int) -> None:
    get_scoped(Category, category_id, company_id, "Categoria inválida", error_cls=BusinessRuleError)


def list_products(
    company_id: int,
    *,
    page: int,
    limit: int,
    category_id: int | None = None,
    low_stock: bool = False,
) -> dict:
    """
    Tenant-scoped product listing.

    low_stock keeps products at or below their reorder threshold (stock <= min_stock).
    """
    query = scoped_query(Product, company_id)
    if category_id:
        query = query.filter(Product.category_id == category_id)
    if low_stock:
        query = query.filter(Product.stock <= Product.min_stock)

    query = query.order_by(Product.name.asc(), Product.id.asc())
    products, pagination = paginate(query, page=page, limit=limit)
    return {
        "products": [p.to_dict() for p in products],
        "pagination": pagination,
    }


def get_product(company_id: int, product_id: int) -> Product:
    return get_scoped(Product, product_id, company_id, NOT_FOUND_MESSAGE)


def product_detail(product: Product) -> dict:
    data = product.to_dict()
    data["stockMovements"] = [m.to_dict() for m in inventory_service.recent_movements(product)]
    return data


def create_product(company_id: int, patch: dict, user_id: int) -> Product:
    _ensure_category(company_id, patch["category_id"])

    product = Product(company_id=company_id, stock=patch.get("stock") or 0)
    for field in EDITABLE_FIELDS:
        if field in patch and patch[field] is not None:
            setattr(product, field, patch[field])

    try:
        db.session.add(product)
        db.session.flush()
        inventory_service.record_initial_stock(product, user_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Product created product_id=%s stock=%s user_id=%s", product.id, product.stock, user_id
    )
    return product


def update_product(company_id: int, product_id: int, patch: dict, user_id: int) -> Product:
    product = get_product(company_id, product_id)

    if patch.get("category_id") is not None:
        _ensure_category(company_id, patch["category_id"])

    for field in EDITABLE_FIELDS:
        if field in patch and patch[field] is not None:
            setattr(product, field, patch[field])
    if "model" in patch and patch["model"] is None:
        product.model = None
    if "description" in patch and patch["description"] is None:
        product.description = None

    db.session.commit()
    current_app.logger.info("Product updated product_id=%s user_id=%s", product.id, user_id)
    return product


def delete_product(company_id: int, product_id: int, user_id: int) -> None:
    product = get_product(company_id, product_id)

    in_sales = db.session.query(SaleItem.id).filter(SaleItem.product_id == product.id).first()
    if in_sales is not None:
        raise BusinessRuleError("Não é possível deletar um produto que possui vendas associadas")

    db.session.query(StockMovement).filter(StockMovement.product_id == product.id).delete(
        synchronize_session=False
    )
    db.session.delete(product)
    db.session.commit()
    current_app.logger.info("Product deleted product_id=%s user_id=%s", product_id, user_id)
