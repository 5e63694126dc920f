# Overview: Service-layer operations for sales; the atomic sale workflow and sale queries.

"""
Sale creation

1. Validate the whole payload, collecting every field error.
2. Resolve the client and catalog products inside the caller's company.
3. Check requested quantities (aggregated per product) against stock.
4. In one transaction: Sale, SaleItems, conditional stock decrements with
   StockMovements, the derived Revenue and the seller's Commission.

The stock decrement is a conditional UPDATE (stock >= quantity); if another
sale took the stock between the pre-check and the write, no row matches and
the whole sale is rolled back with the insufficient-stock error.
"""

from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy import func

from ..errors import BusinessRuleError
from ..extensions import db
from ..models import Category, Client, Company, Product, Revenue, Sale, SaleItem, User
from ..models.inventory import MOVEMENT_OUT
from ..models.ledger import REVENUE_CATEGORY_TYPES
from ..models.sales import PAYMENT_METHODS
from ..pagination import paginate
from ..validation import (
    ENUM,
    INTEGER,
    MONEY,
    REFERENCE,
    TEXT,
    FieldErrors,
    FieldRule,
    coerce_field,
)
from . import commission_service, inventory_service
from .concurrency import decrement_stock_if_available
from .tenant_service import get_scoped, scoped_query

SALES_CATEGORY_KEYWORD = "vendas"

SALE_RULES = {
    "clientId": FieldRule(REFERENCE),
    "clientName": FieldRule(TEXT, max_length=255),
    "paymentMethod": FieldRule(
        ENUM, required=True, choices=PAYMENT_METHODS, message="Método de pagamento inválido"
    ),
    "discount": FieldRule(MONEY, minimum=0, message="Desconto deve ser um número maior ou igual a 0"),
    "notes": FieldRule(TEXT),
}

ITEM_RULES = {
    "productId": FieldRule(REFERENCE),
    "itemName": FieldRule(TEXT, required=True, max_length=255, message="Nome do item é obrigatório"),
    "description": FieldRule(TEXT),
    "quantity": FieldRule(
        INTEGER, required=True, minimum=1, message="Quantidade deve ser um número inteiro maior que 0"
    ),
    "unitPrice": FieldRule(
        MONEY, required=True, minimum=0, message="Preço unitário deve ser um número maior ou igual a 0"
    ),
}


class SaleError(BusinessRuleError):
    """Raised for sale operation errors."""


@dataclass
class LineDraft:
    product_id: int | None
    item_name: str
    description: str | None
    quantity: int
    unit_price_cents: int

    @property
    def total_price_cents(self) -> int:
        return self.quantity * self.unit_price_cents


@dataclass
class SaleDraft:
    client_id: int | None
    client_name: str | None
    payment_method: str
    discount_cents: int
    notes: str | None
    items: list[LineDraft]

    @property
    def total_cents(self) -> int:
        return sum(line.total_price_cents for line in self.items)

    @property
    def final_total_cents(self) -> int:
        return self.total_cents - self.discount_cents

    def quantities_by_product(self) -> dict[int, int]:
        totals: dict[int, int] = {}
        for line in self.items:
            if line.product_id is not None:
                totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
        return totals


def _field(payload: dict, name: str, rules: dict, errors: FieldErrors, path: str | None = None):
    rule = rules[name]
    label = path or name
    if name not in payload:
        if rule.required:
            errors.add(label, rule.message or f"{label} é obrigatório")
        return None
    return coerce_field(label, payload[name], rule, errors)


def validate_sale_payload(payload) -> SaleDraft:
    """Shape-check a sale request; raises ValidationError listing every problem."""
    errors = FieldErrors()
    if not isinstance(payload, dict):
        errors.add("body", "JSON inválido")
        errors.raise_if_any()

    client_id = _field(payload, "clientId", SALE_RULES, errors)
    client_name = _field(payload, "clientName", SALE_RULES, errors)
    if payload.get("clientId") in (None, "") and not client_name:
        errors.add("clientName", "Nome do cliente é obrigatório")

    payment_method = _field(payload, "paymentMethod", SALE_RULES, errors)
    discount_cents = _field(payload, "discount", SALE_RULES, errors) or 0
    notes = _field(payload, "notes", SALE_RULES, errors)

    items: list[LineDraft] = []
    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        errors.add("items", "Pelo menos um item é obrigatório")
        raw_items = []

    for index, raw in enumerate(raw_items):
        prefix = f"items[{index}]"
        if not isinstance(raw, dict):
            errors.add(prefix, "Item inválido")
            continue
        values = {
            name: _field(raw, name, ITEM_RULES, errors, path=f"{prefix}.{name}")
            for name in ITEM_RULES
        }
        if values["itemName"] and values["quantity"] and values["unitPrice"] is not None:
            items.append(LineDraft(
                product_id=values["productId"],
                item_name=values["itemName"],
                description=values["description"],
                quantity=values["quantity"],
                unit_price_cents=values["unitPrice"],
            ))

    if not errors:
        total = sum(line.total_price_cents for line in items)
        if discount_cents > total:
            errors.add("discount", "Desconto não pode ser maior que o total da venda")

    errors.raise_if_any()
    return SaleDraft(
        client_id=client_id,
        client_name=client_name,
        payment_method=payment_method,
        discount_cents=discount_cents,
        notes=notes,
        items=items,
    )


def _insufficient(product_name: str, available: int) -> SaleError:
    return SaleError(
        f"Estoque insuficiente para {product_name}. Disponível: {available}",
        details={"available": available},
    )


def _load_products(company_id: int, draft: SaleDraft) -> dict[int, Product]:
    products: dict[int, Product] = {}
    for product_id in draft.quantities_by_product():
        product = scoped_query(Product, company_id).filter(Product.id == product_id).first()
        if product is None:
            raise SaleError(f"Produto {product_id} não encontrado")
        products[product_id] = product
    return products


def _validate_on_hand(products: dict[int, Product], draft: SaleDraft) -> None:
    for product_id, quantity in draft.quantities_by_product().items():
        product = products[product_id]
        if product.stock < quantity:
            raise _insufficient(product.name, product.stock)


def _sales_category(company_id: int) -> Category | None:
    """
    Category that receives revenue derived from sales: the company's default
    sales category, else the first REVENUE/BOTH category named like "Vendas".
    """
    company = db.session.get(Company, company_id)
    if company is not None and company.default_sales_category_id is not None:
        category = scoped_query(Category, company_id).filter(
            Category.id == company.default_sales_category_id,
            Category.type.in_(REVENUE_CATEGORY_TYPES),
        ).first()
        if category is not None:
            return category

    return scoped_query(Category, company_id).filter(
        Category.type.in_(REVENUE_CATEGORY_TYPES),
        func.lower(Category.name).contains(SALES_CATEGORY_KEYWORD),
    ).order_by(Category.id.asc()).first()


def _post_revenue(sale: Sale, seller: User, item_count: int) -> Revenue | None:
    category = _sales_category(sale.company_id)
    if category is None:
        current_app.logger.info("No sales category; revenue skipped sale_id=%s", sale.id)
        return None

    revenue = Revenue(
        company_id=sale.company_id,
        category_id=category.id,
        user_id=seller.id,
        sale_id=sale.id,
        description=f"Venda para {sale.client_name}",
        amount_cents=sale.final_total_cents,
        date=sale.created_at,
        notes=f"Venda #{sale.id} - {item_count} item(s)",
    )
    db.session.add(revenue)
    return revenue


def _record_commission(sale: Sale, seller: User):
    commission = commission_service.build_commission(sale, seller)
    if commission is not None:
        db.session.add(commission)
    return commission


def _decrement_lines(sale: Sale, draft: SaleDraft, products: dict[int, Product], seller: User) -> None:
    for line in draft.items:
        if line.product_id is None:
            continue
        ok = decrement_stock_if_available(
            company_id=sale.company_id,
            product_id=line.product_id,
            quantity=line.quantity,
        )
        if not ok:
            available = db.session.query(Product.stock).filter(Product.id == line.product_id).scalar()
            raise _insufficient(products[line.product_id].name, available or 0)

        inventory_service.record_movement(
            product_id=line.product_id,
            user_id=seller.id,
            movement_type=MOVEMENT_OUT,
            quantity=line.quantity,
            reason=f"Venda #{sale.id}",
        )


def create_sale(*, company_id: int, seller: User, payload) -> Sale:
    """
    Validate and persist a sale with all of its side effects atomically.

    Raises ValidationError for malformed input and SaleError for unknown
    client/product or insufficient stock. Nothing is written on failure.
    """
    draft = validate_sale_payload(payload)

    client = None
    if draft.client_id is not None:
        client = get_scoped(Client, draft.client_id, company_id, "Cliente não encontrado", error_cls=SaleError)

    products = _load_products(company_id, draft)
    _validate_on_hand(products, draft)

    try:
        sale = Sale(
            company_id=company_id,
            client_id=client.id if client else None,
            client_name=draft.client_name or client.name,
            seller_id=seller.id,
            total_cents=draft.total_cents,
            discount_cents=draft.discount_cents,
            final_total_cents=draft.final_total_cents,
            payment_method=draft.payment_method,
            notes=draft.notes,
        )
        db.session.add(sale)
        db.session.flush()

        for line in draft.items:
            db.session.add(SaleItem(
                sale_id=sale.id,
                product_id=line.product_id,
                item_name=line.item_name,
                description=line.description,
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
                total_price_cents=line.total_price_cents,
            ))

        _decrement_lines(sale, draft, products, seller)
        _post_revenue(sale, seller, len(draft.items))
        _record_commission(sale, seller)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Sale created sale_id=%s final_total_cents=%s seller_id=%s company_id=%s",
        sale.id, sale.final_total_cents, seller.id, company_id,
    )
    return sale


def list_sales(
    company_id: int,
    *,
    page: int,
    limit: int,
    seller_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict:
    query = scoped_query(Sale, company_id)
    if seller_id is not None:
        query = query.filter(Sale.seller_id == seller_id)
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at <= end)

    query = query.order_by(Sale.created_at.desc(), Sale.id.desc())
    sales, pagination = paginate(query, page=page, limit=limit)
    return {
        "sales": [sale.to_dict() for sale in sales],
        "pagination": pagination,
    }


def get_sale(company_id: int, sale_id: int) -> Sale:
    return get_scoped(Sale, sale_id, company_id, "Venda não encontrada")
