# Overview: Service-layer operations for stock; every stock change writes a StockMovement in the same transaction.

from flask import current_app

from ..errors import BusinessRuleError, ValidationError
from ..extensions import db
from ..models import Product, StockMovement
from ..models.inventory import MOVEMENT_IN, MOVEMENT_OUT
from .concurrency import decrement_stock_if_available, increment_stock, lock_for_update
from .tenant_service import get_scoped

NEGATIVE_STOCK_MESSAGE = "Estoque não pode ficar negativo"


class StockError(BusinessRuleError):
    """Raised when a stock change would leave a product below zero."""


def record_movement(*, product_id: int, user_id: int, movement_type: str, quantity: int, reason: str) -> StockMovement:
    movement = StockMovement(
        product_id=product_id,
        user_id=user_id,
        type=movement_type,
        quantity=abs(quantity),
        reason=reason,
    )
    db.session.add(movement)
    return movement


def _apply_adjustment(company_id: int, product_id: int, movement_type: str, quantity: int) -> int:
    """Mutate stock for one manual change; returns the magnitude to log."""
    if movement_type == MOVEMENT_IN:
        increment_stock(company_id=company_id, product_id=product_id, quantity=quantity)
        return quantity

    if movement_type == MOVEMENT_OUT:
        if not decrement_stock_if_available(company_id=company_id, product_id=product_id, quantity=quantity):
            raise StockError(NEGATIVE_STOCK_MESSAGE)
        return quantity

    # ADJUSTMENT: absolute target value
    if quantity < 0:
        raise StockError(NEGATIVE_STOCK_MESSAGE)
    product = lock_for_update(
        db.session.query(Product).filter(Product.id == product_id, Product.company_id == company_id)
    ).one()
    product.stock = quantity
    return quantity


def adjust_stock(
    *,
    company_id: int,
    product_id: int,
    movement_type: str,
    quantity: int,
    reason: str,
    user_id: int,
) -> Product:
    """
    Apply a manual stock change (IN adds, OUT subtracts, ADJUSTMENT sets).

    Rejected changes leave stock untouched. Returns the refreshed product.
    """
    product = get_scoped(Product, product_id, company_id, "Produto não encontrado")

    if movement_type in (MOVEMENT_IN, MOVEMENT_OUT) and quantity < 0:
        raise ValidationError([
            {"field": "quantity", "message": "Quantidade deve ser maior ou igual a 0 para IN/OUT"}
        ])

    try:
        logged_quantity = _apply_adjustment(company_id, product.id, movement_type, quantity)
        record_movement(
            product_id=product.id,
            user_id=user_id,
            movement_type=movement_type,
            quantity=logged_quantity,
            reason=reason,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(product)
    current_app.logger.info(
        "Stock adjusted product_id=%s type=%s quantity=%s new_stock=%s user_id=%s",
        product.id, movement_type, quantity, product.stock, user_id,
    )
    return product


def record_initial_stock(product: Product, user_id: int) -> None:
    """Log the opening balance of a freshly created product. Does not commit."""
    if product.stock > 0:
        record_movement(
            product_id=product.id,
            user_id=user_id,
            movement_type=MOVEMENT_IN,
            quantity=product.stock,
            reason="Estoque inicial",
        )


def recent_movements(product: Product, limit: int = 10) -> list[StockMovement]:
    return (
        product.movements
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .limit(limit)
        .all()
    )

