# Overview: Row-locking and conditional-update helpers for stock mutations.

from __future__ import annotations

from ..extensions import db
from ..models import Product


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def decrement_stock_if_available(*, company_id: int, product_id: int, quantity: int) -> bool:
    """
    Atomically subtract `quantity` from a product's stock.

    Single statement: UPDATE products SET stock = stock - :q
    WHERE id = :id AND company_id = :c AND stock >= :q

    Returns False when no row matched (stock would go negative), in which
    case nothing was written. Check and write happen in the same statement,
    so two concurrent callers cannot both take the last unit.
    """
    matched = (
        db.session.query(Product)
        .filter(
            Product.id == product_id,
            Product.company_id == company_id,
            Product.stock >= quantity,
        )
        .update({Product.stock: Product.stock - quantity}, synchronize_session=False)
    )
    return matched == 1


def increment_stock(*, company_id: int, product_id: int, quantity: int) -> None:
    (
        db.session.query(Product)
        .filter(Product.id == product_id, Product.company_id == company_id)
        .update({Product.stock: Product.stock + quantity}, synchronize_session=False)
    )
