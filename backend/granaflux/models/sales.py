from __future__ import annotations

from ..extensions import db
from ..money import bps_to_percentage, from_cents
from ..time_utils import to_utc_z, utcnow

PAYMENT_METHODS = ("CASH", "CREDIT_CARD", "DEBIT_CARD", "PIX", "BANK_TRANSFER", "CHECK")


class Sale(db.Model):
    """
    Point-of-sale transaction. Immutable after creation.

    All money fields are integer cents:
    - total_cents = sum of item total_price_cents
    - final_total_cents = total_cents - discount_cents
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_company_created", "company_id", "created_at"),
        db.Index("ix_sales_company_seller", "company_id", "seller_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=True, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    client_name = db.Column(db.String(255), nullable=False)

    total_cents = db.Column(db.Integer, nullable=False)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    final_total_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(32), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    client = db.relationship("Client", backref=db.backref("sales", lazy="dynamic"))
    seller = db.relationship("User")
    items = db.relationship("SaleItem", backref="sale", lazy=True, order_by="SaleItem.id")
    commissions = db.relationship("Commission", back_populates="sale", lazy=True, order_by="Commission.id")

    def __repr__(self) -> str:
        return f"<Sale id={self.id} final_total_cents={self.final_total_cents}>"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "clientName": self.client_name,
            "finalTotal": from_cents(self.final_total_cents),
            "createdAt": to_utc_z(self.created_at),
        }

    def to_dict(self, include_relations: bool = True) -> dict:
        data = {
            "id": self.id,
            "clientId": self.client_id,
            "clientName": self.client_name,
            "total": from_cents(self.total_cents),
            "discount": from_cents(self.discount_cents),
            "finalTotal": from_cents(self.final_total_cents),
            "paymentMethod": self.payment_method,
            "notes": self.notes,
            "sellerId": self.seller_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if include_relations:
            data["client"] = self.client.to_summary() if self.client else None
            data["seller"] = self.seller.to_summary() if self.seller else None
            data["items"] = [item.to_dict() for item in self.items]
            data["commissions"] = [c.to_dict(include_sale=False) for c in self.commissions]
        return data


class SaleItem(db.Model):
    """Line of a sale; product_id is NULL for ad-hoc items not in the catalog."""
    __tablename__ = "sale_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)

    item_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "itemName": self.item_name,
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": from_cents(self.unit_price_cents),
            "totalPrice": from_cents(self.total_price_cents),
            "product": (
                {"id": self.product.id, "name": self.product.name, "model": self.product.model}
                if self.product else None
            ),
        }


class Commission(db.Model):
    """
    Commission earned by the seller on one sale. Computed once at sale time
    and never recalculated.
    """
    __tablename__ = "commissions"
    __table_args__ = (
        db.UniqueConstraint("sale_id", "user_id", name="uq_commissions_sale_user"),
        db.Index("ix_commissions_company_created", "company_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Basis points (e.g., 500 = 5%)
    rate_bps = db.Column(db.Integer, nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    sale = db.relationship("Sale", back_populates="commissions")
    user = db.relationship("User")

    def to_dict(self, include_sale: bool = True) -> dict:
        data = {
            "id": self.id,
            "saleId": self.sale_id,
            "userId": self.user_id,
            "percentage": bps_to_percentage(self.rate_bps),
            "amount": from_cents(self.amount_cents),
            "user": self.user.to_summary() if self.user else None,
            "createdAt": to_utc_z(self.created_at),
        }
        if include_sale:
            data["sale"] = self.sale.to_summary() if self.sale else None
        return data


class CommissionRate(db.Model):
    """Persisted per-user commission rate; absent rows fall back to the configured default."""
    __tablename__ = "commission_rates"
    __table_args__ = (
        db.UniqueConstraint("company_id", "user_id", name="uq_commission_rates_company_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    rate_bps = db.Column(db.Integer, nullable=False)
    updated_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    user = db.relationship("User", foreign_keys=[user_id])
    updated_by = db.relationship("User", foreign_keys=[updated_by_id])
