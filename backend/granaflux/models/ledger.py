from __future__ import annotations

from ..extensions import db
from ..money import from_cents
from ..time_utils import to_utc_z

CATEGORY_REVENUE = "REVENUE"
CATEGORY_EXPENSE = "EXPENSE"
CATEGORY_BOTH = "BOTH"
CATEGORY_PRODUCT = "PRODUCT"

CATEGORY_TYPES = (CATEGORY_REVENUE, CATEGORY_EXPENSE, CATEGORY_BOTH, CATEGORY_PRODUCT)

DEFAULT_CATEGORY_COLOR = "#3B82F6"

# Category types a ledger entry of each kind may be filed under
REVENUE_CATEGORY_TYPES = (CATEGORY_REVENUE, CATEGORY_BOTH)
EXPENSE_CATEGORY_TYPES = (CATEGORY_EXPENSE, CATEGORY_BOTH)


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("company_id", "type", "name", name="uq_categories_company_type_name"),
        db.Index("ix_categories_company_type", "company_id", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(16), nullable=False)
    color = db.Column(db.String(7), nullable=False, default=DEFAULT_CATEGORY_COLOR)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    company = db.relationship("Company", foreign_keys=[company_id])

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r} type={self.type}>"

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type, "color": self.color}

    def to_dict(self, counts: dict | None = None) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "color": self.color,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if counts is not None:
            data["_count"] = counts
        return data


class _LedgerEntryMixin:
    """Columns shared by revenues and expenses."""

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    attachment = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def _base_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount": from_cents(self.amount_cents),
            "date": to_utc_z(self.date),
            "notes": self.notes,
            "attachment": self.attachment,
            "categoryId": self.category_id,
            "category": self.category.to_summary() if self.category else None,
            "user": self.user.to_summary() if self.user else None,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class Revenue(_LedgerEntryMixin, db.Model):
    __tablename__ = "revenues"
    __table_args__ = (
        db.Index("ix_revenues_company_date", "company_id", "date"),
        {"sqlite_autoincrement": True},
    )

    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Set when the revenue was derived from a sale
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=True, index=True)

    category = db.relationship("Category")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["saleId"] = self.sale_id
        return data


class Expense(_LedgerEntryMixin, db.Model):
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_company_date", "company_id", "date"),
        {"sqlite_autoincrement": True},
    )

    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    category = db.relationship("Category")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return self._base_dict()
