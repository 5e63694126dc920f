from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Client(db.Model):
    """
    Customer record. CPF and CNPJ are optional but unique within a company;
    empty strings are stored as NULL so the constraints only bite on real values.
    """
    __tablename__ = "clients"
    __table_args__ = (
        db.UniqueConstraint("company_id", "cpf", name="uq_clients_company_cpf"),
        db.UniqueConstraint("company_id", "cnpj", name="uq_clients_company_cnpj"),
        db.Index("ix_clients_company_name", "company_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    cpf = db.Column(db.String(14), nullable=True)
    cnpj = db.Column(db.String(18), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    state = db.Column(db.String(64), nullable=True)
    zip_code = db.Column(db.String(16), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Client id={self.id} name={self.name!r}>"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "cpf": self.cpf,
            "cnpj": self.cnpj,
        }

    def to_dict(self, sales_count: int | None = None) -> dict:
        data = self.to_summary()
        data.update({
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "notes": self.notes,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        })
        if sales_count is not None:
            data["_count"] = {"sales": sales_count}
        return data
