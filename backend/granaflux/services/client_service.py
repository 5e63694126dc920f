# Overview: Service-layer operations for clients (CRM).

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import BusinessRuleError, ConflictError, NotFoundError
from ..extensions import db
from ..models import Client, Sale
from ..pagination import paginate
from .tenant_service import get_scoped, scoped_query

NOT_FOUND_MESSAGE = "Cliente não encontrado"

CLIENT_FIELDS = ("name", "email", "phone", "cpf", "cnpj", "address", "city", "state", "zip_code", "notes")


def _sales_counts(client_ids: list[int]) -> dict[int, int]:
    if not client_ids:
        return {}
    rows = (
        db.session.query(Sale.client_id, func.count(Sale.id))
        .filter(Sale.client_id.in_(client_ids))
        .group_by(Sale.client_id)
        .all()
    )
    return dict(rows)


def list_clients(company_id: int, *, page: int, limit: int, search: str | None = None) -> dict:
    query = scoped_query(Client, company_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            db.or_(
                Client.name.ilike(pattern),
                Client.email.ilike(pattern),
                Client.cpf.like(pattern),
                Client.cnpj.like(pattern),
            )
        )
    query = query.order_by(Client.name.asc(), Client.id.asc())
    clients, pagination = paginate(query, page=page, limit=limit)

    counts = _sales_counts([c.id for c in clients])
    return {
        "clients": [c.to_dict(sales_count=counts.get(c.id, 0)) for c in clients],
        "pagination": pagination,
    }


def get_client(company_id: int, client_id: int) -> Client:
    return get_scoped(Client, client_id, company_id, NOT_FOUND_MESSAGE)


def client_detail(client: Client) -> dict:
    """Client with its 10 most recent sales."""
    recent = (
        client.sales.order_by(Sale.created_at.desc(), Sale.id.desc()).limit(10).all()
    )
    data = client.to_dict(sales_count=client.sales.count())
    data["sales"] = [sale.to_dict(include_relations=False) for sale in recent]
    return data


def find_by_document(company_id: int, document: str) -> Client:
    document = (document or "").strip()
    if not document:
        raise BusinessRuleError("Documento (CPF/CNPJ) é obrigatório")

    client = scoped_query(Client, company_id).filter(
        db.or_(Client.cpf == document, Client.cnpj == document)
    ).first()
    if client is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return client


def _ensure_documents_free(company_id: int, cpf: str | None, cnpj: str | None, exclude_id: int | None, message: str):
    clauses = []
    if cpf:
        clauses.append(Client.cpf == cpf)
    if cnpj:
        clauses.append(Client.cnpj == cnpj)
    if not clauses:
        return

    query = scoped_query(Client, company_id).filter(db.or_(*clauses))
    if exclude_id is not None:
        query = query.filter(Client.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(message)


def _commit_client(message: str) -> None:
    # Unique constraints close the gap between the existence check and the insert
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(message)


def create_client(company_id: int, patch: dict, user_id: int) -> Client:
    message = "CPF/CNPJ já cadastrado"
    _ensure_documents_free(company_id, patch.get("cpf"), patch.get("cnpj"), None, message)

    client = Client(company_id=company_id)
    for field in CLIENT_FIELDS:
        if field in patch:
            setattr(client, field, patch[field])
    db.session.add(client)
    _commit_client(message)

    current_app.logger.info("Client created client_id=%s user_id=%s", client.id, user_id)
    return client


def update_client(company_id: int, client_id: int, patch: dict, user_id: int) -> Client:
    client = get_client(company_id, client_id)

    message = "CPF/CNPJ já cadastrado para outro cliente"
    cpf = patch.get("cpf") if "cpf" in patch else None
    cnpj = patch.get("cnpj") if "cnpj" in patch else None
    _ensure_documents_free(company_id, cpf, cnpj, client.id, message)

    for field in CLIENT_FIELDS:
        if field in patch:
            setattr(client, field, patch[field])
    _commit_client(message)

    current_app.logger.info("Client updated client_id=%s user_id=%s", client.id, user_id)
    return client


def delete_client(company_id: int, client_id: int, user_id: int) -> None:
    client = get_client(company_id, client_id)

    if client.sales.count() > 0:
        raise BusinessRuleError("Não é possível deletar um cliente que possui vendas associadas")

    db.session.delete(client)
    db.session.commit()
    current_app.logger.info("Client deleted client_id=%s user_id=%s", client_id, user_id)
