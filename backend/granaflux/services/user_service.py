# Overview: Service-layer operations for users; staff management inside one company.

from flask import current_app

from ..errors import BusinessRuleError, ConflictError, ServiceError
from ..extensions import db
from ..models import Commission, CommissionRate, Expense, Revenue, Sale, StockMovement, Task, User
from ..models.auth import ROLE_ADMIN, ROLE_OWNER
from . import auth_service, session_service
from .tenant_service import get_scoped, scoped_query

NOT_FOUND_MESSAGE = "Usuário não encontrado"

MANAGER_ROLES = frozenset({ROLE_OWNER, ROLE_ADMIN})


class PermissionDeniedError(ServiceError):
    status_code = 403


def list_users(company_id: int) -> list[User]:
    return scoped_query(User, company_id).order_by(User.name.asc(), User.id.asc()).all()


def get_user(company_id: int, user_id: int) -> User:
    return get_scoped(User, user_id, company_id, NOT_FOUND_MESSAGE)


def create_user(company_id: int, patch: dict, actor_id: int) -> User:
    if auth_service.email_in_use(patch["email"]):
        raise ConflictError("Email já está em uso")

    user = User(
        company_id=company_id,
        email=patch["email"],
        name=patch["name"],
        role=patch["role"],
        password_hash=auth_service.hash_password(patch["password"]),
    )
    db.session.add(user)
    db.session.commit()

    current_app.logger.info(
        "User created user_id=%s role=%s created_by=%s", user.id, user.role, actor_id
    )
    return user


def update_user(company_id: int, user_id: int, patch: dict, *, actor: User, actor_role: str) -> User:
    """
    Self-service or manager update.

    - anyone may edit their own name/email
    - OWNER/ADMIN may edit any user of the company
    - only OWNER may change another user's role; the OWNER role itself is not assignable
    """
    is_self = actor.id == user_id
    if not is_self and actor_role not in MANAGER_ROLES:
        raise PermissionDeniedError("Acesso negado")

    user = get_user(company_id, user_id)

    if "role" in patch and patch["role"] != user.role:
        if is_self:
            raise PermissionDeniedError("Você não pode alterar seu próprio role")
        if actor_role != ROLE_OWNER:
            raise PermissionDeniedError("Apenas o proprietário pode alterar roles")
        if user.role == ROLE_OWNER:
            raise BusinessRuleError("O role do proprietário não pode ser alterado")

    if "email" in patch and patch["email"] != user.email:
        if auth_service.email_in_use(patch["email"], exclude_user_id=user.id):
            raise ConflictError("Email já está em uso")

    for field in ("name", "email", "role"):
        if field in patch:
            setattr(user, field, patch[field])

    if "is_active" in patch and patch["is_active"] is not None and not is_self and actor_role in MANAGER_ROLES:
        user.is_active = patch["is_active"]
        if not user.is_active:
            session_service.revoke_all_user_sessions(user.id, reason="User deactivated")

    db.session.commit()
    current_app.logger.info("User updated user_id=%s by=%s", user.id, actor.id)
    return user


def change_password(
    company_id: int,
    user_id: int,
    *,
    actor: User,
    actor_role: str,
    current_password: str | None,
    new_password: str,
    keep_session_id: int | None = None,
) -> None:
    """
    Users change their own password (current password required); the OWNER may
    reset anyone's. Other sessions of the target user are revoked.
    """
    is_self = actor.id == user_id
    if not is_self and actor_role != ROLE_OWNER:
        raise PermissionDeniedError("Acesso negado")

    user = get_user(company_id, user_id)

    if is_self and not auth_service.verify_password(current_password or "", user.password_hash):
        raise BusinessRuleError("Senha atual incorreta")

    user.password_hash = auth_service.hash_password(new_password)
    session_service.revoke_all_user_sessions(
        user.id, reason="Password changed", keep_session_id=keep_session_id if is_self else None
    )
    db.session.commit()
    current_app.logger.info("Password changed user_id=%s by=%s", user.id, actor.id)


def delete_user(company_id: int, user_id: int, actor_id: int) -> None:
    """
    Remove a staff account. Users with recorded activity are deactivated
    instead, so sales, ledger entries and tasks keep their attribution.
    """
    if user_id == actor_id:
        raise BusinessRuleError("Você não pode deletar sua própria conta")

    user = get_user(company_id, user_id)
    if user.role == ROLE_OWNER:
        raise BusinessRuleError("O proprietário não pode ser removido")

    if _has_activity(user.id):
        user.is_active = False
        session_service.revoke_all_user_sessions(user.id, reason="User deleted")
        db.session.commit()
        current_app.logger.info("User deactivated user_id=%s by=%s", user.id, actor_id)
        return

    for session in user.sessions:
        db.session.delete(session)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("User deleted user_id=%s by=%s", user_id, actor_id)


def _has_activity(user_id: int) -> bool:
    checks = (
        (Sale, Sale.seller_id),
        (Revenue, Revenue.user_id),
        (Expense, Expense.user_id),
        (StockMovement, StockMovement.user_id),
        (Commission, Commission.user_id),
        (Task, Task.creator_id),
        (Task, Task.assignee_id),
        (CommissionRate, CommissionRate.user_id),
    )
    for model, column in checks:
        if db.session.query(model.id).filter(column == user_id).first() is not None:
            return True
    return False

