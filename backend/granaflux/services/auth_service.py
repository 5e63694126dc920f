# Overview: Service-layer operations for auth; password hashing, registration and login.

"""
Authentication Service

Passwords are hashed with bcrypt (cost from BCRYPT_ROUNDS, default 12).
Registration creates the tenant: Company, its OWNER and the default ledger
categories, all in one transaction.
"""

import bcrypt
from flask import current_app

from ..errors import ConflictError, ServiceError, ValidationError
from ..extensions import db
from ..models import Company, User
from ..models.auth import ROLE_OWNER
from ..time_utils import utcnow
from . import category_service, session_service

MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""

    def __init__(self, message: str, field: str = "password"):
        super().__init__([{"field": field, "message": message}])


class AuthenticationError(ServiceError):
    status_code = 401


def validate_password_strength(password: str, field: str = "password") -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres", field=field
        )


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def email_in_use(email: str, exclude_user_id: int | None = None) -> bool:
    query = db.session.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def register_company(
    *,
    email: str,
    password: str,
    name: str,
    company_name: str,
    cnpj: str | None = None,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[User, str]:
    """
    Create Company + OWNER + default categories and open a session.

    Returns (owner, plaintext_token). Everything commits together or not at all.
    """
    if email_in_use(email):
        raise ConflictError("Email já está em uso")
    if cnpj and db.session.query(Company.id).filter(Company.cnpj == cnpj).first():
        raise ConflictError("CNPJ já está em uso")

    password_hash = hash_password(password)

    try:
        company = Company(name=company_name, cnpj=cnpj or None)
        db.session.add(company)
        db.session.flush()

        owner = User(
            company_id=company.id,
            email=email,
            name=name,
            password_hash=password_hash,
            role=ROLE_OWNER,
            last_login_at=utcnow(),
        )
        db.session.add(owner)
        db.session.flush()

        sales_category = category_service.create_default_categories(company.id)
        company.default_sales_category_id = sales_category.id

        _, token = session_service.create_session(owner, user_agent=user_agent, ip_address=ip_address)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Company registered company_id=%s owner_id=%s", company.id, owner.id)
    return owner, token


def authenticate(email: str, password: str) -> User | None:
    """
    Return the active user for the credentials, or None.

    Updates last_login_at on success (not committed here).
    """
    user = db.session.query(User).filter(
        User.email == email,
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    return user


def login(
    email: str,
    password: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[User, str]:
    user = authenticate(email, password)
    if user is None:
        current_app.logger.warning("Failed login email=%s ip=%s", email, ip_address)
        raise AuthenticationError("Credenciais inválidas")

    _, token = session_service.create_session(user, user_agent=user_agent, ip_address=ip_address)
    db.session.commit()
    current_app.logger.info("User logged in user_id=%s company_id=%s", user.id, user.company_id)
    return user, token
