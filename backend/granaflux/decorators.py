# Overview: Authentication and role decorators for API routes.

from dataclasses import dataclass
from functools import wraps

from flask import current_app, jsonify, request

from .models import SessionToken, User
from .services import session_service


@dataclass(frozen=True)
class AuthContext:
    """
    Identity and tenant of the caller, resolved once per request.

    Handlers receive it as the `ctx` keyword argument; company_id comes from the
    session record and scopes every query the handler makes.
    """
    user: User
    company_id: int
    role: str
    session: SessionToken

    @property
    def user_id(self) -> int:
        return self.user.id


def require_auth(f):
    """
    Require a valid bearer token and pass the caller's AuthContext as `ctx`.

    Returns 401 when the Authorization header is missing and 403 when the token
    is unknown, revoked or expired, or the user has been deactivated.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Token de acesso requerido"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        if not token:
            return jsonify({"error": "Token de acesso requerido"}), 401

        session = session_service.validate_session(token)
        if session is None:
            current_app.logger.warning(
                "Rejected token path=%s ip=%s", request.path, request.remote_addr
            )
            return jsonify({"error": "Token inválido"}), 403

        kwargs["ctx"] = AuthContext(
            user=session.user,
            company_id=session.company_id,
            role=session.user.role,
            session=session,
        )
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Restrict a route to the given roles. Must be stacked below @require_auth.
    """
    allowed = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            ctx = kwargs.get("ctx")
            if ctx is None:
                return jsonify({"error": "Token de acesso requerido"}), 401

            if ctx.role not in allowed:
                current_app.logger.warning(
                    "Access denied user_id=%s role=%s path=%s",
                    ctx.user_id, ctx.role, request.path,
                )
                return jsonify({"error": "Acesso negado"}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
