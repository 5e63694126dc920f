# Overview: Flask API routes for authentication; registration, login, logout and current user.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth
from ..services import auth_service, session_service
from ..validation import EMAIL, TEXT, FieldRule, ModelValidationPolicy, validate_payload

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

REGISTER_POLICY = ModelValidationPolicy(fields={
    "email": FieldRule(EMAIL, required=True, message="Email inválido"),
    "password": FieldRule(TEXT, required=True, strip=False, min_length=auth_service.MIN_PASSWORD_LENGTH,
                          message="Senha deve ter pelo menos 6 caracteres"),
    "name": FieldRule(TEXT, required=True, max_length=255, message="Nome é obrigatório"),
    "companyName": FieldRule(TEXT, required=True, max_length=255, message="Nome da empresa é obrigatório"),
    "cnpj": FieldRule(TEXT, max_length=18),
})

LOGIN_POLICY = ModelValidationPolicy(fields={
    "email": FieldRule(EMAIL, required=True, message="Email inválido"),
    "password": FieldRule(TEXT, required=True, strip=False, message="Senha é obrigatória"),
})


def _session_payload(user, token: str) -> dict:
    return {"token": token, "user": user.to_dict(include_company=True)}


@auth_bp.post("/register")
def register():
    """Create a company with its OWNER account and return a session token."""
    patch = validate_payload(payload=request.get_json(silent=True), policy=REGISTER_POLICY, partial=False)

    user, token = auth_service.register_company(
        email=patch["email"],
        password=patch["password"],
        name=patch["name"],
        company_name=patch["company_name"],
        cnpj=patch.get("cnpj"),
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    payload = _session_payload(user, token)
    payload["message"] = "Empresa registrada com sucesso"
    return jsonify(payload), 201


@auth_bp.post("/login")
def login():
    patch = validate_payload(payload=request.get_json(silent=True), policy=LOGIN_POLICY, partial=False)

    user, token = auth_service.login(
        patch["email"],
        patch["password"],
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    payload = _session_payload(user, token)
    payload["message"] = "Login realizado com sucesso"
    return jsonify(payload), 200


@auth_bp.post("/logout")
@require_auth
def logout(ctx):
    session_service.revoke_session(ctx.session)
    return jsonify({"message": "Logout realizado com sucesso"}), 200


@auth_bp.get("/me")
@require_auth
def me(ctx):
    data = ctx.user.to_dict(include_company=True)
    return jsonify({"user": data}), 200
