# Overview: Flask API routes for users; staff management inside the caller's company.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models.auth import ASSIGNABLE_ROLES, ROLE_ADMIN, ROLE_OWNER
from ..services import auth_service, user_service
from ..validation import EMAIL, ENUM, TEXT, FieldRule, ModelValidationPolicy, validate_payload

users_bp = Blueprint("users", __name__, url_prefix="/api/users")

USER_CREATE_POLICY = ModelValidationPolicy(fields={
    "email": FieldRule(EMAIL, required=True, message="Email inválido"),
    "password": FieldRule(TEXT, required=True, strip=False, min_length=auth_service.MIN_PASSWORD_LENGTH,
                          message="Senha deve ter pelo menos 6 caracteres"),
    "name": FieldRule(TEXT, required=True, max_length=255, message="Nome é obrigatório"),
    "role": FieldRule(ENUM, required=True, choices=ASSIGNABLE_ROLES,
                      message="Role deve ser USER, CASHIER ou ADMIN"),
})

USER_UPDATE_POLICY = ModelValidationPolicy(fields={
    "email": FieldRule(EMAIL, nullable=False, message="Email inválido"),
    "name": FieldRule(TEXT, nullable=False, max_length=255, message="Nome não pode estar vazio"),
    "role": FieldRule(ENUM, nullable=False, choices=ASSIGNABLE_ROLES,
                      message="Role deve ser USER, CASHIER ou ADMIN"),
})


@users_bp.get("")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def list_users(ctx):
    users = user_service.list_users(ctx.company_id)
    return jsonify([u.to_dict() for u in users]), 200


@users_bp.get("/me/profile")
@require_auth
def my_profile(ctx):
    return jsonify(ctx.user.to_dict(include_company=True)), 200


@users_bp.get("/<int:user_id>")
@require_auth
def get_user(user_id: int, ctx):
    user = user_service.get_user(ctx.company_id, user_id)
    return jsonify(user.to_dict()), 200


@users_bp.post("")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def create_user(ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=USER_CREATE_POLICY, partial=False)
    user = user_service.create_user(ctx.company_id, patch, ctx.user_id)
    return jsonify(user.to_dict()), 201


@users_bp.put("/<int:user_id>")
@require_auth
def update_user(user_id: int, ctx):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(payload=payload, policy=USER_UPDATE_POLICY, partial=True)
    if isinstance(payload.get("isActive"), bool):
        patch["is_active"] = payload["isActive"]

    user = user_service.update_user(
        ctx.company_id, user_id, patch, actor=ctx.user, actor_role=ctx.role
    )
    return jsonify(user.to_dict()), 200


@users_bp.put("/<int:user_id>/password")
@require_auth
def change_password(user_id: int, ctx):
    payload = request.get_json(silent=True) or {}
    new_password = payload.get("newPassword")
    auth_service.validate_password_strength(new_password, field="newPassword")

    user_service.change_password(
        ctx.company_id,
        user_id,
        actor=ctx.user,
        actor_role=ctx.role,
        current_password=payload.get("currentPassword"),
        new_password=new_password,
        keep_session_id=ctx.session.id,
    )
    return jsonify({"message": "Senha alterada com sucesso"}), 200


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role(ROLE_OWNER)
def delete_user(user_id: int, ctx):
    user_service.delete_user(ctx.company_id, user_id, ctx.user_id)
    return jsonify({"message": "Usuário deletado com sucesso"}), 200
