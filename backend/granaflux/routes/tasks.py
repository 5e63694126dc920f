# Overview: Flask API routes for tasks; CRUD, status transitions and team reports.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models.auth import ROLE_ADMIN, ROLE_OWNER, ROLE_USER
from ..models.tasks import TASK_PRIORITIES, TASK_STATUSES
from ..pagination import page_params
from ..services import reporting_service, task_service
from ..validation import (
    DATETIME,
    ENUM,
    REFERENCE,
    TEXT,
    FieldRule,
    ModelValidationPolicy,
    query_datetime,
    query_int,
    validate_payload,
)

tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")

_STATUS_MESSAGE = "Status deve ser PENDING, IN_PROGRESS, COMPLETED ou CANCELLED"
_PRIORITY_MESSAGE = "Prioridade deve ser LOW, MEDIUM, HIGH ou URGENT"

TASK_CREATE_POLICY = ModelValidationPolicy(fields={
    "title": FieldRule(TEXT, required=True, max_length=255, message="Título é obrigatório"),
    "description": FieldRule(TEXT),
    "priority": FieldRule(ENUM, choices=TASK_PRIORITIES, message=_PRIORITY_MESSAGE),
    "assigneeId": FieldRule(REFERENCE, message="Funcionário inválido"),
    "dueDate": FieldRule(DATETIME, message="Data de vencimento inválida"),
})

TASK_UPDATE_POLICY = ModelValidationPolicy(fields={
    "title": FieldRule(TEXT, nullable=False, max_length=255, message="Título não pode estar vazio"),
    "description": FieldRule(TEXT),
    "priority": FieldRule(ENUM, nullable=False, choices=TASK_PRIORITIES, message=_PRIORITY_MESSAGE),
    "status": FieldRule(ENUM, nullable=False, choices=TASK_STATUSES, message=_STATUS_MESSAGE),
    "assigneeId": FieldRule(REFERENCE, message="Funcionário inválido"),
    "dueDate": FieldRule(DATETIME, message="Data de vencimento inválida"),
})

STATUS_POLICY = ModelValidationPolicy(fields={
    "status": FieldRule(ENUM, required=True, choices=TASK_STATUSES, message=_STATUS_MESSAGE),
})


def _choice(name: str, choices) -> str | None:
    value = (request.args.get(name) or "").upper()
    return value if value in choices else None


def _period():
    return reporting_service.resolve_period(
        month=query_int(request.args, "month"),
        year=query_int(request.args, "year"),
        start=query_datetime(request.args, "startDate"),
        end=query_datetime(request.args, "endDate"),
    )


@tasks_bp.get("")
@require_auth
def list_tasks(ctx):
    """
    Query params: page, limit, status, assigneeId, priority, month + year.

    Ordered by priority (URGENT first) then newest. USER callers only see
    tasks assigned to them.
    """
    page, limit = page_params(request.args)
    start, end = _period()
    result = task_service.list_tasks(
        ctx.company_id,
        role=ctx.role,
        user_id=ctx.user_id,
        page=page,
        limit=limit,
        status=_choice("status", TASK_STATUSES),
        assignee_id=query_int(request.args, "assigneeId", minimum=1),
        priority=_choice("priority", TASK_PRIORITIES),
        start=start,
        end=end,
    )
    return jsonify(result), 200


@tasks_bp.get("/<int:task_id>")
@require_auth
def get_task(task_id: int, ctx):
    task = task_service.get_task(ctx.company_id, task_id, role=ctx.role, user_id=ctx.user_id)
    return jsonify(task.to_dict()), 200


@tasks_bp.post("")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def create_task(ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=TASK_CREATE_POLICY, partial=False)
    task = task_service.create_task(ctx.company_id, patch, ctx.user_id)
    return jsonify(task.to_dict()), 201


@tasks_bp.put("/<int:task_id>/status")
@require_auth
def update_status(task_id: int, ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=STATUS_POLICY, partial=False)
    task = task_service.update_status(
        ctx.company_id, task_id, patch["status"], role=ctx.role, user_id=ctx.user_id
    )
    return jsonify(task.to_dict()), 200


@tasks_bp.put("/<int:task_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def update_task(task_id: int, ctx):
    patch = validate_payload(payload=request.get_json(silent=True), policy=TASK_UPDATE_POLICY, partial=True)
    task = task_service.update_task(ctx.company_id, task_id, patch, ctx.user_id)
    return jsonify(task.to_dict()), 200


@tasks_bp.delete("/<int:task_id>")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def delete_task(task_id: int, ctx):
    task_service.delete_task(ctx.company_id, task_id, ctx.user_id)
    return jsonify({"message": "Task deletada com sucesso"}), 200


@tasks_bp.get("/reports/productivity")
@require_auth
def productivity(ctx):
    # USER callers only get their own row
    assignee_id = ctx.user_id if ctx.role == ROLE_USER else query_int(request.args, "userId", minimum=1)
    start, end = _period()
    report = task_service.productivity_report(
        ctx.company_id, start=start, end=end, assignee_id=assignee_id
    )
    return jsonify(report), 200


@tasks_bp.get("/reports/team-overview")
@require_auth
@require_role(ROLE_OWNER, ROLE_ADMIN)
def team_overview(ctx):
    return jsonify(task_service.team_overview(ctx.company_id)), 200
