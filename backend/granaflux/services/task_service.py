# Overview: Service-layer operations for tasks; status transitions and productivity reports.

from datetime import datetime

from flask import current_app
from sqlalchemy import case

from ..errors import BusinessRuleError, NotFoundError
from ..extensions import db
from ..models import Task, User
from ..models.auth import ROLE_ADMIN, ROLE_CASHIER, ROLE_USER
from ..models.tasks import (
    TASK_CANCELLED,
    TASK_COMPLETED,
    TASK_IN_PROGRESS,
    TASK_PENDING,
    TASK_PRIORITIES,
    TASK_TRANSITIONS,
)
from ..pagination import paginate
from ..time_utils import to_utc_z, utcnow
from .tenant_service import get_scoped, scoped_query

NOT_FOUND_MESSAGE = "Task não encontrada"
ASSIGNEE_NOT_FOUND_MESSAGE = "Funcionário não encontrado"

# URGENT first
_PRIORITY_RANK = case(
    {name: rank for rank, name in enumerate(TASK_PRIORITIES)},
    value=Task.priority,
    else_=-1,
)


class TaskTransitionError(BusinessRuleError):
    pass


def _visible_tasks(company_id: int, *, role: str, user_id: int):
    """USER callers only see tasks assigned to them."""
    query = scoped_query(Task, company_id)
    if role == ROLE_USER:
        query = query.filter(Task.assignee_id == user_id)
    return query


def list_tasks(
    company_id: int,
    *,
    role: str,
    user_id: int,
    page: int,
    limit: int,
    status: str | None = None,
    assignee_id: int | None = None,
    priority: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict:
    query = _visible_tasks(company_id, role=role, user_id=user_id)
    if status:
        query = query.filter(Task.status == status)
    if assignee_id is not None:
        query = query.filter(Task.assignee_id == assignee_id)
    if priority:
        query = query.filter(Task.priority == priority)
    if start is not None:
        query = query.filter(Task.created_at >= start)
    if end is not None:
        query = query.filter(Task.created_at <= end)

    query = query.order_by(_PRIORITY_RANK.desc(), Task.created_at.desc(), Task.id.desc())
    tasks, pagination = paginate(query, page=page, limit=limit)
    return {
        "tasks": [t.to_dict() for t in tasks],
        "pagination": pagination,
    }


def get_task(company_id: int, task_id: int, *, role: str, user_id: int) -> Task:
    task = _visible_tasks(company_id, role=role, user_id=user_id).filter(Task.id == task_id).first()
    if task is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return task


def _ensure_assignee(company_id: int, assignee_id: int | None) -> None:
    if assignee_id is not None:
        get_scoped(User, assignee_id, company_id, ASSIGNEE_NOT_FOUND_MESSAGE, error_cls=BusinessRuleError)


def create_task(company_id: int, patch: dict, creator_id: int) -> Task:
    _ensure_assignee(company_id, patch.get("assignee_id"))

    task = Task(
        company_id=company_id,
        creator_id=creator_id,
        title=patch["title"],
        description=patch.get("description"),
        priority=patch.get("priority") or "MEDIUM",
        assignee_id=patch.get("assignee_id"),
        due_date=patch.get("due_date"),
        status=TASK_PENDING,
    )
    db.session.add(task)
    db.session.commit()

    current_app.logger.info("Task created task_id=%s creator_id=%s", task.id, creator_id)
    return task


def apply_status(task: Task, status: str, now: datetime | None = None) -> None:
    """
    Set a new status and stamp lifecycle timestamps.

    - IN_PROGRESS stamps started_at only the first time
    - COMPLETED stamps completed_at on every transition
    """
    now = now or utcnow()

    if current_app.config.get("TASK_STRICT_TRANSITIONS") and status != task.status:
        allowed = TASK_TRANSITIONS.get(task.status, frozenset())
        if status not in allowed:
            raise TaskTransitionError(f"Transição de status inválida: {task.status} -> {status}")

    task.status = status
    if status == TASK_IN_PROGRESS and task.started_at is None:
        task.started_at = now
    elif status == TASK_COMPLETED:
        task.completed_at = now


def update_status(company_id: int, task_id: int, status: str, *, role: str, user_id: int) -> Task:
    task = get_task(company_id, task_id, role=role, user_id=user_id)
    apply_status(task, status)
    db.session.commit()

    current_app.logger.info("Task status updated task_id=%s status=%s user_id=%s", task.id, status, user_id)
    return task


def update_task(company_id: int, task_id: int, patch: dict, user_id: int) -> Task:
    task = get_scoped(Task, task_id, company_id, NOT_FOUND_MESSAGE)
    if "assignee_id" in patch:
        _ensure_assignee(company_id, patch["assignee_id"])

    for field in ("title", "description", "priority", "assignee_id", "due_date"):
        if field in patch:
            setattr(task, field, patch[field])
    if "status" in patch:
        apply_status(task, patch["status"])

    db.session.commit()
    current_app.logger.info("Task updated task_id=%s user_id=%s", task.id, user_id)
    return task


def delete_task(company_id: int, task_id: int, user_id: int) -> None:
    task = get_scoped(Task, task_id, company_id, NOT_FOUND_MESSAGE)
    db.session.delete(task)
    db.session.commit()
    current_app.logger.info("Task deleted task_id=%s user_id=%s", task_id, user_id)


def productivity_report(
    company_id: int,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    assignee_id: int | None = None,
) -> list[dict]:
    """Per-assignee task counts and average completion time in hours."""
    query = scoped_query(Task, company_id).filter(Task.assignee_id.isnot(None))
    if start is not None:
        query = query.filter(Task.created_at >= start)
    if end is not None:
        query = query.filter(Task.created_at <= end)
    if assignee_id is not None:
        query = query.filter(Task.assignee_id == assignee_id)

    stats: dict[int, dict] = {}
    durations: dict[int, list[float]] = {}
    for task in query.order_by(Task.id.asc()).all():
        entry = stats.get(task.assignee_id)
        if entry is None:
            entry = stats[task.assignee_id] = {
                "user": task.assignee.to_summary(),
                "totalTasks": 0,
                "completedTasks": 0,
                "inProgressTasks": 0,
                "pendingTasks": 0,
                "cancelledTasks": 0,
                "averageCompletionTime": 0,
            }
            durations[task.assignee_id] = []

        entry["totalTasks"] += 1
        if task.status == TASK_COMPLETED:
            entry["completedTasks"] += 1
            if task.started_at and task.completed_at:
                hours = (task.completed_at - task.started_at).total_seconds() / 3600
                durations[task.assignee_id].append(hours)
        elif task.status == TASK_IN_PROGRESS:
            entry["inProgressTasks"] += 1
        elif task.status == TASK_PENDING:
            entry["pendingTasks"] += 1
        elif task.status == TASK_CANCELLED:
            entry["cancelledTasks"] += 1

    for assignee, entry in stats.items():
        samples = durations[assignee]
        if samples:
            entry["averageCompletionTime"] = round(sum(samples) / len(samples))

    return list(stats.values())


def team_overview(company_id: int) -> list[dict]:
    """Who is working on what right now (non-owner staff)."""
    now = utcnow()
    users = scoped_query(User, company_id).filter(
        User.role.in_((ROLE_USER, ROLE_CASHIER, ROLE_ADMIN)),
        User.is_active.is_(True),
    ).order_by(User.name.asc()).all()

    active = scoped_query(Task, company_id).filter(
        Task.status.in_((TASK_PENDING, TASK_IN_PROGRESS)),
        Task.assignee_id.isnot(None),
    ).all()

    overview = []
    for user in users:
        mine = [t for t in active if t.assignee_id == user.id]
        in_progress = [t for t in mine if t.status == TASK_IN_PROGRESS]
        overview.append({
            "user": {**user.to_summary(), "role": user.role},
            "status": "WORKING" if in_progress else "IDLE",
            "activeTasks": len(mine),
            "inProgressTasks": len(in_progress),
            "pendingTasks": len(mine) - len(in_progress),
            "currentTasks": [
                {
                    "id": t.id,
                    "title": t.title,
                    "priority": t.priority,
                    "startedAt": to_utc_z(t.started_at),
                    "timeWorking": round((now - t.started_at).total_seconds() / 3600) if t.started_at else 0,
                }
                for t in in_progress
            ],
        })
    return overview
