from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

TASK_PENDING = "PENDING"
TASK_IN_PROGRESS = "IN_PROGRESS"
TASK_COMPLETED = "COMPLETED"
TASK_CANCELLED = "CANCELLED"

TASK_STATUSES = (TASK_PENDING, TASK_IN_PROGRESS, TASK_COMPLETED, TASK_CANCELLED)
TASK_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")

# Allowed next states per current state; enforced only when strict transitions are on.
TASK_TRANSITIONS = {
    TASK_PENDING: frozenset({TASK_IN_PROGRESS, TASK_CANCELLED}),
    TASK_IN_PROGRESS: frozenset({TASK_PENDING, TASK_COMPLETED, TASK_CANCELLED}),
    TASK_COMPLETED: frozenset(),
    TASK_CANCELLED: frozenset(),
}


class Task(db.Model):
    __tablename__ = "tasks"
    __table_args__ = (
        db.Index("ix_tasks_company_status", "company_id", "status"),
        db.Index("ix_tasks_company_assignee", "company_id", "assignee_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    assignee_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    creator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default=TASK_PENDING)
    priority = db.Column(db.String(16), nullable=False, default="MEDIUM")

    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    started_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    assignee = db.relationship("User", foreign_keys=[assignee_id])
    creator = db.relationship("User", foreign_keys=[creator_id])

    def __repr__(self) -> str:
        return f"<Task id={self.id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "assigneeId": self.assignee_id,
            "assignee": self.assignee.to_summary() if self.assignee else None,
            "creator": self.creator.to_summary() if self.creator else None,
            "dueDate": to_utc_z(self.due_date),
            "startedAt": to_utc_z(self.started_at),
            "completedAt": to_utc_z(self.completed_at),
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
