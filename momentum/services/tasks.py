"""Task modification service."""
import logging
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from momentum.clock import Clock
from momentum.db import atomic
from momentum.errors import NotFoundError, ValidationError
from momentum.models.task import Task, TASK_COMPLETED, TASK_PENDING, TASK_STATUSES
from momentum.services.schedule import get_tasks_by_date

logger = logging.getLogger(__name__)


def _get_owned_task(db: Session, user_id: UUID, task_id: UUID) -> Task:
    task = db.query(Task).filter(
        Task.id == task_id,
        Task.user_id == user_id
    ).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def _require_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title cannot be empty")
    return cleaned


def create_manual_task(
    db: Session,
    clock: Clock,
    user_id: UUID,
    title: str,
    deadline: Optional[datetime] = None
) -> Task:
    """Create a user task for today, not linked to any roadmap step."""
    task = Task(
        user_id=user_id,
        title=_require_title(title),
        status=TASK_PENDING,
        scheduled_date=clock.today(),
        deadline=deadline
    )
    with atomic(db, "create task"):
        db.add(task)

    db.refresh(task)
    return task


def get_schedule_read_only(db: Session, user_id: UUID, target_date: date) -> List[Task]:
    """Tasks for a date. Never generates anything."""
    return get_tasks_by_date(db, user_id, target_date)


def update_task_status(db: Session, clock: Clock, user_id: UUID, task_id: UUID, status: str) -> Task:
    """
    Complete a pending task.

    Only pending -> completed is a user transition. Missed is set by day
    finalization, and completed/missed are terminal.

    Raises:
        ValidationError: If the status or the transition is not allowed
        NotFoundError: If the task is not the caller's
    """
    if status not in TASK_STATUSES:
        raise ValidationError(f"Invalid task status '{status}'")

    task = _get_owned_task(db, user_id, task_id)

    if task.status != TASK_PENDING:
        raise ValidationError(f"Task is already {task.status}")
    if status != TASK_COMPLETED:
        raise ValidationError(f"Cannot change a pending task to '{status}'")

    with atomic(db, "update task status"):
        task.status = TASK_COMPLETED
        task.completed_at = clock.now()

    db.refresh(task)
    return task


def update_task_deadline(db: Session, user_id: UUID, task_id: UUID, deadline: datetime) -> Task:
    """Set or move a task deadline."""
    task = _get_owned_task(db, user_id, task_id)

    with atomic(db, "update task deadline"):
        task.deadline = deadline

    db.refresh(task)
    return task


def update_task_title(db: Session, user_id: UUID, task_id: UUID, title: str) -> Task:
    """Rename a task."""
    title = _require_title(title)
    task = _get_owned_task(db, user_id, task_id)

    with atomic(db, "update task title"):
        task.title = title

    db.refresh(task)
    return task


def delete_task(db: Session, user_id: UUID, task_id: UUID) -> None:
    """Delete one of the caller's tasks."""
    task = _get_owned_task(db, user_id, task_id)

    with atomic(db, "delete task"):
        db.delete(task)

    logger.info(f"Deleted task {task_id} for user {user_id}")
