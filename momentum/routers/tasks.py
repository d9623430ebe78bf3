"""Task API routes."""
from uuid import UUID
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from momentum.clock import Clock, get_clock
from momentum.db import get_db
from momentum.dependencies import require_auth
from momentum.models.auth import User
from momentum.schemas.task import (
    TaskCreate, TaskStatusUpdate, TaskDeadlineUpdate, TaskTitleUpdate, TaskResponse
)
from momentum.services import tasks as task_service


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Add a task of the user's own to today."""
    return task_service.create_manual_task(db, clock, user.id, payload.title, payload.deadline)


@router.patch("/{task_id}/status", response_model=TaskResponse)
def update_task_status(
    task_id: UUID,
    payload: TaskStatusUpdate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Complete a pending task."""
    return task_service.update_task_status(db, clock, user.id, task_id, payload.status)


@router.patch("/{task_id}/deadline", response_model=TaskResponse)
def update_task_deadline(
    task_id: UUID,
    payload: TaskDeadlineUpdate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    return task_service.update_task_deadline(db, user.id, task_id, payload.deadline)


@router.patch("/{task_id}/title", response_model=TaskResponse)
def update_task_title(
    task_id: UUID,
    payload: TaskTitleUpdate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    return task_service.update_task_title(db, user.id, task_id, payload.title)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: UUID,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    task_service.delete_task(db, user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
