"""Roadmap step API routes."""
from uuid import UUID
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from momentum.db import get_db
from momentum.dependencies import require_auth
from momentum.models.auth import User
from momentum.schemas.goal import StepCreate, StepStatusUpdate, StepReorder, RoadmapStepResponse
from momentum.services import goals as goal_service


router = APIRouter(prefix="/api/roadmap-steps", tags=["roadmap"])


# Declared before /{step_id} so "reorder" is not parsed as a step id
@router.put("/reorder", response_model=list[RoadmapStepResponse])
def reorder_roadmap_steps(
    payload: StepReorder,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Reorder the active goal's roadmap. Every step id must be listed once."""
    return goal_service.reorder_roadmap_steps(db, user.id, payload.step_ids)


@router.put("/{step_id}", response_model=RoadmapStepResponse)
def update_roadmap_step(
    step_id: UUID,
    payload: StepCreate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Rename a step."""
    return goal_service.update_roadmap_step(db, user.id, step_id, payload.title)


@router.patch("/{step_id}/status", response_model=RoadmapStepResponse)
def update_roadmap_step_status(
    step_id: UUID,
    payload: StepStatusUpdate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Mark a step of the active goal pending or done."""
    return goal_service.update_roadmap_step_status(db, user.id, step_id, payload.status.value)


@router.delete("/{step_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_roadmap_step(
    step_id: UUID,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Delete a step of the active goal; later steps move up by one."""
    goal_service.delete_roadmap_step(db, user.id, step_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
