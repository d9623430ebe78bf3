"""Goal API routes."""
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from momentum.db import get_db
from momentum.dependencies import require_auth
from momentum.models.auth import User
from momentum.schemas.goal import (
    GoalCreate, GoalUpdate, StepCreate,
    GoalResponse, GoalWithStepsResponse, RoadmapStepResponse
)
from momentum.services import goals as goal_service
from momentum.services.content_generator import ContentGenerator, get_content_generator


router = APIRouter(prefix="/api/goals", tags=["goals"])


def _goal_with_steps(goal, steps) -> GoalWithStepsResponse:
    return GoalWithStepsResponse(
        goal=GoalResponse.model_validate(goal) if goal else None,
        steps=[RoadmapStepResponse.model_validate(step) for step in steps]
    )


@router.post("", response_model=GoalWithStepsResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator)
):
    """Create a goal, generate its roadmap and make it the active goal."""
    goal, steps = goal_service.create_goal(db, generator, user.id, payload.description)
    return _goal_with_steps(goal, steps)


@router.get("/active", response_model=GoalWithStepsResponse)
def get_active_goal(
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Active goal with its ordered roadmap. `goal` is null when there is none."""
    goal, steps = goal_service.get_active_goal(db, user.id)
    return _goal_with_steps(goal, steps)


@router.put("/{goal_id}", response_model=GoalWithStepsResponse)
def update_goal(
    goal_id: UUID,
    payload: GoalUpdate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator)
):
    """Re-plan a goal. Existing steps and their progress are replaced."""
    goal, steps = goal_service.update_goal(db, generator, user.id, goal_id, payload.description)
    return _goal_with_steps(goal, steps)


@router.get("/{goal_id}/steps", response_model=list[RoadmapStepResponse])
def get_roadmap_steps(
    goal_id: UUID,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Ordered roadmap of one of the caller's goals."""
    return goal_service.get_roadmap_steps(db, user.id, goal_id)


@router.post("/{goal_id}/steps", response_model=RoadmapStepResponse, status_code=status.HTTP_201_CREATED)
def add_roadmap_step(
    goal_id: UUID,
    payload: StepCreate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Append a step at the end of the roadmap."""
    return goal_service.add_roadmap_step(db, user.id, goal_id, payload.title)
