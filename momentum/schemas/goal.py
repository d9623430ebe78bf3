"""Goal and roadmap Pydantic schemas."""
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from enum import Enum
from typing import Optional


class StepStatus(str, Enum):
    """Roadmap step status."""
    PENDING = "pending"
    DONE = "done"


# Request Schemas
class GoalCreate(BaseModel):
    """Schema for creating a goal."""
    description: str = Field(..., max_length=2000, description="Free-text goal")


class GoalUpdate(BaseModel):
    """Schema for re-planning a goal."""
    description: str = Field(..., max_length=2000, description="New goal description")


class StepCreate(BaseModel):
    """Schema for adding or renaming a roadmap step."""
    title: str = Field(..., max_length=500)


class StepStatusUpdate(BaseModel):
    """Schema for a step status change."""
    status: StepStatus


class StepReorder(BaseModel):
    """Schema for reordering the active goal's roadmap."""
    step_ids: list[UUID] = Field(..., min_length=1, description="Every step id, in the new order")


# Response Schemas
class RoadmapStepResponse(BaseModel):
    """Schema for a roadmap step."""
    id: UUID
    goal_id: UUID
    step_order: int
    title: str
    status: str

    class Config:
        from_attributes = True


class GoalResponse(BaseModel):
    """Schema for a goal."""
    id: UUID
    user_id: UUID
    description: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GoalWithStepsResponse(BaseModel):
    """Schema for a goal together with its roadmap."""
    goal: Optional[GoalResponse] = None
    steps: list[RoadmapStepResponse]
