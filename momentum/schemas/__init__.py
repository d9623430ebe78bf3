"""Pydantic schemas."""
from momentum.schemas.goal import (
    GoalCreate, GoalUpdate, StepCreate, StepStatusUpdate, StepReorder,
    RoadmapStepResponse, GoalResponse, GoalWithStepsResponse
)
from momentum.schemas.task import (
    TaskCreate, TaskStatusUpdate, TaskDeadlineUpdate, TaskTitleUpdate, TaskResponse
)
from momentum.schemas.review import StatusCount, FinalizeDayResponse, DailyReviewResponse

__all__ = [
    "GoalCreate",
    "GoalUpdate",
    "StepCreate",
    "StepStatusUpdate",
    "StepReorder",
    "RoadmapStepResponse",
    "GoalResponse",
    "GoalWithStepsResponse",
    "TaskCreate",
    "TaskStatusUpdate",
    "TaskDeadlineUpdate",
    "TaskTitleUpdate",
    "TaskResponse",
    "StatusCount",
    "FinalizeDayResponse",
    "DailyReviewResponse",
]
