"""Task Pydantic schemas."""
from pydantic import BaseModel, Field
from datetime import date, datetime
from uuid import UUID
from typing import Optional


# Request Schemas
class TaskCreate(BaseModel):
    """Schema for creating a manual task."""
    title: str = Field(..., max_length=500)
    deadline: Optional[datetime] = Field(None, description="Optional deadline")


class TaskStatusUpdate(BaseModel):
    """Schema for a task status change."""
    status: str = Field(..., description="Only 'completed' is accepted from users")


class TaskDeadlineUpdate(BaseModel):
    """Schema for moving a deadline."""
    deadline: datetime


class TaskTitleUpdate(BaseModel):
    """Schema for renaming a task."""
    title: str = Field(..., max_length=500)


# Response Schemas
class TaskResponse(BaseModel):
    """Schema for a task."""
    id: UUID
    user_id: UUID
    roadmap_step_id: Optional[UUID] = None
    title: str
    status: str
    scheduled_date: date
    deadline: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
