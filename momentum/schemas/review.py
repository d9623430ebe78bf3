"""Daily review Pydantic schemas."""
from pydantic import BaseModel
from datetime import date
from uuid import UUID


class StatusCount(BaseModel):
    """Number of tasks in one status."""
    status: str
    count: int


class FinalizeDayResponse(BaseModel):
    """Schema for the result of closing a day."""
    review_date: date
    summary: list[StatusCount]
    ai_feedback: str


class DailyReviewResponse(BaseModel):
    """Schema for a stored daily review."""
    user_id: UUID
    review_date: date
    summary: list[StatusCount]
    ai_feedback: str

    class Config:
        from_attributes = True
