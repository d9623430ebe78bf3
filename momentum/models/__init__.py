"""Database models."""
# Import User first as other models have foreign keys to it
from momentum.models.auth import User, Session
from momentum.models.goal import Goal, RoadmapStep
from momentum.models.task import Task, DailySchedule
from momentum.models.review import DailyReview

__all__ = [
    "User",
    "Session",
    "Goal",
    "RoadmapStep",
    "Task",
    "DailySchedule",
    "DailyReview",
]
