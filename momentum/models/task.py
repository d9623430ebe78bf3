"""Task and daily schedule models."""
from sqlalchemy import (
    Column, String, Date, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Index, Uuid
)
from sqlalchemy.sql import func
import uuid
from momentum.db import Base


TASK_PENDING = "pending"
TASK_COMPLETED = "completed"
TASK_MISSED = "missed"
TASK_STATUSES = (TASK_PENDING, TASK_COMPLETED, TASK_MISSED)


class Task(Base):
    """Dated action item, optionally linked to the focus step it came from."""

    __tablename__ = "tasks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    # Back-reference only; steps may be deleted by a goal re-plan
    roadmap_step_id = Column(
        Uuid,
        ForeignKey("roadmap_steps.id", ondelete="SET NULL"),
        nullable=True
    )
    title = Column(String, nullable=False)
    status = Column(String, default=TASK_PENDING, nullable=False)
    scheduled_date = Column(Date, nullable=False)
    deadline = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('ix_tasks_user_scheduled_date', 'user_id', 'scheduled_date'),
        CheckConstraint("status IN ('pending', 'completed', 'missed')", name='ck_task_status'),
    )


class DailySchedule(Base):
    """
    Claim row for a generated day.

    Inserted in the same transaction as the generated tasks; the unique
    constraint lets exactly one concurrent generation for a
    (user, date) pair commit.
    """

    __tablename__ = "daily_schedules"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    scheduled_date = Column(Date, nullable=False)
    roadmap_step_id = Column(
        Uuid,
        ForeignKey("roadmap_steps.id", ondelete="SET NULL"),
        nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'scheduled_date', name='uq_daily_schedule_user_date'),
    )
