"""Goal and roadmap step models."""
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Text,
    ForeignKey, Index, CheckConstraint, Uuid, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from momentum.db import Base


STEP_PENDING = "pending"
STEP_DONE = "done"
STEP_STATUSES = (STEP_PENDING, STEP_DONE)


class Goal(Base):
    """A user's high-level objective. At most one is active per user."""

    __tablename__ = "goals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    description = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    steps = relationship(
        "RoadmapStep",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="RoadmapStep.step_order"
    )

    __table_args__ = (
        Index(
            'uq_goals_one_active_per_user',
            'user_id',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active = 1'),
        ),
    )


class RoadmapStep(Base):
    """Ordered milestone of a goal; orders are 1..N with no gaps at rest."""

    __tablename__ = "roadmap_steps"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    goal_id = Column(
        Uuid,
        ForeignKey("goals.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Not unique: renumbering shifts orders one row at a time. Writers
    # serialize on the parent goal row lock instead.
    step_order = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    status = Column(String, default=STEP_PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    goal = relationship("Goal", back_populates="steps")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'done')", name='ck_roadmap_step_status'),
        CheckConstraint('step_order >= 1', name='ck_roadmap_step_order_positive'),
    )
