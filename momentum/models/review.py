"""Daily review model."""
from sqlalchemy import (
    Column, Date, DateTime, Text, JSON,
    ForeignKey, UniqueConstraint, Uuid
)
from sqlalchemy.sql import func
import uuid
from momentum.db import Base


class DailyReview(Base):
    """Finalized record of one day's task outcomes. One per user per date."""

    __tablename__ = "daily_reviews"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    review_date = Column(Date, nullable=False)
    summary = Column(JSON, nullable=False)  # [{"status": ..., "count": ...}]
    ai_feedback = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'review_date', name='uq_daily_review_user_date'),
    )
