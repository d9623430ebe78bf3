"""Day finalization and daily review service."""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from momentum.clock import Clock
from momentum.db import atomic, end_read
from momentum.errors import ContentGenerationError, NotFoundError
from momentum.models.review import DailyReview
from momentum.models.task import Task, TASK_MISSED, TASK_PENDING, TASK_STATUSES
from momentum.services.content_generator import ContentGenerator
from momentum.services.goals import get_active_goal_row
from momentum.settings import settings

logger = logging.getLogger(__name__)


def mark_missed_tasks(db: Session, user_id: UUID, target_date: date, now: datetime) -> int:
    """
    Mark pending tasks of a date whose deadline has passed as missed.

    Tasks without a deadline, or with a deadline after `now`, stay pending.

    Returns:
        Number of tasks marked missed
    """
    with atomic(db, "mark missed tasks"):
        count = db.query(Task).filter(
            Task.user_id == user_id,
            Task.scheduled_date == target_date,
            Task.status == TASK_PENDING,
            Task.deadline.isnot(None),
            Task.deadline < now
        ).update({Task.status: TASK_MISSED}, synchronize_session=False)

    return count


def summarize_tasks(db: Session, user_id: UUID, target_date: date) -> List[Dict[str, Any]]:
    """
    Count tasks of a date grouped by status.

    Returns:
        List of {"status", "count"} in pending/completed/missed order,
        only for statuses that occur
    """
    rows = db.query(Task.status, func.count(Task.id)).filter(
        Task.user_id == user_id,
        Task.scheduled_date == target_date
    ).group_by(Task.status).all()

    counts = {status: count for status, count in rows}
    return [
        {"status": status, "count": counts[status]}
        for status in TASK_STATUSES
        if status in counts
    ]


def _request_feedback(generator: ContentGenerator, goal_description: str, summary: List[Dict[str, Any]]) -> str:
    try:
        feedback = generator.generate_feedback(goal_description, summary)
    except ContentGenerationError as e:
        logger.warning(f"Feedback generation failed, using fallback: {e}")
        return settings.FALLBACK_FEEDBACK

    if not feedback or not feedback.strip():
        logger.warning("Feedback generation returned nothing, using fallback")
        return settings.FALLBACK_FEEDBACK
    return feedback.strip()


def upsert_review(
    db: Session,
    user_id: UUID,
    review_date: date,
    summary: List[Dict[str, Any]],
    feedback: str
) -> DailyReview:
    """
    Insert or overwrite the review for (user, date).

    A concurrent insert for the same key loses on the unique constraint
    and is retried once as an update.
    """
    for attempt in range(2):
        try:
            review = get_review(db, user_id, review_date)
            if review:
                review.summary = summary
                review.ai_feedback = feedback
            else:
                review = DailyReview(
                    user_id=user_id,
                    review_date=review_date,
                    summary=summary,
                    ai_feedback=feedback
                )
                db.add(review)
            db.commit()
            return review
        except IntegrityError:
            db.rollback()
            if attempt == 1:
                raise
            logger.info(f"Review for {review_date} was written concurrently, retrying as update")


def finalize_day(
    db: Session,
    generator: ContentGenerator,
    clock: Clock,
    user_id: UUID,
    target_date: date
) -> Tuple[List[Dict[str, Any]], str]:
    """
    Close out a date for a user.

    Marks expired pending tasks missed, summarizes the day, asks the
    generator for feedback and upserts the DailyReview. Safe to call
    repeatedly; the latest call's summary and feedback win.

    Feedback generation never fails the call (a fixed fallback is used),
    and neither does saving the review: that failure is logged and the
    computed result is still returned.

    Args:
        db: Database session
        generator: Content generator
        clock: Source of the finalization moment
        user_id: User whose day is closed
        target_date: Date being closed

    Returns:
        Tuple of (summary, feedback)

    Raises:
        PersistenceFailure: If expired tasks cannot be marked missed
    """
    missed = mark_missed_tasks(db, user_id, target_date, clock.now())
    if missed:
        logger.info(f"Marked {missed} tasks missed for user {user_id} on {target_date}")

    summary = summarize_tasks(db, user_id, target_date)

    goal = get_active_goal_row(db, user_id)
    goal_description = goal.description if goal else settings.DEFAULT_GOAL_DESCRIPTION
    end_read(db)

    feedback = _request_feedback(generator, goal_description, summary)

    try:
        upsert_review(db, user_id, target_date, summary, feedback)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save daily review for user {user_id} on {target_date}: {e}")

    return summary, feedback


def get_review(db: Session, user_id: UUID, review_date: date) -> Optional[DailyReview]:
    """Return the review for (user, date), or None."""
    return db.query(DailyReview).filter(
        DailyReview.user_id == user_id,
        DailyReview.review_date == review_date
    ).first()


def get_review_by_date(db: Session, user_id: UUID, review_date: date) -> DailyReview:
    """
    Read-only lookup of a finalized day.

    Raises:
        NotFoundError: If no review exists for that date
    """
    review = get_review(db, user_id, review_date)
    if not review:
        raise NotFoundError(f"No review for {review_date.isoformat()}")
    return review
