"""Daily schedule generation and the start-of-day flow."""
import logging
from datetime import date, timedelta
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from momentum.clock import Clock
from momentum.db import end_read
from momentum.errors import MomentumError, PersistenceFailure
from momentum.models.goal import RoadmapStep, STEP_PENDING
from momentum.models.task import DailySchedule, Task, TASK_PENDING
from momentum.services.content_generator import ContentGenerator
from momentum.services.goals import get_active_goal_row
from momentum.services.reviews import finalize_day, get_review

logger = logging.getLogger(__name__)


def get_tasks_by_date(db: Session, user_id: UUID, target_date: date) -> List[Task]:
    """All tasks of a user for one date, oldest first."""
    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.scheduled_date == target_date
    ).order_by(Task.created_at.asc(), Task.id.asc()).all()


def get_focus_step(db: Session, goal_id: UUID):
    """Earliest-ordered pending step of a goal, or None when the roadmap is done."""
    return db.query(RoadmapStep).filter(
        RoadmapStep.goal_id == goal_id,
        RoadmapStep.status == STEP_PENDING
    ).order_by(RoadmapStep.step_order.asc()).first()


def is_day_claimed(db: Session, user_id: UUID, target_date: date) -> bool:
    """True once tasks have been generated for (user, date)."""
    return db.query(DailySchedule.id).filter(
        DailySchedule.user_id == user_id,
        DailySchedule.scheduled_date == target_date
    ).first() is not None


def get_or_create_schedule(
    db: Session,
    generator: ContentGenerator,
    user_id: UUID,
    target_date: date
) -> List[Task]:
    """
    Return the user's tasks for a date, generating them the first time.

    Existing tasks are returned as they are. A date that already has a
    DailySchedule claim row is never generated again, even when all of its
    tasks have since been deleted. Otherwise tasks are generated for the
    active goal's focus step and saved together with the claim row in one
    transaction. When a concurrent call already claimed the date, this
    call rolls back and returns the winner's tasks instead of saving a
    second set.

    No active goal, a finished roadmap or an empty generator answer all
    give an empty list and write nothing, so a later call can retry.

    Args:
        db: Database session
        generator: Content generator
        user_id: Owner of the schedule
        target_date: Scheduled date

    Returns:
        List of Task objects for target_date

    Raises:
        GenerationParseError: If the generator output is unreadable
        ContentGenerationError: If the generator cannot be reached
        PersistenceFailure: If the tasks cannot be saved
    """
    existing = get_tasks_by_date(db, user_id, target_date)
    if existing:
        return existing

    if is_day_claimed(db, user_id, target_date):
        logger.info(f"Schedule for user {user_id} on {target_date} was already generated, not regenerating")
        return existing

    goal = get_active_goal_row(db, user_id)
    if not goal:
        logger.info(f"No active goal for user {user_id}, nothing to schedule on {target_date}")
        return []

    focus_step = get_focus_step(db, goal.id)
    if not focus_step:
        logger.info(f"Roadmap of goal {goal.id} is complete, nothing to schedule on {target_date}")
        return []

    goal_description = goal.description
    focus_step_id = focus_step.id
    focus_step_title = focus_step.title
    prior_day_tasks = get_tasks_by_date(db, user_id, target_date - timedelta(days=1))
    # Detached copies keep their loaded state across end_read()
    for task in prior_day_tasks:
        db.expunge(task)
    end_read(db)

    generated = generator.generate_daily_tasks(goal_description, focus_step_title, prior_day_tasks)
    if not generated:
        logger.info(f"Content generator returned no tasks for user {user_id} on {target_date}")
        return []

    try:
        db.add(DailySchedule(
            user_id=user_id,
            scheduled_date=target_date,
            roadmap_step_id=focus_step_id
        ))
        db.flush()

        for item in generated:
            db.add(Task(
                user_id=user_id,
                roadmap_step_id=focus_step_id,
                title=item.title,
                status=TASK_PENDING,
                scheduled_date=target_date
            ))
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Schedule for user {user_id} on {target_date} was generated concurrently, using it")
        return get_tasks_by_date(db, user_id, target_date)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save schedule for user {user_id} on {target_date}: {e}")
        raise PersistenceFailure("Failed to save daily tasks") from e

    tasks = get_tasks_by_date(db, user_id, target_date)
    logger.info(f"Generated {len(tasks)} tasks for user {user_id} on {target_date} (step {focus_step_id})")
    return tasks


def start_day(
    db: Session,
    generator: ContentGenerator,
    clock: Clock,
    user_id: UUID
) -> List[Task]:
    """
    Session-start entry point: close yesterday lazily, then plan today.

    Yesterday is finalized only when it has no review yet. That backfill
    is best effort; its failure is logged and today's schedule is still
    produced.

    Returns:
        Today's tasks
    """
    today = clock.today()
    yesterday = today - timedelta(days=1)

    if get_review(db, user_id, yesterday) is None:
        logger.info(f"No review for {yesterday}, finalizing it for user {user_id}")
        try:
            finalize_day(db, generator, clock, user_id, yesterday)
        except MomentumError as e:
            logger.error(f"Lazy finalization of {yesterday} failed for user {user_id}, continuing: {e}")

    return get_or_create_schedule(db, generator, user_id, today)
