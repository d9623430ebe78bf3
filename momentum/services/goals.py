"""Goal and roadmap management service."""
import logging
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from momentum.db import atomic, end_read
from momentum.errors import ForbiddenError, GenerationEmpty, NotFoundError, ValidationError
from momentum.models.goal import Goal, RoadmapStep, STEP_PENDING, STEP_STATUSES
from momentum.services.content_generator import ContentGenerator, GeneratedStep

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} cannot be empty")
    return cleaned


def _generate_steps(generator: ContentGenerator, description: str) -> List[GeneratedStep]:
    steps = generator.generate_roadmap(description)
    if not steps:
        raise GenerationEmpty("Content generator did not produce any roadmap steps")
    return steps


def _add_steps(db: Session, goal: Goal, generated: Sequence[GeneratedStep]) -> List[RoadmapStep]:
    # Generator orders are only used for sorting; stored orders are always 1..N
    steps = []
    for position, step in enumerate(generated, start=1):
        roadmap_step = RoadmapStep(
            goal_id=goal.id,
            step_order=position,
            title=step.title,
            status=STEP_PENDING
        )
        db.add(roadmap_step)
        steps.append(roadmap_step)
    return steps


def get_active_goal_row(db: Session, user_id: UUID) -> Optional[Goal]:
    """Return the user's active goal, or None."""
    return db.query(Goal).filter(
        Goal.user_id == user_id,
        Goal.is_active == True  # noqa: E712
    ).first()


def _get_owned_goal(db: Session, user_id: UUID, goal_id: UUID) -> Goal:
    goal = db.query(Goal).filter(
        Goal.id == goal_id,
        Goal.user_id == user_id
    ).first()
    if not goal:
        raise NotFoundError("Goal not found")
    return goal


def _lock_goal(db: Session, user_id: UUID, goal_id: UUID) -> Goal:
    """
    Lock one of the caller's goals for the rest of the transaction.

    Every write that reads step orders and then renumbers them takes this
    lock first, so concurrent roadmap edits of one goal run one after the
    other and each sees the orders the previous one committed.
    """
    goal = db.query(Goal).filter(
        Goal.id == goal_id,
        Goal.user_id == user_id
    ).populate_existing().with_for_update().first()
    if not goal:
        raise NotFoundError("Goal not found")
    return goal


def _ordered_steps(db: Session, goal_id: UUID) -> List[RoadmapStep]:
    return db.query(RoadmapStep).filter(
        RoadmapStep.goal_id == goal_id
    ).order_by(RoadmapStep.step_order.asc()).populate_existing().all()


def create_goal(
    db: Session,
    generator: ContentGenerator,
    user_id: UUID,
    description: str
) -> Tuple[Goal, List[RoadmapStep]]:
    """
    Create a new active goal with a generated roadmap.

    The generator is called before anything is written. Deactivating the
    previous goal, inserting the new goal and inserting every step then
    happen in one transaction.

    Args:
        db: Database session
        generator: Content generator
        user_id: Owner of the goal
        description: Free-text goal

    Returns:
        Tuple of (goal, steps ordered 1..N)

    Raises:
        ValidationError: If description is empty
        GenerationEmpty: If the generator returns zero steps
        PersistenceFailure: If the goal or any step cannot be saved
    """
    description = _require_text(description, "Goal description")
    end_read(db)
    generated = _generate_steps(generator, description)

    with atomic(db, "create goal"):
        db.query(Goal).filter(
            Goal.user_id == user_id,
            Goal.is_active == True  # noqa: E712
        ).update({Goal.is_active: False}, synchronize_session=False)

        goal = Goal(user_id=user_id, description=description, is_active=True)
        db.add(goal)
        db.flush()

        steps = _add_steps(db, goal, generated)

    db.refresh(goal)
    logger.info(f"Created goal {goal.id} with {len(steps)} roadmap steps for user {user_id}")
    return goal, _ordered_steps(db, goal.id)


def get_active_goal(db: Session, user_id: UUID) -> Tuple[Optional[Goal], List[RoadmapStep]]:
    """
    Get the user's active goal and its ordered steps.

    Returns:
        (goal, steps), or (None, []) when the user has no active goal
    """
    goal = get_active_goal_row(db, user_id)
    if not goal:
        return None, []
    return goal, _ordered_steps(db, goal.id)


def get_roadmap_steps(db: Session, user_id: UUID, goal_id: UUID) -> List[RoadmapStep]:
    """Ordered steps of one of the caller's goals."""
    goal = _get_owned_goal(db, user_id, goal_id)
    return _ordered_steps(db, goal.id)


def update_goal(
    db: Session,
    generator: ContentGenerator,
    user_id: UUID,
    goal_id: UUID,
    new_description: str
) -> Tuple[Goal, List[RoadmapStep]]:
    """
    Re-plan a goal: new description and a freshly generated roadmap.

    Prior step progress is discarded. The new steps are fully generated
    before the transaction starts, so a generator failure leaves the old
    description and steps untouched.

    Raises:
        ValidationError: If description is empty
        NotFoundError: If the goal is not the caller's
        GenerationEmpty: If the generator returns zero steps
        PersistenceFailure: If the replacement cannot be committed
    """
    new_description = _require_text(new_description, "Goal description")
    _get_owned_goal(db, user_id, goal_id)
    end_read(db)

    generated = _generate_steps(generator, new_description)

    with atomic(db, "update goal"):
        goal = _lock_goal(db, user_id, goal_id)
        goal.description = new_description
        db.query(RoadmapStep).filter(
            RoadmapStep.goal_id == goal.id
        ).delete(synchronize_session=False)
        steps = _add_steps(db, goal, generated)

    db.refresh(goal)
    logger.info(f"Re-planned goal {goal.id} with {len(steps)} roadmap steps")
    return goal, _ordered_steps(db, goal.id)


def add_roadmap_step(db: Session, user_id: UUID, goal_id: UUID, title: str) -> RoadmapStep:
    """
    Append a pending step at the end of a goal's roadmap.

    Raises:
        ValidationError: If title is empty
        NotFoundError: If the goal is not the caller's
    """
    title = _require_text(title, "Title")

    with atomic(db, "add roadmap step"):
        goal = _lock_goal(db, user_id, goal_id)
        last_order = db.query(func.max(RoadmapStep.step_order)).filter(
            RoadmapStep.goal_id == goal.id
        ).scalar() or 0

        step = RoadmapStep(
            goal_id=goal.id,
            step_order=last_order + 1,
            title=title,
            status=STEP_PENDING
        )
        db.add(step)

    db.refresh(step)
    return step


def _get_owned_step(db: Session, user_id: UUID, step_id: UUID) -> Optional[RoadmapStep]:
    return db.query(RoadmapStep).join(
        Goal, RoadmapStep.goal_id == Goal.id
    ).filter(
        RoadmapStep.id == step_id,
        Goal.user_id == user_id
    ).first()


def _get_active_goal_step(db: Session, user_id: UUID, step_id: UUID) -> Optional[RoadmapStep]:
    return db.query(RoadmapStep).join(
        Goal, RoadmapStep.goal_id == Goal.id
    ).filter(
        RoadmapStep.id == step_id,
        Goal.user_id == user_id,
        Goal.is_active == True  # noqa: E712
    ).first()


def update_roadmap_step(db: Session, user_id: UUID, step_id: UUID, new_title: str) -> RoadmapStep:
    """
    Rename a step of any goal owned by the caller.

    Raises:
        ValidationError: If title is empty
        NotFoundError: If the step does not belong to the caller
    """
    new_title = _require_text(new_title, "Title")
    step = _get_owned_step(db, user_id, step_id)
    if not step:
        raise NotFoundError("Roadmap step not found")

    with atomic(db, "update roadmap step"):
        step.title = new_title

    db.refresh(step)
    return step


def delete_roadmap_step(db: Session, user_id: UUID, step_id: UUID) -> None:
    """
    Delete a step of the caller's active goal and close the order gap.

    The goal row is locked and the step's order re-read under that lock,
    so the delete and the renumbering of every later step work on the
    orders as they are now. Both run in the same transaction, so orders
    stay 1..N-1.

    Raises:
        NotFoundError: If the step does not belong to the caller's active goal
    """
    step = _get_active_goal_step(db, user_id, step_id)
    if not step:
        raise NotFoundError("Roadmap step not found")

    goal_id = step.goal_id

    with atomic(db, "delete roadmap step"):
        goal = _lock_goal(db, user_id, goal_id)
        step = db.query(RoadmapStep).filter(
            RoadmapStep.id == step_id,
            RoadmapStep.goal_id == goal_id
        ).populate_existing().first()
        if not step or not goal.is_active:
            raise NotFoundError("Roadmap step not found")

        deleted_order = step.step_order
        db.delete(step)
        db.flush()
        db.query(RoadmapStep).filter(
            RoadmapStep.goal_id == goal_id,
            RoadmapStep.step_order > deleted_order
        ).update(
            {RoadmapStep.step_order: RoadmapStep.step_order - 1},
            synchronize_session=False
        )

    logger.info(f"Deleted roadmap step {step_id} (order {deleted_order}) from goal {goal_id}")


def reorder_roadmap_steps(db: Session, user_id: UUID, ordered_step_ids: Sequence[UUID]) -> List[RoadmapStep]:
    """
    Assign order = position + 1 to each id, all or nothing.

    The ids are validated, under the goal lock, against the caller's
    active goal before any write: they must be exactly a permutation of
    that goal's steps.

    Returns:
        The active goal's steps in their new order

    Raises:
        NotFoundError: If the caller has no active goal
        ForbiddenError: If any id is not a step of the caller's active goal
        ValidationError: If ids repeat or do not cover every step
    """
    goal = get_active_goal_row(db, user_id)
    if not goal:
        raise NotFoundError("No active goal")
    goal_id = goal.id

    with atomic(db, "reorder roadmap steps"):
        goal = _lock_goal(db, user_id, goal_id)
        if not goal.is_active:
            raise NotFoundError("No active goal")

        steps_by_id = {step.id: step for step in _ordered_steps(db, goal_id)}

        foreign = [step_id for step_id in ordered_step_ids if step_id not in steps_by_id]
        if foreign:
            logger.warning(f"User {user_id} tried to reorder steps outside their active goal: {foreign}")
            raise ForbiddenError("One or more steps do not belong to your active goal")

        if len(set(ordered_step_ids)) != len(ordered_step_ids):
            raise ValidationError("Step ids must not repeat")
        if len(ordered_step_ids) != len(steps_by_id):
            raise ValidationError("Reorder must list every step of the active goal")

        for position, step_id in enumerate(ordered_step_ids):
            steps_by_id[step_id].step_order = position + 1

    return _ordered_steps(db, goal_id)


def update_roadmap_step_status(db: Session, user_id: UUID, step_id: UUID, status: str) -> RoadmapStep:
    """
    Set a step of the caller's active goal to pending or done.

    Raises:
        ValidationError: If status is not pending/done
        NotFoundError: If the step does not belong to the caller's active goal
    """
    if status not in STEP_STATUSES:
        raise ValidationError(f"Invalid step status '{status}'")

    step = _get_active_goal_step(db, user_id, step_id)
    if not step:
        raise NotFoundError("Roadmap step not found")

    with atomic(db, "update roadmap step status"):
        step.status = status

    db.refresh(step)
    return step
