"""Daily schedule API routes."""
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from momentum.clock import Clock, get_clock
from momentum.db import get_db
from momentum.dependencies import require_auth
from momentum.models.auth import User
from momentum.schemas.task import TaskResponse
from momentum.services.content_generator import ContentGenerator, get_content_generator
from momentum.services.schedule import get_or_create_schedule, start_day
from momentum.services.tasks import get_schedule_read_only


router = APIRouter(prefix="/api/schedule", tags=["schedule"])


@router.post("/start-day", response_model=list[TaskResponse])
def start_day_route(
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
    clock: Clock = Depends(get_clock)
):
    """
    Called when the user opens the app.

    Finalizes yesterday if it was never reviewed, then returns today's
    tasks, generating them the first time.
    """
    return start_day(db, generator, clock, user.id)


@router.get("/today", response_model=list[TaskResponse])
def get_today(
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Today's tasks, without generating anything."""
    return get_schedule_read_only(db, user.id, clock.today())


@router.post("/{target_date}", response_model=list[TaskResponse])
def get_or_create_schedule_route(
    target_date: date,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator)
):
    """Tasks for a date, generated once on first request."""
    return get_or_create_schedule(db, generator, user.id, target_date)
