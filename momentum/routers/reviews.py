"""Daily review API routes."""
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from momentum.clock import Clock, get_clock
from momentum.db import get_db
from momentum.dependencies import require_auth
from momentum.models.auth import User
from momentum.schemas.review import DailyReviewResponse, FinalizeDayResponse
from momentum.services.content_generator import ContentGenerator, get_content_generator
from momentum.services.reviews import finalize_day, get_review_by_date


router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post("/{review_date}/finalize", response_model=FinalizeDayResponse)
def finalize_day_route(
    review_date: date,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
    clock: Clock = Depends(get_clock)
):
    """Close a day: mark expired tasks missed, summarize and store feedback."""
    summary, feedback = finalize_day(db, generator, clock, user.id, review_date)
    return FinalizeDayResponse(review_date=review_date, summary=summary, ai_feedback=feedback)


@router.get("/{review_date}", response_model=DailyReviewResponse)
def get_review(
    review_date: date,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Stored review of a finalized day."""
    return get_review_by_date(db, user.id, review_date)
