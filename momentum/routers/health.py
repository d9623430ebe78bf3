"""Health check endpoints."""
from fastapi import APIRouter, Depends, status, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from momentum.db import get_db
from momentum.startup import missing_tables

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Liveness: the process is up."""
    return {"status": "healthy"}


@router.get("/ready")
def ready(response: Response, db: Session = Depends(get_db)):
    """
    Readiness: database reachable and migrated.

    Returns 200 when ready to accept traffic, 503 otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
        missing = missing_tables(db.connection())
    except SQLAlchemyError as e:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "database": "disconnected",
            "error": str(e),
            "message": "Database connection failed"
        }

    if missing:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "database": "connected",
            "tables": "missing",
            "missing_tables": sorted(missing),
            "message": "Run migrations: alembic upgrade head"
        }

    return {
        "status": "ready",
        "database": "connected",
        "tables": "present"
    }
