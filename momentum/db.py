"""Database engine, session factory and transaction helper."""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from momentum.errors import PersistenceFailure
from momentum.settings import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, action: str) -> Iterator[Session]:
    """
    Run a block of writes as one unit of work.

    Commits when the block exits cleanly. Any exception rolls back every
    write made inside the block; SQLAlchemy errors are re-raised as
    PersistenceFailure so callers see one storage error type.

    Args:
        db: Database session
        action: Short description used in logs and error messages
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Rolled back '{action}': {e}")
        raise PersistenceFailure(f"Failed to {action}") from e
    except Exception:
        db.rollback()
        raise


def end_read(db: Session) -> None:
    """
    Finish the session's implicit read transaction.

    Called before slow external work (content generation) so the
    connection is not left idle in a transaction. Loaded objects are
    expired and reload on next access.
    """
    db.commit()
