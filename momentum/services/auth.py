"""Session lookup for authenticated callers."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session

from momentum.models.auth import User, Session as SessionModel
from momentum.settings import settings


def create_session(db: Session, user_id: str, expires_in_seconds: Optional[int] = None) -> SessionModel:
    """
    Create a new session for a user.

    Args:
        db: Database session
        user_id: User ID
        expires_in_seconds: Lifetime, defaults to SESSION_MAX_AGE

    Returns:
        Created Session object
    """
    if expires_in_seconds is None:
        expires_in_seconds = settings.SESSION_MAX_AGE

    session_token = secrets.token_urlsafe(32)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in_seconds)

    session = SessionModel(
        user_id=user_id,
        session_token=session_token,
        expires_at=expires_at
    )

    db.add(session)
    db.commit()
    db.refresh(session)

    return session


def get_session(db: Session, session_token: str) -> Optional[SessionModel]:
    """
    Get a session by token.

    Returns:
        Session object if valid and not expired, None otherwise
    """
    session = db.query(SessionModel).filter(
        SessionModel.session_token == session_token
    ).first()

    if not session:
        return None

    expires_at = session.expires_at
    # SQLite hands back naive datetimes
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    if expires_at < datetime.now(timezone.utc):
        delete_session(db, session_token)
        return None

    return session


def delete_session(db: Session, session_token: str) -> None:
    """Delete a session by token. Unknown tokens are ignored."""
    db.query(SessionModel).filter(
        SessionModel.session_token == session_token
    ).delete(synchronize_session=False)
    db.commit()


def get_user_from_session(db: Session, session_token: str) -> Optional[User]:
    """
    Get user from session token.

    Returns:
        User object if session valid, None otherwise
    """
    session = get_session(db, session_token)
    if not session:
        return None

    user = db.query(User).filter(User.id == session.user_id).first()

    if not user or not user.is_active:
        return None

    return user
