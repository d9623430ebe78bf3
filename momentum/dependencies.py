"""FastAPI dependencies for authentication."""
from typing import Optional
from fastapi import Cookie, Depends, HTTPException, status
from sqlalchemy.orm import Session

from momentum.db import get_db
from momentum.models.auth import User
from momentum.services.auth import get_user_from_session
from momentum.settings import settings


async def require_auth(
    session_token: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
    db: Session = Depends(get_db)
) -> User:
    """
    Require authentication (for API endpoints).

    Returns:
        User object if authenticated

    Raises:
        HTTPException 401 if not authenticated
    """
    if not session_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )

    user = get_user_from_session(db, session_token)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session"
        )

    return user
