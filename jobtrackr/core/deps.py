"""
FastAPI dependencies for authentication.

The session token is read from the session cookie, or from an
"Authorization: Bearer" header for API clients. Decoding it needs no
database access; resolving the full user row is a separate dependency.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyCookie, HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from jobtrackr.core.config import settings
from jobtrackr.core.database import get_db
from jobtrackr.core.security import decode_session_token
from jobtrackr.crud import user as user_crud
from jobtrackr.models.user import User

session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)
bearer = HTTPBearer(auto_error=False)


@dataclass
class SessionData:
    """Claims carried by a valid session token."""
    user_id: str
    email: str
    name: Optional[str]
    image: Optional[str]
    expires: datetime


def read_session_token(token: Optional[str]) -> Optional[SessionData]:
    """Decode a session token, returning None when it is absent or invalid."""
    if not token:
        return None

    try:
        payload = decode_session_token(token)
    except JWTError:
        return None

    user_id = payload.get("sub")
    email = payload.get("email")
    expires_at = payload.get("exp")
    if not user_id or not email or expires_at is None:
        return None

    return SessionData(
        user_id=user_id,
        email=email,
        name=payload.get("name"),
        image=payload.get("image"),
        expires=datetime.fromtimestamp(expires_at, tz=timezone.utc),
    )


def get_session(
    cookie_token: Optional[str] = Depends(session_cookie),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> SessionData:
    """
    Require a valid session.

    Raises:
        HTTPException 401: If no valid session token was sent
    """
    token = credentials.credentials if credentials else cookie_token
    session = read_session_token(token)

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


def get_current_user(
    session: SessionData = Depends(get_session),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the user row behind the session, by email.

    A valid session whose user row has since been deleted is an error,
    not an anonymous request.

    Raises:
        HTTPException 401: If no valid session token was sent
        HTTPException 404: If the user row no longer exists
    """
    user = user_crud.get_by_email(db, session.email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return user


class NotAuthenticatedException(Exception):
    """Raised when an HTML page requires login but no user is signed in."""


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """Return the signed-in user for HTML pages, or None."""
    session = read_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
    if session is None:
        return None
    return user_crud.get_by_email(db, session.email)


def require_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Return the signed-in user or send the browser to the login page."""
    if user is None:
        raise NotAuthenticatedException()
    return user
