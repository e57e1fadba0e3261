"""
Session endpoints.

- POST /auth/login: credentials sign-in, sets the session cookie
- POST /auth/logout: clears the session cookie
- GET /auth/session: current session
- GET /auth/providers: sign-in methods available
- GET /auth/signin/google: redirect to Google
- GET /auth/callback/google: Google redirects back here
"""

import logging
import secrets
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from jobtrackr.core.config import settings
from jobtrackr.core.database import get_db
from jobtrackr.core.deps import SessionData, get_session
from jobtrackr.schemas.user import (
    LoginRequest,
    ProviderInfo,
    ProvidersResponse,
    SessionResponse,
    UserPublic,
)
from jobtrackr.services import auth_service
from jobtrackr.services.google_oauth import OAuthError, google_oauth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = "jobtrackr_oauth_state"
OAUTH_STATE_MAX_AGE = 600


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def login_error_redirect(error: str) -> RedirectResponse:
    """Send the browser back to the login page with an error code."""
    return RedirectResponse(f"/login?{urlencode({'error': error})}", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/login", response_model=UserPublic)
def login(
    request: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Authenticate with email and password.

    Sets the session cookie and returns the public identity of the user.
    """
    try:
        user = auth_service.authenticate(db, request.email, request.password)
    except auth_service.InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_session_cookie(response, auth_service.issue_session_token(user))
    return UserPublic.model_validate(user)


@router.post("/logout")
def logout(response: Response):
    """Clear the session cookie."""
    clear_session_cookie(response)
    return {"message": "Signed out"}


@router.get("/session", response_model=SessionResponse)
def read_session(session: SessionData = Depends(get_session)):
    """
    Return the identity carried by the session token.

    Answered from the token alone, without a database lookup.
    """
    return SessionResponse(
        user=UserPublic(id=session.user_id, email=session.email, name=session.name, image=session.image),
        expires=session.expires,
    )


@router.get("/providers", response_model=ProvidersResponse)
def list_providers():
    """List the configured sign-in methods."""
    providers = [ProviderInfo(id="credentials", name="Credentials", type="credentials")]
    if google_oauth_service.enabled:
        providers.append(ProviderInfo(
            id="google",
            name="Google",
            type="oauth",
            signin_url=f"{settings.API_PREFIX}/auth/signin/google",
        ))
    return ProvidersResponse(providers=providers)


@router.get("/signin/google")
def google_signin():
    """
    Step 1: redirect the browser to Google's consent screen.

    The state parameter is kept in a short-lived HttpOnly cookie and
    checked on the callback.
    """
    if not google_oauth_service.enabled:
        logger.error("Google sign-in requested but GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET are not set")
        return login_error_redirect("Configuration")

    auth_url, state = google_oauth_service.get_authorization_url()

    response = RedirectResponse(auth_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return response


@router.get("/callback/google")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    state: Optional[str] = Query(None, description="State parameter for CSRF protection"),
    error: Optional[str] = Query(None, description="Error returned by Google"),
    db: Session = Depends(get_db)
):
    """
    Step 2: handle Google's redirect.

    Exchanges the code, resolves or provisions the user, sets the session
    cookie and sends the browser to the dashboard. Every failure lands on
    the login page with an error code.
    """
    if error:
        logger.warning(f"Google sign-in denied: {error}")
        return login_error_redirect("AccessDenied")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google callback with missing code or invalid state")
        return login_error_redirect("OAuthCallback")

    try:
        token_data = await google_oauth_service.exchange_code_for_token(code)
        profile = await google_oauth_service.fetch_user_profile(token_data)
    except (OAuthError, httpx.HTTPError) as e:
        logger.error(f"Google OAuth error: {e}")
        return login_error_redirect("OAuthCallback")

    try:
        user = auth_service.authenticate_with_provider(db, profile)
    except auth_service.AccountNotLinked:
        return login_error_redirect("OAuthAccountNotLinked")
    except Exception:
        db.rollback()
        logger.exception(f"Error provisioning user for {profile.email}")
        return login_error_redirect("OAuthCallback")

    response = RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, auth_service.issue_session_token(user))
    response.delete_cookie(key=OAUTH_STATE_COOKIE, path="/")
    return response
