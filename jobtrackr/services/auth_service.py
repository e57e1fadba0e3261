"""
Authentication service.

Two ways in:
- credentials path: email + password checked against the stored bcrypt hash
- provider path: an identity asserted by an OAuth provider (Google), bound
  to a local user through an OAuthAccount row

Both end in the same signed session token.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtrackr.core.security import create_session_token, get_password_hash, verify_password
from jobtrackr.crud import user as user_crud
from jobtrackr.models.oauth_account import OAuthAccount
from jobtrackr.models.user import User

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication failures."""


class InvalidCredentials(AuthError):
    """Unknown email, account without password, or wrong password."""


class EmailAlreadyRegistered(AuthError):
    pass


class AccountNotLinked(AuthError):
    """The provider's email belongs to an existing account that was never linked to it."""


def normalize_email(email: str) -> str:
    """Canonical form used to store and look up emails."""
    return email.strip().lower()


@dataclass
class ProviderProfile:
    """Identity asserted by an OAuth provider after a successful code exchange."""
    provider: str
    provider_account_id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    email_verified: bool = False
    tokens: dict = field(default_factory=dict)


def register(db: Session, email: str, password: str, name: Optional[str] = None) -> User:
    """
    Create a credentials-path user.

    Raises:
        EmailAlreadyRegistered: If the email is taken
    """
    email = normalize_email(email)
    if user_crud.get_by_email(db, email):
        raise EmailAlreadyRegistered(email)

    try:
        user = user_crud.create(db, email=email, hashed_password=get_password_hash(password), name=name)
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise EmailAlreadyRegistered(email)

    logger.info(f"New user registered: {user.email}")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        InvalidCredentials: For every failure reason, so callers cannot
            tell an unknown email from a wrong password
    """
    email = normalize_email(email)
    user = user_crud.get_by_email(db, email)

    if not user or not user.hashed_password:
        logger.warning(f"Sign-in failed, user not found or missing password: {email}")
        raise InvalidCredentials(email)

    if not verify_password(password, user.hashed_password):
        logger.warning(f"Sign-in failed, invalid password: {email}")
        raise InvalidCredentials(email)

    logger.info(f"User signed in with credentials: {user.email}")
    return user


def authenticate_with_provider(db: Session, profile: ProviderProfile) -> User:
    """
    Resolve or provision the user behind a provider identity.

    Subsequent sign-ins find the existing OAuthAccount link. On the first
    sign-in a User and its link are created together, unless the email
    already belongs to an unlinked account.

    Raises:
        AccountNotLinked: If the email is taken by an unlinked account
    """
    account = user_crud.get_oauth_account(db, profile.provider, profile.provider_account_id)
    if account:
        if profile.tokens:
            user_crud.update_oauth_tokens(db, account, profile.tokens)
        logger.info(f"User signed in with {profile.provider}: {account.user.email}")
        return account.user

    profile.email = normalize_email(profile.email)
    if user_crud.get_by_email(db, profile.email):
        logger.warning(f"{profile.provider} sign-in refused, email already used by an unlinked account: {profile.email}")
        raise AccountNotLinked(profile.email)

    tokens = profile.tokens
    user = User(
        email=profile.email,
        name=profile.name,
        image=profile.image,
        email_verified=datetime.now(timezone.utc) if profile.email_verified else None,
    )
    account = OAuthAccount(
        provider=profile.provider,
        provider_account_id=profile.provider_account_id,
        access_token=tokens.get("access_token"),
        refresh_token=tokens.get("refresh_token"),
        expires_at=tokens.get("expires_at"),
        token_type=tokens.get("token_type"),
        scope=tokens.get("scope"),
        id_token=tokens.get("id_token"),
    )
    user = user_crud.create_with_oauth_account(db, user, account)

    logger.info(f"New user provisioned from {profile.provider}: {user.email}")
    return user


def issue_session_token(user: User) -> str:
    """Mint the session token for an authenticated user."""
    return create_session_token({
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "image": user.image,
    })
