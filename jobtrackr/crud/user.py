"""
CRUD operations for User and OAuthAccount models.
"""

from typing import Optional
from sqlalchemy.orm import Session
from jobtrackr.models.user import User
from jobtrackr.models.oauth_account import OAuthAccount


def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def create(
    db: Session,
    email: str,
    hashed_password: Optional[str] = None,
    name: Optional[str] = None,
) -> User:
    """
    Create a credentials-path user.

    Args:
        db: Database session
        email: Unique email address
        hashed_password: bcrypt hash of the password
        name: Optional display name

    Returns:
        Created User instance with id
    """
    db_user = User(email=email, hashed_password=hashed_password, name=name)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    return db_user


def get_oauth_account(db: Session, provider: str, provider_account_id: str) -> Optional[OAuthAccount]:
    """Find the link for an identity at an OAuth provider."""
    return db.query(OAuthAccount).filter(
        OAuthAccount.provider == provider,
        OAuthAccount.provider_account_id == provider_account_id
    ).first()


def create_with_oauth_account(db: Session, user: User, account: OAuthAccount) -> User:
    """
    Persist a provider-path user together with its account link.

    Both rows are written in a single commit so a user never exists
    without the link that lets the provider find it again.
    """
    user.oauth_accounts.append(account)
    db.add(user)
    db.commit()
    db.refresh(user)

    return user


def update_oauth_tokens(db: Session, account: OAuthAccount, tokens: dict) -> OAuthAccount:
    """Store the tokens returned by the provider on a later sign-in."""
    account.access_token = tokens.get("access_token")
    if tokens.get("refresh_token"):
        account.refresh_token = tokens["refresh_token"]
    account.expires_at = tokens.get("expires_at")
    account.token_type = tokens.get("token_type")
    account.scope = tokens.get("scope")
    account.id_token = tokens.get("id_token")

    db.commit()
    db.refresh(account)

    return account
