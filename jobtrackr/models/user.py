"""
User model for authentication and row ownership.

A user is created either by registration (credentials path, with a password
hash) or by the first OAuth sign-in (provider path, without one).
"""

import uuid
from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship
from jobtrackr.core.database import Base


class User(Base):
    """
    User account. Owns every Application row whose user_id points at it.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    email = Column(String, unique=True, nullable=False, index=True)
    # Null for accounts provisioned through an OAuth provider
    hashed_password = Column(String, nullable=True)

    # Profile
    name = Column(String, nullable=True)
    image = Column(String, nullable=True)
    email_verified = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    applications = relationship("Application", back_populates="user", cascade="all, delete-orphan")
    oauth_accounts = relationship("OAuthAccount", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
