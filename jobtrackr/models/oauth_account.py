"""
OAuth account links.

Binds a User to an identity at an external provider (Google). Created on the
first provider sign-in and looked up on every later one.
"""

import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from jobtrackr.core.database import Base


class OAuthAccount(Base):
    __tablename__ = "oauth_accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Provider identity
    provider = Column(String, nullable=False)
    provider_account_id = Column(String, nullable=False)

    # Tokens returned by the provider at sign-in
    access_token = Column(String, nullable=True)
    refresh_token = Column(String, nullable=True)
    expires_at = Column(Integer, nullable=True)  # Unix timestamp
    token_type = Column(String, nullable=True)
    scope = Column(String, nullable=True)
    id_token = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="oauth_accounts")

    __table_args__ = (
        # One link per provider identity
        UniqueConstraint("provider", "provider_account_id", name="uq_oauth_provider_account"),
    )

    def __repr__(self):
        return f"<OAuthAccount(user_id={self.user_id}, provider='{self.provider}')>"
