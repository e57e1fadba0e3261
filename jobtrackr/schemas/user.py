"""
Pydantic schemas for registration, sign-in and sessions.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List
from datetime import datetime


class RegisterRequest(BaseModel):
    """Request schema for registration (credentials path)."""
    name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    password: str = Field(
        ...,
        min_length=6,
        max_length=72,  # bcrypt limit
        description="Password must be 6-72 characters"
    )


class RegisterResponse(BaseModel):
    success: bool = True


class LoginRequest(BaseModel):
    """Request schema for credentials sign-in."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    """Public identity of a user (never includes the password hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None


class SessionResponse(BaseModel):
    user: UserPublic
    expires: datetime


class ProviderInfo(BaseModel):
    id: str
    name: str
    type: str
    signin_url: Optional[str] = None


class ProvidersResponse(BaseModel):
    providers: List[ProviderInfo]
