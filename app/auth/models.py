"""User and authentication models."""

from datetime import datetime
from typing import Any, Dict, Literal
from pydantic import BaseModel, EmailStr, Field

# Auth provider types
AuthProvider = Literal["email", "google"]


class UserCreate(BaseModel):
    """Schema for user registration."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=2, max_length=80)


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class GoogleAuthRequest(BaseModel):
    """Schema for Google OAuth login/signup."""
    id_token: str = Field(..., description="Google ID token from frontend")


class UserResponse(BaseModel):
    """Schema for user response (excludes password)."""
    id: str
    email: str
    name: str
    auth_provider: str = "email"  # "email" | "google"
    prefs: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class UserUpdate(BaseModel):
    """Schema for user profile update."""
    name: str = Field(..., min_length=2, max_length=80)


class PrefsUpdate(BaseModel):
    """Preference keys to merge into the stored preferences."""
    prefs: Dict[str, Any]


class TokenResponse(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    is_new_user: bool = False  # True if user just signed up
