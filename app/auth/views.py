"""Authentication API routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.core.dependencies import get_current_user
from app.auth.models import (
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
    PrefsUpdate,
    TokenResponse,
    GoogleAuthRequest
)
from app.auth.service import AuthService, get_auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse)
async def register(user_data: UserCreate, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new user account with email/password.

    Returns access token and user info on success.
    """
    return await auth.register(user_data)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, auth: AuthService = Depends(get_auth_service)):
    """
    Login with email and password.

    Returns access token and user info on success.
    """
    return await auth.login(credentials.email, credentials.password)


@router.post("/google", response_model=TokenResponse)
async def google_auth(request: GoogleAuthRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Authenticate with Google OAuth.

    Send the ID token received from Google Sign-In.
    - If user exists: logs them in
    - If new user: creates account with auth_provider="google"
    """
    response, _ = await auth.google_auth(request.id_token)
    return response


@router.get("/me", response_model=UserResponse)
async def get_profile(
    current_user: dict = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Get current user's profile."""
    return await auth.get_user_by_id(current_user["id"])


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    updates: UserUpdate,
    current_user: dict = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Update current user's display name."""
    return await auth.update_user(current_user["id"], updates.name)


@router.get("/me/prefs", response_model=Dict[str, Any])
async def get_prefs(
    current_user: dict = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Per-user preference key-value store."""
    return await auth.get_prefs(current_user["id"])


@router.patch("/me/prefs", response_model=Dict[str, Any])
async def update_prefs(
    request: PrefsUpdate,
    current_user: dict = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Merge preference keys (e.g. avatar)."""
    return await auth.update_prefs(current_user["id"], request.prefs)
