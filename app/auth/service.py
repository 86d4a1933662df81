"""Authentication service - JWT handling, password hashing, user operations."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import jwt
from bson import ObjectId
from fastapi import Depends
from google.auth.transport import requests
from google.oauth2 import id_token
from passlib.context import CryptContext
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import BadRequestException, UnauthorizedException, NotFoundException
from app.auth.models import UserCreate, UserResponse, TokenResponse

settings = get_settings()
logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def generated_avatar_url(name: str) -> str:
    """DiceBear avatar seeded by display name."""
    return (
        f"https://api.dicebear.com/9.x/adventurer/svg?seed={quote(name or '')}"
        "&backgroundColor=b6e3f4,c0aede,d1d4f9"
    )


class AuthService:
    """Handles authentication and user operations."""

    def __init__(self, db):
        self.db = db

    # ==================== Password & Token ====================

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt."""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def create_access_token(user_id: str, email: str, name: str = "") -> str:
        """Create a JWT access token."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "name": name,
            "exp": now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
            "iat": now,
        }
        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Optional[dict]:
        """Decode and validate a JWT token."""
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    # ==================== Google OAuth ====================

    @staticmethod
    async def verify_google_token(token: str) -> dict:
        """
        Verify Google ID token and extract user info.
        Returns: { email, name, google_id }
        """
        try:
            idinfo = id_token.verify_oauth2_token(
                token,
                requests.Request(),
                settings.GOOGLE_CLIENT_ID
            )
        except ValueError as e:
            raise UnauthorizedException(f"Invalid Google token: {str(e)}")

        if idinfo['iss'] not in ['accounts.google.com', 'https://accounts.google.com']:
            raise UnauthorizedException("Invalid token issuer")

        return {
            "email": idinfo.get("email"),
            "name": idinfo.get("name", idinfo.get("email", "").split("@")[0]),
            "google_id": idinfo.get("sub"),
        }

    # ==================== User Operations ====================

    def _get_collection(self):
        return self.db[settings.USERS_COLLECTION]

    @staticmethod
    def _to_response(user: dict) -> UserResponse:
        return UserResponse(
            id=str(user["_id"]),
            email=user["email"],
            name=user["name"],
            auth_provider=user.get("auth_provider", "email"),
            prefs=user.get("prefs") or {},
            created_at=user["created_at"],
        )

    async def _ensure_avatar(self, user: dict) -> dict:
        """Give users without an avatar preference a generated one."""
        prefs = dict(user.get("prefs") or {})
        if prefs.get("avatar"):
            return user
        prefs["avatar"] = generated_avatar_url(user.get("name", ""))
        try:
            await self._get_collection().update_one({"_id": user["_id"]}, {"$set": {"prefs.avatar": prefs["avatar"]}})
        except PyMongoError as e:
            logger.warning(f"Failed to auto-set avatar preference for {user['_id']}: {e}")
            return user
        user["prefs"] = prefs
        return user

    def _token_response(self, user: dict, is_new_user: bool = False) -> TokenResponse:
        token = self.create_access_token(str(user["_id"]), user["email"], user.get("name", ""))
        return TokenResponse(access_token=token, user=self._to_response(user), is_new_user=is_new_user)

    async def register(self, user_data: UserCreate) -> TokenResponse:
        """Register a new user and log them in."""
        users = self._get_collection()

        existing = await users.find_one({"email": user_data.email})
        if existing:
            raise BadRequestException("Email already registered")

        user_doc = {
            "email": user_data.email,
            "password_hash": self.hash_password(user_data.password),
            "name": user_data.name,
            "auth_provider": "email",
            "prefs": {"avatar": generated_avatar_url(user_data.name)},
            "created_at": datetime.now(timezone.utc),
        }
        result = await users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id

        return self._token_response(user_doc, is_new_user=True)

    async def login(self, email: str, password: str) -> TokenResponse:
        """Authenticate user and return token."""
        user = await self._get_collection().find_one({"email": email})
        if not user:
            raise UnauthorizedException("Invalid email or password")

        # Check if user signed up via OAuth (no password)
        if not user.get("password_hash"):
            auth_provider = user.get("auth_provider", "unknown")
            raise UnauthorizedException(
                f"This account uses {auth_provider.title()} sign-in. Please use that method."
            )

        if not self.verify_password(password, user["password_hash"]):
            raise UnauthorizedException("Invalid email or password")

        user = await self._ensure_avatar(user)
        return self._token_response(user)

    async def google_auth(self, id_token_str: str) -> Tuple[TokenResponse, bool]:
        """
        Authenticate via Google OAuth.
        Returns (TokenResponse, is_new_user)
        """
        google_user = await self.verify_google_token(id_token_str)
        users = self._get_collection()

        existing_user = await users.find_one({"email": google_user["email"]})
        if existing_user:
            existing_user = await self._ensure_avatar(existing_user)
            return self._token_response(existing_user), False

        user_doc = {
            "email": google_user["email"],
            "password_hash": None,  # No password for OAuth users
            "name": google_user["name"],
            "auth_provider": "google",
            "google_id": google_user["google_id"],
            "prefs": {"avatar": generated_avatar_url(google_user["name"])},
            "created_at": datetime.now(timezone.utc),
        }
        result = await users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id

        return self._token_response(user_doc, is_new_user=True), True

    async def _find_user(self, user_id: str) -> dict:
        if not ObjectId.is_valid(user_id):
            raise NotFoundException("User not found")
        user = await self._get_collection().find_one({"_id": ObjectId(user_id)})
        if not user:
            raise NotFoundException("User not found")
        return user

    async def get_user_by_id(self, user_id: str) -> UserResponse:
        """Current session user; backfills a missing avatar."""
        user = await self._ensure_avatar(await self._find_user(user_id))
        return self._to_response(user)

    async def get_public_user(self, user_id: str) -> dict:
        """Display fields only."""
        user = await self._find_user(user_id)
        return {
            "id": str(user["_id"]),
            "name": user["name"],
            "avatar": (user.get("prefs") or {}).get("avatar"),
            "created_at": user["created_at"],
        }

    async def update_user(self, user_id: str, name: str) -> UserResponse:
        """Update display name."""
        await self._get_collection().update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {"name": name}}
        )
        return await self.get_user_by_id(user_id)

    async def get_prefs(self, user_id: str) -> Dict[str, Any]:
        user = await self._find_user(user_id)
        return user.get("prefs") or {}

    async def update_prefs(self, user_id: str, prefs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge keys into the stored preferences."""
        await self._find_user(user_id)
        updates = {f"prefs.{key}": value for key, value in prefs.items() if key and "." not in key and not key.startswith("$")}
        if not updates:
            raise BadRequestException("No valid preference keys")
        await self._get_collection().update_one({"_id": ObjectId(user_id)}, {"$set": updates})
        return await self.get_prefs(user_id)


def get_auth_service(db=Depends(get_db)) -> AuthService:
    return AuthService(db)
