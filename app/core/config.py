"""
Application configuration using Pydantic Settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Pedium API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "pedium_db"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # Collections
    ARTICLES_COLLECTION: str = "articles"
    COMMENTS_COLLECTION: str = "comments"
    FOLLOWS_COLLECTION: str = "follows"
    USERS_COLLECTION: str = "users"

    # JWT
    JWT_SECRET_KEY: str = "your-super-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Generative text (any OpenAI-compatible endpoint, Gemini by default)
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    AI_MODEL: str = "gemini-2.5-flash"

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""

    # AWS / S3 (cover + in-content images)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    AWS_S3_BUCKET: str = ""
    S3_PREVIEW_BASE_URL: str = ""

    MAX_REQUEST_BODY_BYTES: int = 2_000_000

    # Client package
    PEDIUM_API_URL: str = "http://localhost:8000/api/v1"
    VIEWED_STORE_PATH: str = "~/.pedium/viewed_articles.json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"



@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
