"""
MongoDB database connection and utilities.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

    @classmethod
    async def connect(cls):
        """Connect to MongoDB."""
        cls.client = AsyncIOMotorClient(
            settings.MONGO_URI,
            serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
        )
        cls.db = cls.client[settings.MONGO_DB_NAME]

        # Raises ConnectionFailure (ServerSelectionTimeoutError) when unreachable
        await cls.ping()

        # Create indexes
        await cls._create_indexes()

        logger.info(f"Connected to MongoDB: {settings.MONGO_DB_NAME}")

    @classmethod
    async def disconnect(cls):
        """Disconnect from MongoDB."""
        if cls.client:
            cls.client.close()
            logger.info("Disconnected from MongoDB")

    @classmethod
    async def _create_indexes(cls):
        """
        Create database indexes for better query performance.

        Best-effort: the repositories fall back to unsorted / client-side
        filtered queries when an index is missing, so a failure here only
        costs performance.
        """
        try:
            await cls.db[settings.USERS_COLLECTION].create_index("email", unique=True)

            await cls.db[settings.ARTICLES_COLLECTION].create_index([("created_at", -1)])
            await cls.db[settings.ARTICLES_COLLECTION].create_index([("user_id", 1), ("created_at", -1)])

            await cls.db[settings.COMMENTS_COLLECTION].create_index([("article_id", 1), ("created_at", -1)])

            await cls.db[settings.FOLLOWS_COLLECTION].create_index([("follower_id", 1), ("following_id", 1)])
            await cls.db[settings.FOLLOWS_COLLECTION].create_index("following_id")
        except PyMongoError as e:
            logger.warning(f"Index creation failed, continuing without indexes: {e}")

    @classmethod
    async def ping(cls) -> bool:
        """Round-trip to the server; raises on connectivity failure."""
        await cls.client.admin.command("ping")
        return True

    @classmethod
    def get_collection(cls, name: str):
        """Get a collection by name."""
        return cls.db[name]


def get_db() -> AsyncIOMotorDatabase:
    """Get the database instance."""
    return Database.db
