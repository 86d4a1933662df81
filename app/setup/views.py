"""Backend setup status."""

import logging

from fastapi import APIRouter
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.core.database import Database
from app.setup.guide import setup_guide

router = APIRouter(prefix="/setup", tags=["Setup"])
logger = logging.getLogger(__name__)


@router.get("/status")
async def setup_status():
    """Ping the database; include the setup guide when it cannot be reached."""
    settings = get_settings()
    try:
        if Database.client is None:
            raise ConnectionError("database client not initialised")
        await Database.ping()
    except (PyMongoError, ConnectionError) as e:
        logger.error(f"Setup check failed: {e}")
        return {
            "connected": False,
            "database": settings.MONGO_DB_NAME,
            "error": str(e),
            "setup_guide": setup_guide(),
        }
    return {"connected": True, "database": settings.MONGO_DB_NAME, "setup_guide": []}
