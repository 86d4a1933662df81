"""
Pedium API - Main application entry point.

A place for writers to publish block-editor stories with AI summaries.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, OperationFailure

from app.core.config import get_settings
from app.core.database import Database
from app.core.exceptions import BackendUnavailableException, PermissionDeniedException
from app.core.middleware import MaxBodySizeMiddleware, RequestLogMiddleware
from app.core.mongo_errors import is_permission_error
from app.setup.guide import setup_guide
from app.auth.views import router as auth_router
from app.articles.views import router as articles_router
from app.users.views import router as users_router
from app.api.files import router as files_router
from app.setup.views import router as setup_router

settings = get_settings()
API_PREFIX = "/api/v1"

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup: an unreachable database must not stop the app serving /setup/status.
    try:
        await Database.connect()
    except ConnectionFailure as e:
        logger.error(f"Database unavailable at startup: {e}")
    yield
    # Shutdown
    await Database.disconnect()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Pedium API

A Medium-style blogging service.

### Features

- ✍️ **Publishing**: Block-editor stories with AI-generated summaries and tags
- 📰 **Feed**: Newest-first feed with categories and search
- ❤️ **Engagement**: Likes, views, comments and follows
- 👤 **Profiles**: Public author pages with follower counts
    """,
    lifespan=lifespan,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MaxBodySizeMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(ConnectionFailure)
async def database_unavailable_handler(request: Request, exc: ConnectionFailure):
    """Unreachable database: answer with the setup guide instead of a 500."""
    logger.error(f"Database unreachable during {request.method} {request.url.path}: {exc}")
    error = BackendUnavailableException(setup_guide=setup_guide())
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.detail, "setup_guide": error.setup_guide},
    )


@app.exception_handler(OperationFailure)
async def operation_failure_handler(request: Request, exc: OperationFailure):
    """Permission errors name the missing grant; everything else is a 500."""
    if is_permission_error(exc):
        error = PermissionDeniedException(action=request.method.lower(), collection=request.url.path)
        return JSONResponse(status_code=error.status_code, content={"detail": error.detail})
    logger.error(f"Database operation failed during {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": f"Database error: {exc}"})


# Include routers
routers = [
    auth_router,
    articles_router,
    users_router,
    files_router,
    setup_router,
]

for router in routers:
    app.include_router(router, prefix=API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if Database.client else "disconnected",
        "version": settings.APP_VERSION,
    }
