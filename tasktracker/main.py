"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tasktracker.core.config import settings
from tasktracker.db.session import create_tables, get_async_session_context
from tasktracker.errors import AppError, app_error_handler
from tasktracker.logging_setup import setup_logging
from tasktracker.routers import auth, health, task, users
from tasktracker.services.auth_service import AuthService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: configure logging, create tables, seed the admin user
    - On shutdown: nothing to release beyond the engine's pool
    """
    setup_logging(settings.LOG_LEVEL)
    logger.info("Starting %s...", settings.APP_NAME)

    if settings.AUTO_CREATE_TABLES:
        await create_tables()

    async with get_async_session_context() as session:
        await AuthService(session).ensure_admin()

    yield  # The server runs while we're "yielded" here

    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Task tracking API with role-based task permissions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)


# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(task.router)
