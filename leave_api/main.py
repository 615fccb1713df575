"""
Leave Management Backend - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from leave_api.api.router import api_router
from leave_api.core.config import settings
from leave_api.core.errors import (
    app_error_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from leave_api.core.exceptions import AppError
from leave_api.core.logging import setup_logging
from leave_api.db.session import SessionLocal
from leave_api.services import accrual_scheduler
from leave_api.services.user_service import bootstrap_initial_admin

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme.startswith("sqlite"):
            return url
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


# Create FastAPI app
app = FastAPI(
    title="Leave Management Backend",
    description="Leave requests, manager review, entitlements and monthly accrual",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s", masked)


@app.on_event("startup")
def startup_bootstrap_admin() -> None:
    """
    Create the initial admin user if no admin exists, so the system is
    always administrable.
    """
    db = SessionLocal()
    try:
        admin, created = bootstrap_initial_admin(
            db, settings.INITIAL_ADMIN_EMAIL, settings.INITIAL_ADMIN_PASSWORD
        )
        if created:
            logger.info("Initial admin user created: %s", admin.email)
            logger.info("Password: [set via INITIAL_ADMIN_PASSWORD environment variable]")
        else:
            logger.info("Admin user already exists, skipping initial bootstrap")
    except OperationalError as e:
        # Database not migrated yet
        db.rollback()
        if "no such table" in str(e).lower() or "does not exist" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during admin bootstrap: %s", e)
    except Exception as e:
        db.rollback()
        logger.error("Error during initial admin bootstrap: %s", e)
    finally:
        db.close()


@app.on_event("startup")
async def startup_accrual_scheduler() -> None:
    if settings.ACCRUAL_SCHEDULER_ENABLED:
        accrual_scheduler.start_scheduler()
    else:
        logger.info("Monthly accrual scheduler disabled")


@app.on_event("shutdown")
async def shutdown_accrual_scheduler() -> None:
    await accrual_scheduler.stop_scheduler()
