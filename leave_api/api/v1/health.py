"""
Health check endpoint
"""
from fastapi import APIRouter
from leave_api.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint

    Returns service status, version and environment.
    """
    return {
        "status": "ok",
        "service": "leave-api",
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
    }
