"""
Main API router
"""
from fastapi import APIRouter

from leave_api.api.v1 import (
    health,
    auth,
    users,
    leaves,
    manager,
    accrual,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
api_router.include_router(manager.router, prefix="/manager", tags=["manager"])
api_router.include_router(accrual.router, prefix="/accrual", tags=["accrual"])
