"""
Accrual management endpoints (ADMIN-only)
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from leave_api.core.deps import get_db, require_roles, AuthIdentity
from leave_api.models.user import Role
from leave_api.schemas.accrual import AccrualRunResponse, MonthlyAccrualOut
from leave_api.services.accrual_service import run_monthly_accrual, get_accrual_history

router = APIRouter()


@router.post("/run", response_model=AccrualRunResponse)
async def run_accrual_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    """
    Run the monthly casual leave accrual now.

    Idempotent within a month: employees already credited this month are skipped.
    """
    return run_monthly_accrual(db)


@router.get("/history", response_model=List[MonthlyAccrualOut])
async def accrual_history_endpoint(
    user_id: Optional[int] = Query(None, description="Filter by employee"),
    year: Optional[int] = Query(None, description="Filter by year"),
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    return get_accrual_history(db, user_id=user_id, year=year)
