"""
Leave endpoints
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from leave_api.core.deps import get_db, get_current_identity, require_roles, AuthIdentity
from leave_api.models.leave import LeaveStatus, LeaveType
from leave_api.models.user import Role
from leave_api.schemas.leave import (
    LeaveApplyRequest,
    LeaveApplyResponse,
    LeaveBalanceResponse,
    LeaveOut,
    LeaveWithEmployeeOut,
)
from leave_api.services.leave_service import (
    apply_for_leave,
    get_leave_balance,
    list_user_leaves,
    list_all_leaves,
)

router = APIRouter()


@router.post("/apply", response_model=LeaveApplyResponse, status_code=201)
async def apply_leave_endpoint(
    leave_data: LeaveApplyRequest,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
):
    """
    Submit a leave request (status pending).

    Casual leave beyond the remaining balance is split into paid and
    non-paid days; casual and annual paid days are debited immediately.
    """
    leave, split = apply_for_leave(db, identity.user, leave_data)
    if split.non_paid_days > 0:
        message = (
            f"Leave applied: {split.paid_days} paid and {split.non_paid_days} non-paid day(s)"
        )
    else:
        message = "Leave applied successfully"
    return LeaveApplyResponse(
        leave=LeaveOut.model_validate(leave),
        paid_days=split.paid_days,
        non_paid_days=split.non_paid_days,
        message=message,
    )


@router.get("/balance", response_model=LeaveBalanceResponse)
async def balance_endpoint(
    year: Optional[int] = Query(None, description="Calendar year; defaults to the current year"),
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
):
    """Current user's entitlement for the year plus casual leave history."""
    entitlement, history = get_leave_balance(db, identity.user.id, year or date.today().year)
    return {"entitlement": entitlement, "casual_leaves_history": history}


@router.get("/my", response_model=List[LeaveOut])
async def my_leaves_endpoint(
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
):
    return list_user_leaves(db, identity.user.id, status)


@router.get("/all", response_model=List[LeaveWithEmployeeOut])
async def all_leaves_endpoint(
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    leave_type: Optional[LeaveType] = Query(None, description="Filter by leave type"),
    user_id: Optional[int] = Query(None, description="Filter by employee"),
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN)),
):
    """All leaves across the organisation (ADMIN-only)"""
    rows = list_all_leaves(db, status=status, leave_type=leave_type, user_id=user_id)
    return [LeaveWithEmployeeOut.from_row(leave, user) for leave, user in rows]
