"""
Manager endpoints (manager or admin acting role)

Managers only see and review their direct reports.
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from leave_api.core.deps import get_db, require_roles, AuthIdentity
from leave_api.models.leave import LeaveStatus
from leave_api.models.user import Role
from leave_api.schemas.leave import LeaveOut, LeaveReviewRequest, LeaveWithEmployeeOut
from leave_api.schemas.user import EmployeeProfileOut, TeamMemberOut, TeamStatsOut
from leave_api.services import manager_service
from leave_api.services.leave_service import list_team_leaves, review_leave

router = APIRouter()

manager_or_admin = require_roles(Role.MANAGER, Role.ADMIN)


@router.get("/team", response_model=List[TeamMemberOut])
async def team_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(manager_or_admin),
):
    return manager_service.get_manager_team(db, identity.user)


@router.get("/team/stats", response_model=TeamStatsOut)
async def team_stats_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(manager_or_admin),
):
    return manager_service.get_team_leave_stats(db, identity.user)


@router.get("/team/employee/{employee_id}", response_model=EmployeeProfileOut)
async def team_member_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(manager_or_admin),
):
    return manager_service.get_team_member_details(db, identity.user, employee_id)


@router.get("/leaves", response_model=List[LeaveWithEmployeeOut])
async def team_leaves_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(manager_or_admin),
):
    rows = list_team_leaves(db, identity.user)
    return [LeaveWithEmployeeOut.from_row(leave, user) for leave, user in rows]


@router.get("/leaves/pending", response_model=List[LeaveWithEmployeeOut])
async def pending_leaves_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(manager_or_admin),
):
    """Pending approvals for the current manager"""
    rows = list_team_leaves(db, identity.user, status=LeaveStatus.PENDING)
    return [LeaveWithEmployeeOut.from_row(leave, user) for leave, user in rows]


@router.post("/leaves/{leave_id}/review", response_model=LeaveOut)
async def review_leave_endpoint(
    leave_id: int,
    review: LeaveReviewRequest,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(manager_or_admin),
):
    """
    Approve or reject a pending leave of a direct report.

    404 if the leave does not exist, 403 if it is not your report's,
    409 if it has already been reviewed.
    """
    return review_leave(db, leave_id, identity.user, review.action, review.comments)
