"""
Manager service - team views for managers (direct reports only)
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from leave_api.core.exceptions import NotFoundError
from leave_api.models.leave import Leave, LeaveStatus
from leave_api.models.user import User, EmployeeDetails
from leave_api.services.entitlement_service import get_entitlement

logger = logging.getLogger(__name__)

RECENT_LEAVES_LIMIT = 10


def _decimal(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal(0)


def get_leave_stats(db: Session, user_id: int) -> Dict:
    """Counts and day totals per status for one employee."""
    row = db.query(
        func.count(Leave.id),
        func.sum(Leave.total_days),
        func.sum(case((Leave.status == LeaveStatus.APPROVED, 1), else_=0)),
        func.sum(case((Leave.status == LeaveStatus.PENDING, 1), else_=0)),
        func.sum(case((Leave.status == LeaveStatus.REJECTED, 1), else_=0)),
        func.sum(case((Leave.status == LeaveStatus.APPROVED, Leave.total_days), else_=0)),
        func.sum(case((Leave.status == LeaveStatus.PENDING, Leave.total_days), else_=0)),
        func.sum(case((Leave.status == LeaveStatus.REJECTED, Leave.total_days), else_=0)),
    ).filter(Leave.user_id == user_id).one()

    return {
        "total_leaves": row[0] or 0,
        "total_days": _decimal(row[1]),
        "approved_leaves": row[2] or 0,
        "pending_leaves": row[3] or 0,
        "rejected_leaves": row[4] or 0,
        "approved_days": _decimal(row[5]),
        "pending_days": _decimal(row[6]),
        "rejected_days": _decimal(row[7]),
    }


def get_manager_team(db: Session, manager: User) -> List[Dict]:
    """Direct reports plus the manager, with leave totals, ordered by name."""
    members = (
        db.query(User, EmployeeDetails)
        .outerjoin(EmployeeDetails, EmployeeDetails.user_id == User.id)
        .filter(or_(User.manager_id == manager.id, User.id == manager.id))
        .order_by(User.name)
        .all()
    )

    team = []
    for user, details in members:
        stats = get_leave_stats(db, user.id)
        team.append({
            "id": user.id,
            "employee_id": user.employee_id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "employment_type": details.employment_type if details else None,
            "confirmation_date": details.confirmation_date if details else None,
            "total_leaves": stats["total_leaves"],
            "approved_days": stats["approved_days"],
        })
    return team


def get_team_leave_stats(db: Session, manager: User, today: Optional[date] = None) -> Dict:
    """Team size, pending approvals, and this month's approved / rejected counts."""
    if today is None:
        today = date.today()
    month_start = today.replace(day=1)
    if today.month == 12:
        next_month_start = date(today.year + 1, 1, 1)
    else:
        next_month_start = date(today.year, today.month + 1, 1)

    total_members = db.query(func.count(User.id)).filter(User.manager_id == manager.id).scalar() or 0

    team_leaves = (
        db.query(Leave)
        .join(User, User.id == Leave.user_id)
        .filter(User.manager_id == manager.id)
    )
    pending = team_leaves.filter(Leave.status == LeaveStatus.PENDING).count()
    this_month = team_leaves.filter(Leave.start_date >= month_start, Leave.start_date < next_month_start)
    approved_this_month = this_month.filter(Leave.status == LeaveStatus.APPROVED).count()
    rejected_this_month = this_month.filter(Leave.status == LeaveStatus.REJECTED).count()

    return {
        "total_team_members": total_members,
        "pending_approvals": pending,
        "approved_this_month": approved_this_month,
        "rejected_this_month": rejected_this_month,
    }


def get_team_member_details(
    db: Session,
    manager: User,
    employee_id: int,
    today: Optional[date] = None,
) -> Dict:
    """
    Profile, leave stats, current-year entitlement and recent leaves for a
    direct report (or the manager themself).
    """
    if today is None:
        today = date.today()

    employee = (
        db.query(User)
        .filter(
            User.id == employee_id,
            or_(User.manager_id == manager.id, User.id == manager.id),
        )
        .first()
    )
    if employee is None:
        raise NotFoundError("Employee not found or not in your team")

    return build_employee_profile(db, employee, today.year)


def build_employee_profile(db: Session, employee: User, year: int) -> Dict:
    details = db.query(EmployeeDetails).filter(EmployeeDetails.user_id == employee.id).first()
    recent_leaves = (
        db.query(Leave)
        .filter(Leave.user_id == employee.id)
        .order_by(Leave.created_at.desc(), Leave.id.desc())
        .limit(RECENT_LEAVES_LIMIT)
        .all()
    )
    return {
        "employee": employee,
        "details": details,
        "leave_stats": get_leave_stats(db, employee.id),
        "entitlement": get_entitlement(db, employee.id, year),
        "recent_leaves": recent_leaves,
    }
