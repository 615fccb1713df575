"""
Accrual service - monthly casual leave crediting for probation and intern employees.

Each employee is processed in its own transaction: one failure is rolled
back and reported without affecting the rest of the batch. The
last_accrual_date on EmployeeDetails is the per-month idempotency key.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from leave_api.models.leave import LeaveEntitlement, LeaveType, MonthlyAccrual
from leave_api.models.user import User, EmployeeDetails, EmploymentType, ACCRUING_EMPLOYMENT_TYPES
from leave_api.services.entitlement_service import (
    apply_entitlement,
    calculate_entitlement,
    get_entitlement,
    months_elapsed,
)

logger = logging.getLogger(__name__)


def _already_accrued_this_month(last_accrual_date: Optional[date], today: date) -> bool:
    return (
        last_accrual_date is not None
        and last_accrual_date.year == today.year
        and last_accrual_date.month == today.month
    )


def _accrue_for_employee(db: Session, details: EmployeeDetails, today: date) -> Optional[Dict]:
    """
    Credit casual leave for one employee. Returns the detail row, or None
    when there is nothing to credit. Caller commits.
    """
    months = months_elapsed(details.probation_start_date or today, today)
    if months == 0:
        return None

    entitlement = get_entitlement(db, details.user_id, today.year, for_update=True)
    if entitlement is None:
        # New year row: calculator amounts, casual starts from zero and is credited below
        amounts = calculate_entitlement(
            EmploymentType(details.employment_type),
            details.confirmation_date,
            details.probation_start_date,
            today,
        )
        amounts[LeaveType.CASUAL] = Decimal(0)
        entitlement = LeaveEntitlement(user_id=details.user_id, year=today.year)
        apply_entitlement(entitlement, amounts)
        db.add(entitlement)

    earned = Decimal(months)
    previous_remaining = Decimal(entitlement.casual_leave_remaining or 0)
    new_remaining = previous_remaining + earned
    entitlement.casual_leave_entitled = earned
    entitlement.casual_leave_remaining = new_remaining

    db.add(MonthlyAccrual(
        user_id=details.user_id,
        month=today.replace(day=1),
        casual_leave_earned=earned,
        casual_leave_balance=new_remaining,
    ))
    details.last_accrual_date = today
    db.flush()

    return {
        "casual_leave_earned": float(earned),
        "casual_leave_balance": float(new_remaining),
    }


def run_monthly_accrual(db: Session, today: Optional[date] = None) -> Dict:
    """
    Run the monthly accrual for every probation / internship employee.

    Returns a summary with processed, skipped and failed counts plus
    per-employee details.
    """
    if today is None:
        today = date.today()
    month_key = f"{today.year:04d}-{today.month:02d}"

    rows = (
        db.query(EmployeeDetails, User)
        .join(User, User.id == EmployeeDetails.user_id)
        .filter(EmployeeDetails.employment_type.in_([t.value for t in ACCRUING_EMPLOYMENT_TYPES]))
        .order_by(User.id)
        .all()
    )
    # Plain values so a rollback does not force a reload mid-batch
    targets = [(details.id, user.id, user.employee_id, user.name) for details, user in rows]

    processed = 0
    skipped = 0
    failed: List[Dict] = []
    details_out: List[Dict] = []

    logger.info("Monthly accrual %s started for %s employees", month_key, len(targets))

    for details_id, user_id, employee_code, name in targets:
        try:
            details = db.query(EmployeeDetails).filter(EmployeeDetails.id == details_id).first()
            if details is None or _already_accrued_this_month(details.last_accrual_date, today):
                skipped += 1
                continue

            result = _accrue_for_employee(db, details, today)
            if result is None:
                skipped += 1
                continue

            db.commit()
            processed += 1
            details_out.append({"user_id": user_id, "employee_id": employee_code, "name": name, **result})
        except Exception as exc:
            db.rollback()
            logger.exception("Monthly accrual failed for user_id=%s", user_id)
            failed.append({"user_id": user_id, "employee_id": employee_code, "error": str(exc)})

    logger.info(
        "Monthly accrual %s finished: processed=%s skipped=%s failed=%s",
        month_key, processed, skipped, len(failed),
    )
    return {
        "month": month_key,
        "processed_count": processed,
        "skipped_count": skipped,
        "failed_count": len(failed),
        "failed": failed,
        "details": details_out,
    }


def get_accrual_history(
    db: Session,
    user_id: Optional[int] = None,
    year: Optional[int] = None,
) -> List[MonthlyAccrual]:
    """Ledger rows, newest month first."""
    query = db.query(MonthlyAccrual)
    if user_id is not None:
        query = query.filter(MonthlyAccrual.user_id == user_id)
    if year is not None:
        query = query.filter(
            MonthlyAccrual.month >= date(year, 1, 1),
            MonthlyAccrual.month <= date(year, 12, 31),
        )
    return query.order_by(MonthlyAccrual.month.desc(), MonthlyAccrual.user_id).all()
