"""
Leave service - business logic for leave management

Casual and annual leave are debited when the request is submitted and
re-credited if it is rejected. Maternity, paternity and birthday leave
are debited in full when a manager approves, even past the remaining
balance. Other leave never touches a balance. Balance changes are atomic
updates committed in the same transaction as the leave row change.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from leave_api.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from leave_api.models.leave import (
    Leave,
    LeaveEntitlement,
    LeaveStatus,
    LeaveType,
    BalanceFields,
    BALANCE_FIELDS,
    SUBMISSION_DEDUCTED_TYPES,
    APPROVAL_DEDUCTED_TYPES,
)
from leave_api.models.user import User
from leave_api.schemas.leave import LeaveApplyRequest
from leave_api.services.entitlement_service import ensure_entitlement, get_entitlement

logger = logging.getLogger(__name__)

REQUIRED_APPLY_FIELDS = ("leave_type", "start_date", "end_date", "job_handover_person")

# Optional handover / context fields copied verbatim from the request
METADATA_FIELDS = (
    "casual_leave_type",
    "which_half",
    "short_leave_out_time",
    "short_leave_in_time",
    "other_leave_type",
    "has_attended_bots",
    "attended_bots_count",
    "bots_monitor",
    "email_autoforward",
    "has_client_calls",
    "call_leader",
    "passwords_on_lastpass",
    "passwords_shared",
    "projects",
    "comments",
)


@dataclass(frozen=True)
class LeaveSplit:
    eligible: bool
    paid_days: Decimal
    non_paid_days: Decimal


def inclusive_days(start_date: date, end_date: date) -> Decimal:
    return Decimal((end_date - start_date).days + 1)


def split_casual_days(total_days: Decimal, remaining: Decimal) -> LeaveSplit:
    """Paid days come out of the remaining balance; the rest is unpaid. No cap on unpaid days."""
    remaining = max(Decimal(0), Decimal(remaining))
    paid = min(Decimal(total_days), remaining)
    non_paid = max(Decimal(0), Decimal(total_days) - paid)
    return LeaveSplit(eligible=True, paid_days=paid, non_paid_days=non_paid)


def evaluate_leave_request(
    db: Session,
    user_id: int,
    leave_type: LeaveType,
    total_days: Decimal,
    year: int,
) -> LeaveSplit:
    """Decide the paid / non-paid split for a request. Only casual leave is split."""
    total_days = Decimal(total_days)
    if leave_type != LeaveType.CASUAL:
        return LeaveSplit(eligible=True, paid_days=total_days, non_paid_days=Decimal(0))

    entitlement = get_entitlement(db, user_id, year)
    remaining = Decimal(entitlement.casual_leave_remaining) if entitlement is not None else Decimal(0)
    return split_casual_days(total_days, remaining)


def _debit_balance(
    db: Session,
    entitlement_id: int,
    fields: BalanceFields,
    amount: Decimal,
    allow_overdraw: bool = False,
) -> bool:
    """
    Atomically move amount from remaining to taken. Returns False when the
    balance is short, unless allow_overdraw lets remaining go negative.
    """
    conditions = [LeaveEntitlement.id == entitlement_id]
    if not allow_overdraw:
        conditions.append(fields.remaining >= amount)
    result = db.execute(
        update(LeaveEntitlement)
        .where(*conditions)
        .values({
            fields.remaining: fields.remaining - amount,
            fields.taken: fields.taken + amount,
        })
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _credit_balance(db: Session, entitlement_id: int, fields: BalanceFields, amount: Decimal) -> None:
    db.execute(
        update(LeaveEntitlement)
        .where(LeaveEntitlement.id == entitlement_id)
        .values({
            fields.remaining: fields.remaining + amount,
            fields.taken: fields.taken - amount,
        })
        .execution_options(synchronize_session=False)
    )


def _missing_fields(data: LeaveApplyRequest) -> List[str]:
    missing = []
    for name in REQUIRED_APPLY_FIELDS:
        value = getattr(data, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def apply_for_leave(
    db: Session,
    user: User,
    data: LeaveApplyRequest,
    today: Optional[date] = None,
) -> Tuple[Leave, LeaveSplit]:
    """
    Submit a leave request (creates a PENDING leave)

    Args:
        db: Database session
        user: Employee applying for leave
        data: Request fields
        today: Reference date; the balance year is today's year

    Returns:
        (created Leave, computed split)

    Raises:
        ValidationError: missing fields, bad dates, or insufficient annual balance
        ConflictError: the casual balance changed underneath the request
    """
    missing = _missing_fields(data)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", payload={"missing": missing})

    if data.start_date > data.end_date:
        raise ValidationError("start_date must be less than or equal to end_date")

    total_days = data.total_days if data.total_days is not None else inclusive_days(data.start_date, data.end_date)
    total_days = Decimal(total_days)
    if total_days <= 0:
        raise ValidationError("total_days must be greater than zero")

    if today is None:
        today = date.today()
    year = today.year
    leave_type = LeaveType(data.leave_type)

    try:
        entitlement = ensure_entitlement(db, user, year, today)
        split = evaluate_leave_request(db, user.id, leave_type, total_days, year)

        if leave_type == LeaveType.ANNUAL and split.paid_days > Decimal(entitlement.annual_leave_remaining):
            raise ValidationError(
                f"Insufficient annual leave balance. Available: {entitlement.annual_leave_remaining}, "
                f"requested: {total_days}"
            )

        if leave_type in SUBMISSION_DEDUCTED_TYPES and split.paid_days > 0:
            if not _debit_balance(db, entitlement.id, BALANCE_FIELDS[leave_type], split.paid_days):
                raise ConflictError(
                    f"{leave_type.value.capitalize()} leave balance changed while applying; please retry"
                )

        leave = Leave(
            user_id=user.id,
            leave_type=leave_type,
            start_date=data.start_date,
            end_date=data.end_date,
            total_days=total_days,
            status=LeaveStatus.PENDING,
            is_non_paid=split.non_paid_days > 0,
            paid_days=split.paid_days,
            non_paid_days=split.non_paid_days,
            entitlement_year=year,
            manager_id=user.manager_id,
            job_handover_person=data.job_handover_person.strip(),
            **{name: getattr(data, name) for name in METADATA_FIELDS},
        )
        db.add(leave)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(leave)
    logger.info(
        "Leave submitted: leave_id=%s user_id=%s type=%s total=%s paid=%s non_paid=%s",
        leave.id, user.id, leave_type.value, total_days, split.paid_days, split.non_paid_days,
    )
    return leave, split


def _is_authorized_reviewer(employee: User, leave: Leave, reviewer: User) -> bool:
    return employee.manager_id == reviewer.id or leave.manager_id == reviewer.id


def review_leave(
    db: Session,
    leave_id: int,
    reviewer: User,
    decision: str,
    comments: Optional[str] = None,
) -> Leave:
    """
    Approve or reject a pending leave.

    Raises:
        NotFoundError: leave does not exist
        AuthorizationError: reviewer is not the employee's manager, or it is their own leave
        ConflictError: leave is no longer pending
    """
    if decision not in ("approve", "reject"):
        raise ValidationError("action must be 'approve' or 'reject'")

    leave = db.query(Leave).filter(Leave.id == leave_id).first()
    if not leave:
        raise NotFoundError(f"Leave with id {leave_id} not found")

    if leave.user_id == reviewer.id:
        raise AuthorizationError("You cannot review your own leave")

    employee = db.query(User).filter(User.id == leave.user_id).first()
    if employee is None or not _is_authorized_reviewer(employee, leave, reviewer):
        raise AuthorizationError("You can only review leaves of your direct reports")

    if leave.status != LeaveStatus.PENDING:
        raise ConflictError(f"Leave has already been {leave.status.value}")

    leave_type = LeaveType(leave.leave_type)
    new_status = LeaveStatus.APPROVED if decision == "approve" else LeaveStatus.REJECTED
    now = datetime.now(timezone.utc)
    values = {
        "status": new_status,
        "reviewed_by": reviewer.id,
        "reviewed_at": now,
    }
    if new_status == LeaveStatus.APPROVED:
        values["approved_by"] = reviewer.id
        values["approved_at"] = now
    else:
        values["rejection_reason"] = comments

    try:
        result = db.execute(
            update(Leave)
            .where(Leave.id == leave_id, Leave.status == LeaveStatus.PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Leave has already been reviewed")

        fields = BALANCE_FIELDS.get(leave_type)
        if new_status == LeaveStatus.APPROVED and leave_type in APPROVAL_DEDUCTED_TYPES:
            entitlement = ensure_entitlement(db, employee, leave.entitlement_year)
            _debit_balance(db, entitlement.id, fields, Decimal(leave.total_days), allow_overdraw=True)
        elif new_status == LeaveStatus.REJECTED and leave_type in SUBMISSION_DEDUCTED_TYPES:
            paid_days = Decimal(leave.paid_days or 0)
            if paid_days > 0:
                entitlement = get_entitlement(db, employee.id, leave.entitlement_year)
                if entitlement is not None:
                    _credit_balance(db, entitlement.id, fields, paid_days)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(leave)
    logger.info(
        "leave status transition: leave_id=%s before=pending after=%s reviewer_id=%s",
        leave_id, new_status.value, reviewer.id,
    )
    return leave


def get_leave_balance(db: Session, user_id: int, year: int) -> Tuple[LeaveEntitlement, List[Leave]]:
    """
    Entitlement row for the year plus the user's casual leave history.
    Read-only: a missing row is a NotFoundError.
    """
    entitlement = get_entitlement(db, user_id, year)
    if entitlement is None:
        raise NotFoundError(f"No leave entitlement found for {year}")

    history = (
        db.query(Leave)
        .filter(
            Leave.user_id == user_id,
            Leave.leave_type == LeaveType.CASUAL,
            Leave.entitlement_year == year,
        )
        .order_by(Leave.start_date.desc())
        .all()
    )
    return entitlement, history


def list_user_leaves(db: Session, user_id: int, status: Optional[LeaveStatus] = None) -> List[Leave]:
    query = db.query(Leave).filter(Leave.user_id == user_id)
    if status is not None:
        query = query.filter(Leave.status == status)
    return query.order_by(Leave.created_at.desc(), Leave.id.desc()).all()


def list_all_leaves(
    db: Session,
    status: Optional[LeaveStatus] = None,
    leave_type: Optional[LeaveType] = None,
    user_id: Optional[int] = None,
) -> List[Tuple[Leave, User]]:
    """All leaves with their employee, newest first (admin view)"""
    query = db.query(Leave, User).join(User, User.id == Leave.user_id)
    if status is not None:
        query = query.filter(Leave.status == status)
    if leave_type is not None:
        query = query.filter(Leave.leave_type == leave_type)
    if user_id is not None:
        query = query.filter(Leave.user_id == user_id)
    return query.order_by(Leave.created_at.desc(), Leave.id.desc()).all()


def list_team_leaves(
    db: Session,
    manager: User,
    status: Optional[LeaveStatus] = None,
) -> List[Tuple[Leave, User]]:
    """Leaves of direct reports, or leaves routed to this manager at submission."""
    query = (
        db.query(Leave, User)
        .join(User, User.id == Leave.user_id)
        .filter(
            or_(User.manager_id == manager.id, Leave.manager_id == manager.id),
            Leave.user_id != manager.id,
        )
    )
    if status is not None:
        query = query.filter(Leave.status == status)
    return query.order_by(Leave.created_at.desc(), Leave.id.desc()).all()
