"""
Entitlement service - yearly leave entitlement from employment type.

The calculator functions are pure; ensure_entitlement is the single
write step that materialises a user's LeaveEntitlement row for a year.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import Session

from leave_api.core.exceptions import NotFoundError, ValidationError
from leave_api.models.leave import LeaveEntitlement, LeaveType, BALANCE_FIELDS
from leave_api.models.user import User, EmployeeDetails, EmploymentType

logger = logging.getLogger(__name__)

# Annual leave for employees confirmed in Q1..Q4
ANNUAL_ENTITLEMENT_BY_QUARTER = (14, 10, 7, 4)
CONFIRMED_CASUAL_ENTITLEMENT = 7
DEFAULT_CASUAL_ENTITLEMENT = 1
BIRTHDAY_ENTITLEMENT = 1


def months_elapsed(start: date, today: date) -> int:
    """Whole calendar months between start and today (day of month ignored), never negative."""
    months = (today.year - start.year) * 12 - start.month + today.month
    return max(0, months)


def quarter_of(d: date) -> int:
    return (d.month + 2) // 3


def annual_entitlement_for_quarter(quarter: int) -> int:
    if 1 <= quarter <= 4:
        return ANNUAL_ENTITLEMENT_BY_QUARTER[quarter - 1]
    return 0


def calculate_entitlement(
    employment_type,
    confirmation_date: Optional[date],
    probation_start_date: Optional[date],
    today: Optional[date] = None,
) -> Dict[LeaveType, Decimal]:
    """
    Compute entitled days per balance category.

    - confirmed with a confirmation date: annual by confirmation quarter, casual 7
    - probation / internship: casual = months since probation start, annual 0
    - anything else: casual 1, annual 0
    - birthday 1; maternity and paternity 0
    """
    if today is None:
        today = date.today()

    annual = 0
    if employment_type == EmploymentType.CONFIRMED and confirmation_date is not None:
        annual = annual_entitlement_for_quarter(quarter_of(confirmation_date))
        casual = CONFIRMED_CASUAL_ENTITLEMENT
    elif employment_type in (EmploymentType.PROBATION, EmploymentType.INTERNSHIP):
        casual = months_elapsed(probation_start_date or today, today)
    else:
        casual = DEFAULT_CASUAL_ENTITLEMENT

    return {
        LeaveType.ANNUAL: Decimal(annual),
        LeaveType.CASUAL: Decimal(casual),
        LeaveType.MATERNITY: Decimal(0),
        LeaveType.PATERNITY: Decimal(0),
        LeaveType.BIRTHDAY: Decimal(BIRTHDAY_ENTITLEMENT),
    }


def apply_entitlement(entitlement: LeaveEntitlement, amounts: Dict[LeaveType, Decimal]) -> None:
    """Set entitled = remaining = amount and taken = 0 for every category."""
    for leave_type, fields in BALANCE_FIELDS.items():
        amount = amounts.get(leave_type, Decimal(0))
        setattr(entitlement, fields.entitled.key, amount)
        setattr(entitlement, fields.remaining.key, amount)
        setattr(entitlement, fields.taken.key, Decimal(0))


def zeroed_entitlement(user_id: int, year: int) -> LeaveEntitlement:
    entitlement = LeaveEntitlement(user_id=user_id, year=year)
    apply_entitlement(entitlement, {})
    return entitlement


def get_entitlement(db: Session, user_id: int, year: int, for_update: bool = False) -> Optional[LeaveEntitlement]:
    query = db.query(LeaveEntitlement).filter(
        LeaveEntitlement.user_id == user_id,
        LeaveEntitlement.year == year,
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def ensure_entitlement(
    db: Session,
    user: User,
    year: int,
    today: Optional[date] = None,
) -> LeaveEntitlement:
    """
    Return the user's entitlement row for year, creating it from the
    calculator when absent. Flushes but does not commit: callers own
    the transaction.
    """
    entitlement = get_entitlement(db, user.id, year)
    if entitlement is not None:
        return entitlement

    if today is None:
        today = date.today()

    details = db.query(EmployeeDetails).filter(EmployeeDetails.user_id == user.id).first()
    if details is not None:
        amounts = calculate_entitlement(
            EmploymentType(details.employment_type),
            details.confirmation_date,
            details.probation_start_date,
            today,
        )
    else:
        amounts = calculate_entitlement(None, None, None, today)

    entitlement = LeaveEntitlement(user_id=user.id, year=year)
    apply_entitlement(entitlement, amounts)
    db.add(entitlement)
    db.flush()

    logger.info(
        "Created %s entitlement for user_id=%s: annual=%s casual=%s",
        year, user.id, amounts[LeaveType.ANNUAL], amounts[LeaveType.CASUAL],
    )
    return entitlement


def initialize_year(db: Session, year: int, today: Optional[date] = None) -> Dict:
    """Open a year: create missing entitlement rows for every user."""
    created = 0
    existing = 0
    for user in db.query(User).order_by(User.id).all():
        if get_entitlement(db, user.id, year) is not None:
            existing += 1
            continue
        ensure_entitlement(db, user, year, today)
        created += 1
    db.commit()
    logger.info("Initialized %s entitlements: created=%s existing=%s", year, created, existing)
    return {"year": year, "created_count": created, "existing_count": existing}


def update_entitlement(
    db: Session,
    user_id: int,
    year: int,
    changes: Dict[LeaveType, Dict[str, Decimal]],
) -> LeaveEntitlement:
    """
    Admin edit of entitled / taken per category; remaining is
    recomputed as entitled - taken.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")

    entitlement = get_entitlement(db, user_id, year, for_update=True)
    if entitlement is None:
        entitlement = zeroed_entitlement(user_id, year)
        db.add(entitlement)

    for leave_type, values in changes.items():
        fields = BALANCE_FIELDS.get(leave_type)
        if fields is None:
            db.rollback()
            raise ValidationError(f"Leave type '{leave_type.value}' has no balance")
        entitled = values.get("entitled")
        if entitled is None:
            entitled = getattr(entitlement, fields.entitled.key)
        taken = values.get("taken")
        if taken is None:
            taken = getattr(entitlement, fields.taken.key)
        if entitled < 0 or taken < 0:
            db.rollback()
            raise ValidationError("Entitled and taken days must be non-negative")
        setattr(entitlement, fields.entitled.key, entitled)
        setattr(entitlement, fields.taken.key, taken)
        setattr(entitlement, fields.remaining.key, Decimal(entitled) - Decimal(taken))

    db.commit()
    db.refresh(entitlement)
    logger.info("Entitlement %s for user_id=%s updated by admin", year, user_id)
    return entitlement
