"""
User service - business logic for user administration
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from leave_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from leave_api.core.security import hash_password
from leave_api.models.leave import Leave, LeaveEntitlement, MonthlyAccrual
from leave_api.models.user import (
    User,
    Role,
    EmployeeDetails,
    EmploymentType,
    ACCRUING_EMPLOYMENT_TYPES,
)
from leave_api.schemas.user import UserCreate, UserUpdate
from leave_api.services.entitlement_service import ensure_entitlement
from leave_api.services.manager_service import build_employee_profile

logger = logging.getLogger(__name__)

INITIAL_ADMIN_EMPLOYEE_ID = "ADM-001"


def _check_reporting_hierarchy_cycle(db: Session, user_id: int, manager_id: int) -> bool:
    """
    Check if setting manager_id would create a cycle

    Returns:
        True if cycle would be created, False otherwise
    """
    if user_id == manager_id:
        return True

    # Walk up the chain from the proposed manager
    visited = set()
    current_id = manager_id

    while current_id is not None:
        if current_id == user_id:
            return True

        if current_id in visited:
            break

        visited.add(current_id)
        manager = db.query(User).filter(User.id == current_id).first()
        if not manager or not manager.manager_id:
            break

        current_id = manager.manager_id

    return False


def _validate_manager(db: Session, manager_id: Optional[int]) -> None:
    if manager_id is None:
        return
    if db.query(User).filter(User.id == manager_id).first() is None:
        raise ValidationError(f"Manager with id {manager_id} not found")


def create_user(db: Session, data: UserCreate, today: Optional[date] = None) -> User:
    """
    Create a user with employment details and the current year's entitlement
    in one transaction.

    Probation and intern users are treated as accrued for the creation month:
    their starting casual balance already counts the months since probation
    start.

    Raises:
        ConflictError: employee id or email already in use
        ValidationError: manager does not exist
    """
    if today is None:
        today = date.today()

    if db.query(User).filter(User.employee_id == data.employee_id).first():
        raise ConflictError("Employee ID already exists")
    if db.query(User).filter(User.email == data.email).first():
        raise ConflictError("Email already exists")
    _validate_manager(db, data.manager_id)

    accruing = data.employment_type in ACCRUING_EMPLOYMENT_TYPES
    probation_start = data.probation_start_date
    if accruing and probation_start is None:
        probation_start = today

    try:
        user = User(
            employee_id=data.employee_id.strip(),
            name=data.name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role.value,
            manager_id=data.manager_id,
        )
        db.add(user)
        db.flush()

        db.add(EmployeeDetails(
            user_id=user.id,
            employment_type=data.employment_type.value,
            confirmation_date=data.confirmation_date,
            probation_start_date=probation_start,
            probation_end_date=data.probation_end_date,
            last_accrual_date=today if accruing else None,
        ))
        db.flush()

        ensure_entitlement(db, user, today.year, today)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Employee ID or email already exists")
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("User created: user_id=%s employee_id=%s role=%s", user.id, user.employee_id, user.role)
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")
    return user


def list_users(db: Session) -> List[Dict]:
    """All users with employment type and manager name, ordered by name."""
    manager = aliased(User)
    rows = (
        db.query(User, EmployeeDetails, manager.name)
        .outerjoin(EmployeeDetails, EmployeeDetails.user_id == User.id)
        .outerjoin(manager, manager.id == User.manager_id)
        .order_by(User.name)
        .all()
    )
    result = []
    for user, details, manager_name in rows:
        result.append({
            "id": user.id,
            "employee_id": user.employee_id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "manager_id": user.manager_id,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
            "employment_type": details.employment_type if details else None,
            "confirmation_date": details.confirmation_date if details else None,
            "manager_name": manager_name,
        })
    return result


def list_managers(db: Session) -> List[User]:
    return db.query(User).filter(User.role == Role.MANAGER.value).order_by(User.name).all()


def get_user_details(db: Session, user_id: int, today: Optional[date] = None) -> Dict:
    if today is None:
        today = date.today()
    user = get_user(db, user_id)
    profile = build_employee_profile(db, user, today.year)
    profile["manager_name"] = user.manager.name if user.manager else None
    return profile


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    """
    Update profile and employment fields. Omitted fields are left unchanged.

    Raises:
        NotFoundError: user does not exist
        ConflictError: email already used by another user
        ValidationError: manager does not exist or would create a reporting cycle
    """
    user = get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("email") and changes["email"] != user.email:
        taken = db.query(User).filter(User.email == changes["email"], User.id != user_id).first()
        if taken:
            raise ConflictError("Email already exists")

    if "manager_id" in changes and changes["manager_id"] is not None:
        _validate_manager(db, changes["manager_id"])
        if _check_reporting_hierarchy_cycle(db, user_id, changes["manager_id"]):
            raise ValidationError("Manager assignment would create a reporting cycle")

    try:
        for field in ("name", "email"):
            if changes.get(field) is not None:
                setattr(user, field, changes[field])
        if "manager_id" in changes:
            user.manager_id = changes["manager_id"]
        if changes.get("role") is not None:
            user.role = Role(changes["role"]).value

        detail_fields = ("employment_type", "confirmation_date", "probation_start_date", "probation_end_date")
        if any(field in changes for field in detail_fields):
            details = db.query(EmployeeDetails).filter(EmployeeDetails.user_id == user_id).first()
            if details is None:
                details = EmployeeDetails(user_id=user_id)
                db.add(details)
            for field in detail_fields:
                if field not in changes:
                    continue
                value = changes[field]
                if field == "employment_type":
                    if value is None:
                        continue
                    value = EmploymentType(value).value
                setattr(details, field, value)

        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("User updated: user_id=%s fields=%s", user_id, sorted(changes))
    return user


def delete_user(db: Session, user_id: int, actor_id: int) -> None:
    """
    Delete a user and everything they own in one transaction: accrual
    ledger, leaves, entitlements, employment details, then the user.
    References from other users and leaves are cleared.
    """
    if user_id == actor_id:
        raise ValidationError("You cannot delete your own account")
    get_user(db, user_id)

    try:
        db.execute(delete(MonthlyAccrual).where(MonthlyAccrual.user_id == user_id))
        db.execute(delete(Leave).where(Leave.user_id == user_id))
        db.execute(delete(LeaveEntitlement).where(LeaveEntitlement.user_id == user_id))
        db.execute(delete(EmployeeDetails).where(EmployeeDetails.user_id == user_id))

        db.execute(update(User).where(User.manager_id == user_id).values(manager_id=None))
        db.execute(update(Leave).where(Leave.manager_id == user_id).values(manager_id=None))
        db.execute(update(Leave).where(Leave.reviewed_by == user_id).values(reviewed_by=None))
        db.execute(update(Leave).where(Leave.approved_by == user_id).values(approved_by=None))

        db.execute(delete(User).where(User.id == user_id))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to delete user_id=%s", user_id)
        raise

    db.expire_all()
    logger.info("User deleted: user_id=%s by actor_id=%s", user_id, actor_id)


def bootstrap_initial_admin(db: Session, email: str, password: str) -> Tuple[Optional[User], bool]:
    """
    Create the initial admin when no admin exists.

    Returns:
        (admin user or None, whether it was created)
    """
    existing = db.query(User).filter(
        (User.role == Role.ADMIN.value) | (User.employee_id == INITIAL_ADMIN_EMPLOYEE_ID)
    ).first()
    if existing:
        return existing, False

    admin = create_user(db, UserCreate(
        employee_id=INITIAL_ADMIN_EMPLOYEE_ID,
        name="System Administrator",
        email=email,
        password=password,
        role=Role.ADMIN,
        employment_type=EmploymentType.CONFIRMED,
    ))
    return admin, True
