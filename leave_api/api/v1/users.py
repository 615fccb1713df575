"""
User management endpoints (admin-only except /me and /managers)
"""
from typing import List
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session
from leave_api.core.deps import get_db, get_current_identity, require_roles, AuthIdentity
from leave_api.models.leave import LeaveType
from leave_api.models.user import Role, EmployeeDetails
from leave_api.schemas.leave import EntitlementOut, EntitlementUpdateRequest
from leave_api.schemas.user import (
    UserCreate,
    UserUpdate,
    UserOut,
    UserMeOut,
    EmployeeDetailsOut,
    UserListItemOut,
    ManagerRef,
    EmployeeProfileOut,
)
from leave_api.services import entitlement_service, user_service

router = APIRouter()


@router.post("", response_model=UserOut, status_code=201)
async def create_user_endpoint(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    """Create a user with employment details and this year's entitlement (ADMIN-only)"""
    return user_service.create_user(db, user_data)


@router.get("", response_model=List[UserListItemOut])
async def list_users_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    return user_service.list_users(db)


@router.get("/me", response_model=UserMeOut)
async def get_me_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
):
    """Current authenticated user's profile, including the active role."""
    user = identity.user
    details = db.query(EmployeeDetails).filter(EmployeeDetails.user_id == user.id).first()
    return UserMeOut(
        id=user.id,
        employee_id=user.employee_id,
        name=user.name,
        email=user.email,
        role=Role(user.role),
        manager_id=user.manager_id,
        created_at=user.created_at,
        updated_at=user.updated_at,
        active_role=identity.active_role,
        details=EmployeeDetailsOut.model_validate(details) if details else None,
    )


@router.get("/managers", response_model=List[ManagerRef])
async def list_managers_endpoint(
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
):
    """Users with the manager role, for manager pickers."""
    return user_service.list_managers(db)


@router.post("/entitlements/{year}/initialize")
async def initialize_year_endpoint(
    year: int = Path(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    """Create missing entitlement rows for every user for the year (ADMIN-only)"""
    return entitlement_service.initialize_year(db, year)


@router.get("/{user_id}", response_model=EmployeeProfileOut)
async def get_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    """User profile with current-year entitlement, leave stats and recent leaves"""
    return user_service.get_user_details(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user_endpoint(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    return user_service.update_user(db, user_id, user_data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    """
    Delete a user with their leaves, entitlements, accrual history and
    employment details (ADMIN-only). All or nothing.
    """
    user_service.delete_user(db, user_id, actor_id=identity.user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{user_id}/entitlements/{year}", response_model=EntitlementOut)
async def update_entitlement_endpoint(
    user_id: int,
    request: EntitlementUpdateRequest,
    year: int = Path(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    identity: AuthIdentity = Depends(require_roles(Role.ADMIN))
):
    """Set entitled / taken days per category; remaining becomes entitled - taken (ADMIN-only)"""
    changes = {}
    for leave_type in (LeaveType.ANNUAL, LeaveType.CASUAL, LeaveType.MATERNITY, LeaveType.PATERNITY, LeaveType.BIRTHDAY):
        category = getattr(request, leave_type.value)
        if category is not None:
            changes[leave_type] = category.model_dump(exclude_none=True)
    return entitlement_service.update_entitlement(db, user_id, year, changes)
