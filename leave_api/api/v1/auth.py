"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from leave_api.core.deps import get_db, get_current_identity, AuthIdentity
from leave_api.models.user import Role
from leave_api.schemas.auth import LoginRequest, SwitchRoleRequest, TokenResponse
from leave_api.services.auth_service import authenticate_user, switch_role

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    The token carries the user's role and an active role that starts out
    equal to it.
    """
    result = authenticate_user(db, login_data.email, login_data.password)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    user, access_token = result
    role = Role(user.role)
    return TokenResponse(access_token=access_token, role=role, active_role=role)


@router.post("/switch-role", response_model=TokenResponse)
async def switch_role_endpoint(
    request: SwitchRoleRequest,
    identity: AuthIdentity = Depends(get_current_identity),
):
    """
    Reissue the token acting as another role.

    admin may act as admin or employee, manager as manager or employee,
    employee only as employee.
    """
    access_token = switch_role(identity.user, identity.original_role, request.role)
    return TokenResponse(
        access_token=access_token,
        role=identity.original_role,
        active_role=request.role,
    )
