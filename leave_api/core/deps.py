"""
Dependencies and guards for FastAPI endpoints
"""
from dataclasses import dataclass
from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from leave_api.core.exceptions import AuthorizationError
from leave_api.core.security import decode_token
from leave_api.db.session import SessionLocal
from leave_api.models.user import User, Role


security = HTTPBearer()


@dataclass
class AuthIdentity:
    """Authenticated caller: the stored user plus the roles carried by the token."""

    user: User
    original_role: Role
    active_role: Role


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _credentials_exception(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> AuthIdentity:
    """
    Resolve the caller from the bearer token.

    The user's stored role is the privilege ceiling: a token whose active
    role is no longer permitted for that role is rejected.
    """
    from leave_api.services.auth_service import can_switch_to_role

    token = credentials.credentials

    try:
        payload = decode_token(token)
        sub_value = payload.get("sub")
        if sub_value is None:
            raise _credentials_exception()
        # Convert string sub back to integer
        user_id: int = int(sub_value)
        active_role = Role(payload.get("active_role") or payload.get("role"))
    except (ValueError, TypeError):
        raise _credentials_exception()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _credentials_exception("User not found")

    stored_role = Role(user.role)
    if not can_switch_to_role(stored_role, active_role):
        raise _credentials_exception("Token role is no longer valid for this user")

    return AuthIdentity(user=user, original_role=stored_role, active_role=active_role)


async def get_current_user(identity: AuthIdentity = Depends(get_current_identity)) -> User:
    return identity.user


def require_roles(*allowed_roles: Role):
    """
    Dependency factory for role-based access control on the active role

    Usage:
        @router.get("/admin-only")
        async def admin_endpoint(identity: AuthIdentity = Depends(require_roles(Role.ADMIN))):
            ...
    """
    def role_checker(identity: AuthIdentity = Depends(get_current_identity)) -> AuthIdentity:
        if identity.active_role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return identity
    return role_checker
