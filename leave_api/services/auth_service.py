"""
Authentication service - login and role switching.

A token carries two roles: ``role`` is the user's stored role and never
changes for the life of the token, ``active_role`` is the view the user
is currently acting in. Authorization checks use the active role.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from leave_api.core.exceptions import AuthorizationError
from leave_api.core.security import create_access_token, verify_password
from leave_api.models.user import User, Role

logger = logging.getLogger(__name__)

ROLE_SWITCH_TABLE = {
    Role.ADMIN: frozenset({Role.ADMIN, Role.EMPLOYEE}),
    Role.MANAGER: frozenset({Role.MANAGER, Role.EMPLOYEE}),
    Role.EMPLOYEE: frozenset({Role.EMPLOYEE}),
}


def can_switch_to_role(base_role: Role, target_role: Role) -> bool:
    return target_role in ROLE_SWITCH_TABLE.get(base_role, frozenset())


def issue_token(user: User, active_role: Optional[Role] = None) -> str:
    role = Role(user.role)
    token_data = {
        "sub": str(user.id),
        "employee_id": user.employee_id,
        "role": role.value,
        "active_role": (active_role or role).value,
    }
    return create_access_token(data=token_data)


def authenticate_user(db: Session, email: str, password: str) -> Optional[Tuple[User, str]]:
    """Return (user, token) for valid credentials, None otherwise."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not user.password_hash:
        logger.info("Login failed: unknown email")
        return None

    if not verify_password(password, user.password_hash):
        logger.info("Login failed: invalid password for user_id=%s", user.id)
        return None

    logger.info("Login successful for user_id=%s", user.id)
    return user, issue_token(user)


def switch_role(user: User, original_role: Role, target_role: Role) -> str:
    """
    Issue a new token acting as target_role.

    Raises:
        AuthorizationError: target_role is not permitted for the user's role
    """
    if not can_switch_to_role(original_role, target_role):
        raise AuthorizationError(
            f"Role '{original_role.value}' cannot switch to '{target_role.value}'"
        )
    logger.info(
        "Role switch: user_id=%s role=%s active_role=%s",
        user.id, original_role.value, target_role.value,
    )
    return issue_token(user, active_role=target_role)
