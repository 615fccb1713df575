"""
User schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, ConfigDict
from leave_api.models.user import Role, EmploymentType
from leave_api.schemas.leave import EntitlementOut, LeaveOut


def _normalize_email(v):
    if v is None:
        return None
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


class UserCreate(BaseModel):
    """Schema for creating a user with employment details"""
    employee_id: str = Field(..., min_length=1, max_length=50, description="Employee code (unique)")
    name: str = Field(..., min_length=1, description="Full name")
    email: str = Field(..., description="Email address (unique, used for login)")
    password: str = Field(..., min_length=6, max_length=72, description="Initial password")
    role: Role = Field(default=Role.EMPLOYEE, description="Base role")
    manager_id: Optional[int] = Field(None, description="Direct manager's user id")
    employment_type: EmploymentType = Field(default=EmploymentType.PROBATION)
    confirmation_date: Optional[date] = Field(None, description="Required for annual leave of confirmed employees")
    probation_start_date: Optional[date] = Field(None, description="Start of monthly casual accrual")
    probation_end_date: Optional[date] = None

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _normalize_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v):
        """Normalize and validate password"""
        from leave_api.core.security import validate_password
        return validate_password(v)


class UserUpdate(BaseModel):
    """Schema for updating a user; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    role: Optional[Role] = None
    manager_id: Optional[int] = None
    employment_type: Optional[EmploymentType] = None
    confirmation_date: Optional[date] = None
    probation_start_date: Optional[date] = None
    probation_end_date: Optional[date] = None

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _normalize_email(v)


class UserOut(BaseModel):
    """Schema for user output"""
    id: int
    employee_id: str
    name: str
    email: str
    role: Role
    manager_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EmployeeDetailsOut(BaseModel):
    employment_type: EmploymentType
    confirmation_date: Optional[date] = None
    probation_start_date: Optional[date] = None
    probation_end_date: Optional[date] = None
    last_accrual_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class UserListItemOut(UserOut):
    """User row with employment type and manager name (admin list)"""
    employment_type: Optional[EmploymentType] = None
    confirmation_date: Optional[date] = None
    manager_name: Optional[str] = None


class UserMeOut(UserOut):
    """Current user profile including the role the token is acting in"""
    active_role: Role
    details: Optional[EmployeeDetailsOut] = None


class ManagerRef(BaseModel):
    id: int
    employee_id: str
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class LeaveStatsOut(BaseModel):
    total_leaves: int = 0
    total_days: Decimal = Decimal(0)
    approved_leaves: int = 0
    pending_leaves: int = 0
    rejected_leaves: int = 0
    approved_days: Decimal = Decimal(0)
    pending_days: Decimal = Decimal(0)
    rejected_days: Decimal = Decimal(0)


class EmployeeProfileOut(BaseModel):
    """User profile with current-year entitlement, leave stats and recent leaves"""
    employee: UserOut
    details: Optional[EmployeeDetailsOut] = None
    manager_name: Optional[str] = None
    leave_stats: LeaveStatsOut
    entitlement: Optional[EntitlementOut] = None
    recent_leaves: List[LeaveOut]


class TeamMemberOut(BaseModel):
    id: int
    employee_id: str
    name: str
    email: str
    role: Role
    employment_type: Optional[EmploymentType] = None
    confirmation_date: Optional[date] = None
    total_leaves: int
    approved_days: Decimal


class TeamStatsOut(BaseModel):
    total_team_members: int
    pending_approvals: int
    approved_this_month: int
    rejected_this_month: int
