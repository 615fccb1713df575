"""
Leave schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Literal
from pydantic import BaseModel, Field
from pydantic import ConfigDict
from leave_api.models.leave import LeaveType, LeaveStatus


class LeaveApplyRequest(BaseModel):
    """
    Schema for applying leave

    Required fields (leave_type, start_date, end_date, job_handover_person)
    are checked by the leave service so a missing one is reported as a
    business validation error rather than a schema error.
    """
    leave_type: Optional[LeaveType] = Field(None, description="Type of leave")
    start_date: Optional[date] = Field(None, description="Start date of leave")
    end_date: Optional[date] = Field(None, description="End date of leave")
    total_days: Optional[Decimal] = Field(
        None,
        max_digits=5,
        decimal_places=2,
        description="Days requested (0.5 for a half day). Defaults to the inclusive calendar days"
    )
    job_handover_person: Optional[str] = Field(None, description="Colleague covering during the leave")

    casual_leave_type: Optional[str] = Field(None, description="full_day, half_day or short_leave")
    which_half: Optional[str] = Field(None, description="first_half or second_half for half days")
    short_leave_out_time: Optional[str] = None
    short_leave_in_time: Optional[str] = None
    other_leave_type: Optional[str] = None
    has_attended_bots: Optional[bool] = None
    attended_bots_count: Optional[int] = None
    bots_monitor: Optional[str] = None
    email_autoforward: Optional[str] = None
    has_client_calls: Optional[bool] = None
    call_leader: Optional[str] = None
    passwords_on_lastpass: Optional[bool] = None
    passwords_shared: Optional[bool] = None
    projects: Optional[str] = None
    comments: Optional[str] = None


class LeaveReviewRequest(BaseModel):
    """Schema for a manager's decision on a pending leave"""
    action: Literal["approve", "reject"] = Field(..., description="approve or reject")
    comments: Optional[str] = Field(None, description="Rejection reason or approval note")


class LeaveOut(BaseModel):
    """Schema for leave output"""
    id: int
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: Decimal
    status: LeaveStatus
    is_non_paid: bool
    paid_days: Decimal
    non_paid_days: Decimal
    entitlement_year: int
    manager_id: Optional[int] = None
    casual_leave_type: Optional[str] = None
    which_half: Optional[str] = None
    short_leave_out_time: Optional[str] = None
    short_leave_in_time: Optional[str] = None
    other_leave_type: Optional[str] = None
    has_attended_bots: Optional[bool] = None
    attended_bots_count: Optional[int] = None
    bots_monitor: Optional[str] = None
    email_autoforward: Optional[str] = None
    has_client_calls: Optional[bool] = None
    call_leader: Optional[str] = None
    passwords_on_lastpass: Optional[bool] = None
    passwords_shared: Optional[bool] = None
    projects: Optional[str] = None
    comments: Optional[str] = None
    job_handover_person: str
    reviewed_by: Optional[int] = Field(None, description="ID of the reviewing manager")
    reviewed_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeaveWithEmployeeOut(LeaveOut):
    """Leave row joined with the requesting employee (manager and admin views)"""
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    employee_email: Optional[str] = None

    @classmethod
    def from_row(cls, leave, user) -> "LeaveWithEmployeeOut":
        out = cls.model_validate(leave)
        out.employee_name = user.name
        out.employee_code = user.employee_id
        out.employee_email = user.email
        return out


class LeaveApplyResponse(BaseModel):
    leave: LeaveOut
    paid_days: Decimal
    non_paid_days: Decimal
    message: str


class EntitlementOut(BaseModel):
    """Per-year balances"""
    id: int
    user_id: int
    year: int
    annual_leave_entitled: Decimal
    annual_leave_remaining: Decimal
    annual_leave_taken: Decimal
    casual_leave_entitled: Decimal
    casual_leave_remaining: Decimal
    casual_leave_taken: Decimal
    maternity_leave_entitled: Decimal
    maternity_leave_remaining: Decimal
    maternity_leave_taken: Decimal
    paternity_leave_entitled: Decimal
    paternity_leave_remaining: Decimal
    paternity_leave_taken: Decimal
    birthday_leave_entitled: Decimal
    birthday_leave_remaining: Decimal
    birthday_leave_taken: Decimal

    model_config = ConfigDict(from_attributes=True)


class CasualLeaveHistoryItem(BaseModel):
    id: int
    start_date: date
    end_date: date
    total_days: Decimal
    paid_days: Decimal
    non_paid_days: Decimal
    status: LeaveStatus
    casual_leave_type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LeaveBalanceResponse(BaseModel):
    entitlement: EntitlementOut
    casual_leaves_history: List[CasualLeaveHistoryItem]


class BalanceCategoryUpdate(BaseModel):
    entitled: Optional[Decimal] = Field(None, ge=0, max_digits=5, decimal_places=2)
    taken: Optional[Decimal] = Field(None, ge=0, max_digits=5, decimal_places=2)


class EntitlementUpdateRequest(BaseModel):
    """Admin edit; remaining is recomputed as entitled - taken"""
    annual: Optional[BalanceCategoryUpdate] = None
    casual: Optional[BalanceCategoryUpdate] = None
    maternity: Optional[BalanceCategoryUpdate] = None
    paternity: Optional[BalanceCategoryUpdate] = None
    birthday: Optional[BalanceCategoryUpdate] = None
