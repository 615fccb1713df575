"""
Database models
"""
from leave_api.models.user import (
    User,
    Role,
    EmployeeDetails,
    EmploymentType,
    ACCRUING_EMPLOYMENT_TYPES,
)
from leave_api.models.leave import (
    Leave,
    LeaveEntitlement,
    MonthlyAccrual,
    LeaveType,
    LeaveStatus,
    BalanceFields,
    BALANCE_FIELDS,
    SUBMISSION_DEDUCTED_TYPES,
    APPROVAL_DEDUCTED_TYPES,
)

__all__ = [
    "User",
    "Role",
    "EmployeeDetails",
    "EmploymentType",
    "ACCRUING_EMPLOYMENT_TYPES",
    "Leave",
    "LeaveEntitlement",
    "MonthlyAccrual",
    "LeaveType",
    "LeaveStatus",
    "BalanceFields",
    "BALANCE_FIELDS",
    "SUBMISSION_DEDUCTED_TYPES",
    "APPROVAL_DEDUCTED_TYPES",
]
