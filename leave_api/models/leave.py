"""
Leave models
"""
from typing import NamedTuple

from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    Enum as SQLEnum,
    Boolean,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from leave_api.db.base import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class LeaveType(str, enum.Enum):
    CASUAL = "casual"
    ANNUAL = "annual"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    BIRTHDAY = "birthday"
    OTHER = "other"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Leave(Base):
    __tablename__ = "leaves"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveType, name="leave_type", values_callable=_enum_values), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(Numeric(5, 2), nullable=False)  # Supports 0.5 days
    status = Column(
        SQLEnum(LeaveStatus, name="leave_status", values_callable=_enum_values),
        nullable=False,
        default=LeaveStatus.PENDING,
        server_default=text("'pending'"),
    )
    is_non_paid = Column(Boolean, nullable=False, default=False)
    paid_days = Column(Numeric(5, 2), nullable=False, default=0)
    non_paid_days = Column(Numeric(5, 2), nullable=False, default=0)
    # Entitlement year debited at submission; reviews adjust the same row
    entitlement_year = Column(Integer, nullable=False)
    # Reviewer captured at submission; stays valid if the employee changes manager later
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Handover / context metadata
    casual_leave_type = Column(String(50), nullable=True)
    which_half = Column(String(20), nullable=True)
    short_leave_out_time = Column(String(10), nullable=True)
    short_leave_in_time = Column(String(10), nullable=True)
    other_leave_type = Column(String(100), nullable=True)
    has_attended_bots = Column(Boolean, nullable=True)
    attended_bots_count = Column(Integer, nullable=True)
    bots_monitor = Column(String(255), nullable=True)
    email_autoforward = Column(String(255), nullable=True)
    has_client_calls = Column(Boolean, nullable=True)
    call_leader = Column(String(255), nullable=True)
    passwords_on_lastpass = Column(Boolean, nullable=True)
    passwords_shared = Column(Boolean, nullable=True)
    projects = Column(Text, nullable=True)
    comments = Column(Text, nullable=True)
    job_handover_person = Column(String(255), nullable=False)

    # Review
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    # Relationships
    user = relationship("User", foreign_keys=[user_id], backref="leaves")
    manager = relationship("User", foreign_keys=[manager_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])

    __table_args__ = (
        Index("ix_leaves_user_dates", "user_id", "start_date", "end_date"),
        CheckConstraint("start_date <= end_date", name="check_start_date_le_end_date"),
        CheckConstraint("total_days > 0", name="check_total_days_positive"),
    )


class LeaveEntitlement(Base):
    """
    Per-user, per-year balances. Each category has its own
    entitled / remaining / taken column triple.
    """
    __tablename__ = "leave_entitlements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)

    annual_leave_entitled = Column(Numeric(5, 2), nullable=False, default=0)
    annual_leave_remaining = Column(Numeric(5, 2), nullable=False, default=0)
    annual_leave_taken = Column(Numeric(5, 2), nullable=False, default=0)
    casual_leave_entitled = Column(Numeric(5, 2), nullable=False, default=0)
    casual_leave_remaining = Column(Numeric(5, 2), nullable=False, default=0)
    casual_leave_taken = Column(Numeric(5, 2), nullable=False, default=0)
    maternity_leave_entitled = Column(Numeric(5, 2), nullable=False, default=0)
    maternity_leave_remaining = Column(Numeric(5, 2), nullable=False, default=0)
    maternity_leave_taken = Column(Numeric(5, 2), nullable=False, default=0)
    paternity_leave_entitled = Column(Numeric(5, 2), nullable=False, default=0)
    paternity_leave_remaining = Column(Numeric(5, 2), nullable=False, default=0)
    paternity_leave_taken = Column(Numeric(5, 2), nullable=False, default=0)
    birthday_leave_entitled = Column(Numeric(5, 2), nullable=False, default=0)
    birthday_leave_remaining = Column(Numeric(5, 2), nullable=False, default=0)
    birthday_leave_taken = Column(Numeric(5, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    user = relationship("User", backref="entitlements")

    __table_args__ = (
        UniqueConstraint("user_id", "year", name="uq_leave_entitlements_user_year"),
    )


class MonthlyAccrual(Base):
    """Append-only ledger of casual leave credited by the monthly accrual run."""
    __tablename__ = "monthly_leave_accruals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    month = Column(Date, nullable=False)  # first day of the month
    casual_leave_earned = Column(Numeric(5, 2), nullable=False)
    casual_leave_balance = Column(Numeric(5, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    user = relationship("User", backref="monthly_accruals")

    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_monthly_leave_accruals_user_month"),
    )


class BalanceFields(NamedTuple):
    entitled: object
    remaining: object
    taken: object


# Static category -> column mapping; OTHER has no balance
BALANCE_FIELDS = {
    LeaveType.ANNUAL: BalanceFields(
        LeaveEntitlement.annual_leave_entitled,
        LeaveEntitlement.annual_leave_remaining,
        LeaveEntitlement.annual_leave_taken,
    ),
    LeaveType.CASUAL: BalanceFields(
        LeaveEntitlement.casual_leave_entitled,
        LeaveEntitlement.casual_leave_remaining,
        LeaveEntitlement.casual_leave_taken,
    ),
    LeaveType.MATERNITY: BalanceFields(
        LeaveEntitlement.maternity_leave_entitled,
        LeaveEntitlement.maternity_leave_remaining,
        LeaveEntitlement.maternity_leave_taken,
    ),
    LeaveType.PATERNITY: BalanceFields(
        LeaveEntitlement.paternity_leave_entitled,
        LeaveEntitlement.paternity_leave_remaining,
        LeaveEntitlement.paternity_leave_taken,
    ),
    LeaveType.BIRTHDAY: BalanceFields(
        LeaveEntitlement.birthday_leave_entitled,
        LeaveEntitlement.birthday_leave_remaining,
        LeaveEntitlement.birthday_leave_taken,
    ),
}

# Debited when the request is submitted (and re-credited on rejection)
SUBMISSION_DEDUCTED_TYPES = frozenset({LeaveType.CASUAL, LeaveType.ANNUAL})
# Debited only when a manager approves
APPROVAL_DEDUCTED_TYPES = frozenset({LeaveType.MATERNITY, LeaveType.PATERNITY, LeaveType.BIRTHDAY})
