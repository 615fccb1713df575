"""
Tests for the paid / non-paid split of leave requests
"""
import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session
from leave_api.models.leave import LeaveType
from leave_api.services.leave_service import evaluate_leave_request, split_casual_days


@pytest.mark.parametrize("total,remaining,paid,non_paid", [
    ("5", "2", "2", "3"),
    ("2", "5", "2", "0"),
    ("0.5", "0", "0", "0.5"),
    ("1.5", "1", "1", "0.5"),
    ("3", "3", "3", "0"),
    ("2", "0.5", "0.5", "1.5"),
])
def test_casual_split(total, remaining, paid, non_paid):
    split = split_casual_days(Decimal(total), Decimal(remaining))

    assert split.eligible is True
    assert split.paid_days == Decimal(paid)
    assert split.non_paid_days == Decimal(non_paid)
    assert split.paid_days + split.non_paid_days == Decimal(total)
    assert split.paid_days <= Decimal(remaining)


def test_casual_without_entitlement_row_is_fully_unpaid(db: Session, make_user):
    user = make_user()

    split = evaluate_leave_request(db, user.id, LeaveType.CASUAL, Decimal("2"), date.today().year)

    assert split.eligible is True
    assert split.paid_days == Decimal("0")
    assert split.non_paid_days == Decimal("2")


def test_casual_uses_remaining_balance(db: Session, make_user):
    user = make_user(casual_remaining=2, year=2024)

    split = evaluate_leave_request(db, user.id, LeaveType.CASUAL, Decimal("5"), 2024)

    assert split.paid_days == Decimal("2")
    assert split.non_paid_days == Decimal("3")


@pytest.mark.parametrize("leave_type", [
    LeaveType.ANNUAL, LeaveType.MATERNITY, LeaveType.PATERNITY, LeaveType.BIRTHDAY, LeaveType.OTHER,
])
def test_non_casual_types_are_not_split(db: Session, make_user, leave_type):
    user = make_user(casual_remaining=0, year=2024)

    split = evaluate_leave_request(db, user.id, leave_type, Decimal("4"), 2024)

    assert split.eligible is True
    assert split.paid_days == Decimal("4")
    assert split.non_paid_days == Decimal("0")
