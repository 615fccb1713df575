"""
Tests for the monthly casual leave accrual
"""
from datetime import date
from decimal import Decimal
from unittest.mock import patch
from fastapi import status
from sqlalchemy.orm import Session
from leave_api.models.leave import LeaveEntitlement, MonthlyAccrual
from leave_api.models.user import EmployeeDetails, EmploymentType, Role
from leave_api.services import accrual_service
from leave_api.schemas.user import UserCreate
from leave_api.services.accrual_service import run_monthly_accrual, get_accrual_history
from leave_api.services.entitlement_service import ensure_entitlement
from leave_api.services.user_service import create_user


def _entitlement(db: Session, user_id: int, year: int) -> LeaveEntitlement:
    return db.query(LeaveEntitlement).filter(
        LeaveEntitlement.user_id == user_id,
        LeaveEntitlement.year == year,
    ).first()


def test_accrual_credits_months_elapsed(db: Session, make_user):
    user = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2024, 1, 15))

    summary = run_monthly_accrual(db, today=date(2024, 4, 1))

    assert summary["month"] == "2024-04"
    assert summary["processed_count"] == 1
    assert summary["failed_count"] == 0
    entitlement = _entitlement(db, user.id, 2024)
    assert entitlement.casual_leave_entitled == Decimal("3")
    assert entitlement.casual_leave_remaining == Decimal("3")

    ledger = db.query(MonthlyAccrual).filter(MonthlyAccrual.user_id == user.id).one()
    assert ledger.month == date(2024, 4, 1)
    assert ledger.casual_leave_earned == Decimal("3")
    assert ledger.casual_leave_balance == Decimal("3")

    details = db.query(EmployeeDetails).filter(EmployeeDetails.user_id == user.id).one()
    assert details.last_accrual_date == date(2024, 4, 1)


def test_accrual_adds_to_previous_remaining(db: Session, make_user):
    user = make_user(
        employment_type=EmploymentType.INTERNSHIP,
        probation_start_date=date(2024, 2, 1),
        casual_remaining=1,
        year=2024,
    )

    run_monthly_accrual(db, today=date(2024, 4, 1))

    entitlement = _entitlement(db, user.id, 2024)
    assert entitlement.casual_leave_entitled == Decimal("2")
    assert entitlement.casual_leave_remaining == Decimal("3")


def test_accrual_twice_in_same_month_is_idempotent(db: Session, make_user):
    user = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2024, 1, 1))

    first = run_monthly_accrual(db, today=date(2024, 3, 1))
    remaining_after_first = _entitlement(db, user.id, 2024).casual_leave_remaining
    second = run_monthly_accrual(db, today=date(2024, 3, 20))

    assert first["processed_count"] == 1
    assert second["processed_count"] == 0
    assert second["skipped_count"] == 1
    assert _entitlement(db, user.id, 2024).casual_leave_remaining == remaining_after_first
    assert db.query(MonthlyAccrual).filter(MonthlyAccrual.user_id == user.id).count() == 1


def test_accrual_runs_again_next_month(db: Session, make_user):
    user = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2024, 1, 1))

    run_monthly_accrual(db, today=date(2024, 2, 1))
    run_monthly_accrual(db, today=date(2024, 3, 1))

    entitlement = _entitlement(db, user.id, 2024)
    # 1 in February, then 2 on top in March
    assert entitlement.casual_leave_entitled == Decimal("2")
    assert entitlement.casual_leave_remaining == Decimal("3")
    assert db.query(MonthlyAccrual).filter(MonthlyAccrual.user_id == user.id).count() == 2


def test_accrual_skips_zero_months_and_confirmed_employees(db: Session, make_user):
    make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2024, 5, 10))
    confirmed = make_user(employment_type=EmploymentType.CONFIRMED, confirmation_date=date(2023, 1, 1))

    summary = run_monthly_accrual(db, today=date(2024, 5, 31))

    assert summary["processed_count"] == 0
    assert summary["skipped_count"] == 1
    assert _entitlement(db, confirmed.id, 2024) is None
    assert db.query(MonthlyAccrual).count() == 0


def test_accrual_failure_is_isolated_per_employee(db: Session, make_user):
    failing = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2024, 1, 1))
    healthy = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2024, 1, 1))

    original = accrual_service._accrue_for_employee

    def flaky(db_, details, today):
        if details.user_id == failing.id:
            raise RuntimeError("database went away")
        return original(db_, details, today)

    with patch.object(accrual_service, "_accrue_for_employee", side_effect=flaky):
        summary = run_monthly_accrual(db, today=date(2024, 4, 1))

    assert summary["processed_count"] == 1
    assert summary["failed_count"] == 1
    assert summary["failed"][0]["user_id"] == failing.id
    assert "database went away" in summary["failed"][0]["error"]
    assert _entitlement(db, failing.id, 2024) is None
    assert _entitlement(db, healthy.id, 2024).casual_leave_remaining == Decimal("3")


def test_accrual_history_filters_by_user_and_year(db: Session, make_user):
    first = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2023, 11, 1))
    second = make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2023, 11, 1))

    run_monthly_accrual(db, today=date(2023, 12, 1))
    run_monthly_accrual(db, today=date(2024, 1, 1))

    assert len(get_accrual_history(db)) == 4
    assert len(get_accrual_history(db, user_id=first.id)) == 2
    rows = get_accrual_history(db, user_id=second.id, year=2024)
    assert len(rows) == 1
    assert rows[0].month == date(2024, 1, 1)


def test_run_accrual_endpoint_requires_admin(client, make_user, auth_headers):
    employee = make_user(role=Role.EMPLOYEE)

    response = client.post("/api/v1/accrual/run", headers=auth_headers(employee))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_run_accrual_endpoint_returns_summary(client, make_user, auth_headers):
    admin = make_user(role=Role.ADMIN)
    make_user(employment_type=EmploymentType.PROBATION, probation_start_date=date(2020, 1, 1))

    response = client.post("/api/v1/accrual/run", headers=auth_headers(admin))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["processed_count"] == 1
    assert data["failed_count"] == 0
    assert data["failed"] == []

    again = client.post("/api/v1/accrual/run", headers=auth_headers(admin))
    assert again.json()["processed_count"] == 0

    history = client.get("/api/v1/accrual/history", headers=auth_headers(admin))
    assert history.status_code == status.HTTP_200_OK
    assert len(history.json()) == 1


def test_accrual_opening_a_new_year_keeps_birthday_entitlement(db: Session):
    user = create_user(db, UserCreate(
        employee_id="P100",
        name="Probationer",
        email="probationer@example.com",
        password="password123",
        employment_type=EmploymentType.PROBATION,
    ), today=date(2030, 11, 3))

    summary = run_monthly_accrual(db, today=date(2031, 1, 1))

    assert summary["processed_count"] == 1
    entitlement = ensure_entitlement(db, user, 2031, date(2031, 1, 1))
    assert entitlement.birthday_leave_entitled == Decimal("1")
    assert entitlement.birthday_leave_remaining == Decimal("1")
    assert entitlement.annual_leave_entitled == Decimal("0")
    assert entitlement.casual_leave_entitled == Decimal("2")
    assert entitlement.casual_leave_remaining == Decimal("2")
