"""
Tests for manager team views
"""
from datetime import date
from fastapi import status
from sqlalchemy.orm import Session
from leave_api.models.leave import LeaveType
from leave_api.models.user import Role
from leave_api.schemas.leave import LeaveApplyRequest
from leave_api.services import manager_service
from leave_api.services.leave_service import apply_for_leave, review_leave


def _apply(db, user, start, end, leave_type=LeaveType.CASUAL):
    leave, _ = apply_for_leave(db, user, LeaveApplyRequest(
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        job_handover_person="Priya",
    ))
    return leave


def test_team_includes_reports_and_manager_only(db: Session, make_user):
    manager = make_user(role=Role.MANAGER, name="Manager M")
    report = make_user(manager=manager, name="Alice Report")
    other_manager = make_user(role=Role.MANAGER)
    make_user(manager=other_manager, name="Bob Outsider")

    team = manager_service.get_manager_team(db, manager)

    assert [member["id"] for member in team] == [report.id, manager.id]


def test_team_stats_counts_this_month(db: Session, make_user):
    manager = make_user(role=Role.MANAGER)
    first = make_user(manager=manager, casual_remaining=10)
    second = make_user(manager=manager, casual_remaining=10)

    approved = _apply(db, first, date(2030, 5, 6), date(2030, 5, 6))
    rejected = _apply(db, second, date(2030, 5, 13), date(2030, 5, 13))
    _apply(db, second, date(2030, 6, 3), date(2030, 6, 3))
    review_leave(db, approved.id, manager, "approve")
    review_leave(db, rejected.id, manager, "reject", "Release week")

    stats = manager_service.get_team_leave_stats(db, manager, today=date(2030, 5, 20))

    assert stats == {
        "total_team_members": 2,
        "pending_approvals": 1,
        "approved_this_month": 1,
        "rejected_this_month": 1,
    }


def test_leave_stats_sum_days_by_status(db: Session, make_user):
    manager = make_user(role=Role.MANAGER)
    employee = make_user(manager=manager, casual_remaining=10)
    approved = _apply(db, employee, date(2030, 5, 6), date(2030, 5, 8))
    _apply(db, employee, date(2030, 6, 3), date(2030, 6, 3))
    review_leave(db, approved.id, manager, "approve")

    stats = manager_service.get_leave_stats(db, employee.id)

    assert stats["total_leaves"] == 2
    assert stats["approved_leaves"] == 1
    assert stats["pending_leaves"] == 1
    assert float(stats["approved_days"]) == 3
    assert float(stats["total_days"]) == 4


def test_team_endpoints(client, make_user, auth_headers):
    manager = make_user(role=Role.MANAGER)
    report = make_user(manager=manager, casual_remaining=5)
    outsider = make_user()
    headers = auth_headers(manager)

    team = client.get("/api/v1/manager/team", headers=headers)
    assert team.status_code == status.HTTP_200_OK
    assert {member["id"] for member in team.json()} == {manager.id, report.id}

    details = client.get(f"/api/v1/manager/team/employee/{report.id}", headers=headers)
    assert details.status_code == status.HTTP_200_OK
    assert details.json()["employee"]["id"] == report.id
    assert float(details.json()["entitlement"]["casual_leave_remaining"]) == 5

    not_in_team = client.get(f"/api/v1/manager/team/employee/{outsider.id}", headers=headers)
    assert not_in_team.status_code == status.HTTP_404_NOT_FOUND

    stats = client.get("/api/v1/manager/team/stats", headers=headers)
    assert stats.status_code == status.HTTP_200_OK
    assert stats.json()["total_team_members"] == 1


def test_pending_leaves_lists_only_reports(client, db: Session, make_user, auth_headers):
    manager = make_user(role=Role.MANAGER)
    report = make_user(manager=manager, casual_remaining=5, name="Report R")
    outsider = make_user(casual_remaining=5)
    leave = _apply(db, report, date(2030, 3, 4), date(2030, 3, 4))
    _apply(db, outsider, date(2030, 3, 4), date(2030, 3, 4))

    response = client.get("/api/v1/manager/leaves/pending", headers=auth_headers(manager))

    assert response.status_code == status.HTTP_200_OK
    rows = response.json()
    assert [row["id"] for row in rows] == [leave.id]
    assert rows[0]["employee_name"] == "Report R"


def test_team_views_forbidden_for_employee(client, make_user, auth_headers):
    employee = make_user()
    response = client.get("/api/v1/manager/team", headers=auth_headers(employee))
    assert response.status_code == status.HTTP_403_FORBIDDEN
