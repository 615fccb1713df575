"""
Tests for authentication and role switching
"""
import pytest
from fastapi import status
from leave_api.core.security import create_access_token, decode_token, hash_password, verify_password
from leave_api.models.user import Role
from leave_api.services.auth_service import ROLE_SWITCH_TABLE, can_switch_to_role

DEFAULT_PASSWORD = "password123"


@pytest.mark.parametrize("base,target,allowed", [
    (Role.ADMIN, Role.ADMIN, True),
    (Role.ADMIN, Role.EMPLOYEE, True),
    (Role.ADMIN, Role.MANAGER, False),
    (Role.MANAGER, Role.MANAGER, True),
    (Role.MANAGER, Role.EMPLOYEE, True),
    (Role.MANAGER, Role.ADMIN, False),
    (Role.EMPLOYEE, Role.EMPLOYEE, True),
    (Role.EMPLOYEE, Role.MANAGER, False),
    (Role.EMPLOYEE, Role.ADMIN, False),
])
def test_role_switch_table(base, target, allowed):
    assert can_switch_to_role(base, target) is allowed


def test_every_role_can_act_as_itself():
    for role in Role:
        assert role in ROLE_SWITCH_TABLE[role]


def test_argon2_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed.startswith("$argon2")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_legacy_bcrypt_hash_is_accepted():
    import bcrypt
    legacy = bcrypt.hashpw(b"legacy-pass", bcrypt.gensalt()).decode("utf-8")
    assert verify_password("legacy-pass", legacy)
    assert not verify_password("other-pass", legacy)


def test_unknown_hash_format_is_rejected():
    assert not verify_password("anything", "plaintext")


def test_decode_rejects_tampered_token():
    token = create_access_token({"sub": "1"})
    with pytest.raises(ValueError):
        decode_token(token + "x")


def test_login_success(client, make_user):
    user = make_user(role=Role.MANAGER)

    response = client.post("/api/v1/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["role"] == "manager"
    assert data["active_role"] == "manager"
    claims = decode_token(data["access_token"])
    assert claims["sub"] == str(user.id)
    assert claims["employee_id"] == user.employee_id
    assert claims["role"] == "manager"
    assert claims["active_role"] == "manager"


def test_login_email_is_case_insensitive(client, make_user):
    user = make_user()

    response = client.post(
        "/api/v1/auth/login", json={"email": user.email.upper(), "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == status.HTTP_200_OK


@pytest.mark.parametrize("email,password", [
    ("user1@example.com", "wrong-password"),
    ("nobody@example.com", DEFAULT_PASSWORD),
])
def test_login_failure(client, make_user, email, password):
    make_user()

    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid email or password"


def test_invalid_token_is_unauthorized(client):
    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_admin_switches_to_employee_and_loses_admin_access(client, make_user, auth_headers):
    admin = make_user(role=Role.ADMIN)
    headers = auth_headers(admin)
    assert client.get("/api/v1/users", headers=headers).status_code == status.HTTP_200_OK

    response = client.post("/api/v1/auth/switch-role", json={"role": "employee"}, headers=headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["role"] == "admin"
    assert data["active_role"] == "employee"
    claims = decode_token(data["access_token"])
    assert claims["role"] == "admin"
    assert claims["active_role"] == "employee"

    employee_headers = {"Authorization": f"Bearer {data['access_token']}"}
    assert client.get("/api/v1/users", headers=employee_headers).status_code == status.HTTP_403_FORBIDDEN
    me = client.get("/api/v1/users/me", headers=employee_headers).json()
    assert me["role"] == "admin"
    assert me["active_role"] == "employee"

    # Switching back is allowed from the original role
    back = client.post("/api/v1/auth/switch-role", json={"role": "admin"}, headers=employee_headers)
    assert back.status_code == status.HTTP_200_OK
    assert back.json()["active_role"] == "admin"


def test_employee_cannot_switch_to_manager(client, make_user, auth_headers):
    employee = make_user(role=Role.EMPLOYEE)

    response = client.post("/api/v1/auth/switch-role", json={"role": "manager"}, headers=auth_headers(employee))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_token_is_rejected_when_stored_role_no_longer_permits_active_role(client, db, make_user):
    user = make_user(role=Role.EMPLOYEE)
    forged = create_access_token({
        "sub": str(user.id),
        "employee_id": user.employee_id,
        "role": "admin",
        "active_role": "admin",
    })

    response = client.get("/api/v1/users", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
