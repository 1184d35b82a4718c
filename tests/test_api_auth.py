"""Tests for login, the bearer guard and the password flows."""

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from repositories import AdminRepository
from security import create_access_token, seed_admin
from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_login_returns_token(client, mongo_db) -> None:
    seed_admin(AdminRepository(mongo_db))
    response = client.post(
        "/api/auth/login", json={"email": ADMIN_EMAIL.upper(), "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["tokenType"] == "bearer"
    assert body["token"]


def test_login_wrong_password_returns_401(client, mongo_db) -> None:
    seed_admin(AdminRepository(mongo_db))
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid credentials"}


def test_login_missing_fields_returns_400(client) -> None:
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL})
    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"


def test_protected_endpoint_without_bearer_returns_401_and_writes_nothing(client, mongo_db) -> None:
    response = client.post("/api/testimonial", json={"name": "Jane", "comment": "Great trip!"})
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}
    assert mongo_db.testimonial.count_documents({}) == 0

    response = client.put("/api/about", json={"content": "Hacked"})
    assert response.status_code == 401
    assert mongo_db.about.count_documents({}) == 0


def test_garbage_token_returns_401(client) -> None:
    response = client.put(
        "/api/contact", json={"name": "x"}, headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 401


def test_expired_token_returns_401(client, mongo_db) -> None:
    seed_admin(AdminRepository(mongo_db))
    admin = AdminRepository(mongo_db).by_email(ADMIN_EMAIL)
    token = create_access_token(
        {"sub": str(admin["_id"]), "role": "admin"}, expires_delta=timedelta(minutes=-1)
    )
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_for_unknown_admin_returns_401(client) -> None:
    token = create_access_token({"sub": "0" * 24, "role": "admin"})
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_me_returns_current_admin(client, admin_headers) -> None:
    response = client.get("/api/auth/me", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["email"] == ADMIN_EMAIL


def test_forgot_and_reset_password(client, admin_headers, mailer) -> None:
    response = client.post("/api/auth/forgot-password", json={"email": ADMIN_EMAIL})
    assert response.status_code == 200
    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == ADMIN_EMAIL
    url = urlparse(mailer.sent[0]["url"])
    assert url.path == "/reset-password"
    token = parse_qs(url.query)["token"][0]

    response = client.post(
        "/api/auth/reset-password", json={"token": token, "newPassword": "brandnew1"}
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Password reset successful"}

    # single use
    response = client.post(
        "/api/auth/reset-password", json={"token": token, "newPassword": "another1"}
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid or expired token"}

    login = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "brandnew1"})
    assert login.status_code == 200


def test_forgot_password_unknown_email_returns_404(client, admin_headers, mailer) -> None:
    response = client.post("/api/auth/forgot-password", json={"email": "who@example.com"})
    assert response.status_code == 404
    assert mailer.sent == []


def test_change_password(client, admin_headers) -> None:
    response = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "wrong", "newPassword": "changed123"},
        headers=admin_headers,
    )
    assert response.status_code == 401

    response = client.post(
        "/api/auth/change-password",
        json={"currentPassword": ADMIN_PASSWORD, "newPassword": "changed123"},
        headers=admin_headers,
    )
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "changed123"})
    assert login.status_code == 200
