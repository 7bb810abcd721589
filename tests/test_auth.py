from sqlalchemy import select

from companygrow.models.leaderboard_point import LeaderboardPoint
from companygrow.models.notification import Notification
from companygrow.models.password_reset_code import PasswordResetCode
from companygrow.security import create_access_token
from datetime import timedelta


def register(client, email="new.hire@companygrow.com", password="secret1"):
    return client.post("/api/auth/register", json={
        "email": email, "password": password, "first_name": "New", "last_name": "Hire",
        "department": "Engineering",
    })


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "CompanyGrow API is running!"
    assert "timestamp" in body


def test_register_returns_token_and_awards_bonus(client, db):
    r = register(client)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["token"]
    assert data["user"]["role"] == "employee"

    uid = data["user"]["id"]
    pts = db.execute(select(LeaderboardPoint).where(LeaderboardPoint.user_id == uid)).scalars().all()
    assert [(p.points_type, p.points_earned) for p in pts] == [("registration_bonus", 50)]
    titles = db.execute(select(Notification.title).where(Notification.user_id == uid)).scalars().all()
    assert len(titles) == 1


def test_register_duplicate_email(client):
    register(client)
    r = register(client)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "USER_EXISTS"


def test_register_validation_error(client):
    r = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert err["details"]


def test_login_and_daily_activity_once_per_day(client, db, employee):
    for _ in range(2):
        r = client.post("/api/auth/login", json={"email": employee.email, "password": "Secret123"})
        assert r.status_code == 200
        assert r.json()["data"]["token"]

    daily = db.execute(
        select(LeaderboardPoint).where(
            LeaderboardPoint.user_id == employee.id, LeaderboardPoint.points_type == "daily_activity"
        )
    ).scalars().all()
    assert len(daily) == 1
    assert daily[0].points_earned == 10


def test_login_bad_credentials(client, employee):
    r = client.post("/api/auth/login", json={"email": employee.email, "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_login_deactivated(client, make_user):
    u = make_user(is_active=False)
    r = client.post("/api/auth/login", json={"email": u.email, "password": "Secret123"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "USER_DEACTIVATED"


def test_oauth2_token_form(client, employee):
    r = client.post("/api/auth/token", data={"username": employee.email, "password": "Secret123"})
    assert r.status_code == 200
    assert r.json()["token_type"] == "bearer"

    token = r.json()["access_token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == employee.email


def test_me_requires_token(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "NO_TOKEN"


def test_invalid_and_expired_tokens(client, employee):
    r = client.get("/api/auth/verify", headers={"x-auth-token": "garbage"})
    assert r.json()["error"]["code"] == "INVALID_TOKEN"

    expired = create_access_token(subject=str(employee.id), expires_delta=timedelta(minutes=-5))
    r = client.get("/api/auth/verify", headers={"x-auth-token": expired})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "TOKEN_EXPIRED"


def test_verify(client, employee, auth):
    r = client.get("/api/auth/verify", headers=auth(employee))
    assert r.status_code == 200
    assert r.json()["data"]["valid"] is True


def test_forgot_and_reset_password(client, db, employee):
    r = client.post("/api/auth/forgot-password", json={"email": employee.email})
    assert r.status_code == 200
    code = db.execute(
        select(PasswordResetCode.code).where(PasswordResetCode.email == employee.email)
    ).scalar_one()

    weak = client.post("/api/auth/reset-password",
                       json={"email": employee.email, "code": code, "new_password": "alllower1"})
    assert weak.status_code == 400
    assert weak.json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.post("/api/auth/reset-password",
                    json={"email": employee.email, "code": code, "new_password": "NewPass123"})
    assert r.status_code == 200

    # el código se consume
    again = client.post("/api/auth/reset-password",
                        json={"email": employee.email, "code": code, "new_password": "NewPass123"})
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "INVALID_RESET_CODE"

    login = client.post("/api/auth/login", json={"email": employee.email, "password": "NewPass123"})
    assert login.status_code == 200


def test_forgot_password_unknown_email_is_silent(client):
    r = client.post("/api/auth/forgot-password", json={"email": "nobody@companygrow.com"})
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_unknown_api_route(client):
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "ROUTE_NOT_FOUND"
