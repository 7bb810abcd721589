from companygrow.models.user import User


def test_list_users_requires_staff(client, employee, auth):
    r = client.get("/api/users", headers=auth(employee))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"


def test_list_users_filters_and_pagination(client, manager, make_user, auth):
    for _ in range(3):
        make_user("employee", department="Design")
    make_user("employee", department="Sales")

    r = client.get("/api/users", params={"department": "Design", "limit": 2}, headers=auth(manager))
    assert r.status_code == 200
    body = r.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


def test_admin_creates_user(client, admin, auth):
    r = client.post("/api/users", headers=auth(admin), json={
        "email": "lead@companygrow.com", "password": "secret1", "first_name": "Team",
        "last_name": "Lead", "role": "manager",
    })
    assert r.status_code == 201
    assert r.json()["data"]["role"] == "manager"


def test_manager_cannot_create_user(client, manager, auth):
    r = client.post("/api/users", headers=auth(manager), json={
        "email": "x@companygrow.com", "password": "secret1", "first_name": "X", "last_name": "Y",
    })
    assert r.status_code == 403


def test_self_update_awards_profile_points(client, employee, auth, points_of):
    r = client.put(f"/api/users/{employee.id}", headers=auth(employee), json={"bio": "Hello"})
    assert r.status_code == 200
    assert r.json()["data"]["bio"] == "Hello"
    assert points_of(employee.id) == [("profile_update", 20)]


def test_employee_cannot_change_role_or_other_users(client, employee, make_user, auth):
    r = client.put(f"/api/users/{employee.id}", headers=auth(employee), json={"role": "admin"})
    assert r.status_code == 403

    other = make_user()
    r = client.put(f"/api/users/{other.id}", headers=auth(employee), json={"bio": "hacked"})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED_UPDATE"


def test_admin_updates_role_without_profile_points(client, admin, employee, auth, points_of):
    r = client.put(f"/api/users/{employee.id}", headers=auth(admin), json={"role": "manager"})
    assert r.status_code == 200
    assert r.json()["data"]["role"] == "manager"
    assert points_of(employee.id) == []
    assert points_of(admin.id) == []


def test_deactivate_user(client, db, admin, employee, auth):
    r = client.delete(f"/api/users/{employee.id}", headers=auth(admin))
    assert r.status_code == 200
    db.expire_all()
    assert db.get(User, employee.id).is_active is False

    # un usuario desactivado ya no puede usar su token
    r = client.get("/api/auth/me", headers=auth(employee))
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "USER_DEACTIVATED"


def test_admin_cannot_deactivate_self(client, admin, auth):
    r = client.delete(f"/api/users/{admin.id}", headers=auth(admin))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "CANNOT_DEACTIVATE_SELF"


def test_get_missing_user(client, employee, auth):
    r = client.get("/api/users/9999", headers=auth(employee))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "USER_NOT_FOUND"


def test_avatar_upload(client, employee, auth):
    r = client.post(
        "/api/users/me/avatar",
        headers=auth(employee),
        files={"file": ("me.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
    )
    assert r.status_code == 200
    assert r.json()["data"]["profile_image"].startswith("/uploads/avatars/user_")


def test_avatar_rejects_other_types(client, employee, auth):
    r = client.post(
        "/api/users/me/avatar",
        headers=auth(employee),
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 415
    assert r.json()["error"]["code"] == "UNSUPPORTED_MEDIA_TYPE"


def test_nested_skills_and_profile(client, employee, make_skill, auth):
    py = make_skill("Python")
    r = client.post(f"/api/users/{employee.id}/skills", headers=auth(employee),
                    json={"skill_id": py.id, "proficiency_level": 3})
    assert r.status_code == 201

    r = client.put(f"/api/users/{employee.id}/skills/{py.id}", headers=auth(employee),
                   json={"years_experience": 4})
    assert r.status_code == 200
    assert r.json()["data"]["years_experience"] == 4

    profile = client.get(f"/api/users/{employee.id}/profile", headers=auth(employee)).json()["data"]
    assert [s["skill"]["name"] for s in profile["skills"]] == ["Python"]
    assert profile["leaderboard"]["total_points"] == 35

    r = client.delete(f"/api/users/{employee.id}/skills/{py.id}", headers=auth(employee))
    assert r.status_code == 200
    assert client.get(f"/api/users/{employee.id}/skills", headers=auth(employee)).json()["data"] == []


def test_dashboard_self_or_staff(client, employee, make_user, manager, auth):
    r = client.get(f"/api/users/{employee.id}/dashboard", headers=auth(employee))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["enrollments"]["total"] == 0
    assert data["workload"] == {"active_assignments": 0, "availability_score": 100, "workload": "Available"}

    assert client.get(f"/api/users/{employee.id}/dashboard", headers=auth(manager)).status_code == 200

    other = make_user()
    r = client.get(f"/api/users/{employee.id}/dashboard", headers=auth(other))
    assert r.status_code == 403
