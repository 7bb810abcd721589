from companygrow.models.payment import Payment
from companygrow.models.user_skill import UserSkill


def test_dashboard_overview_and_me(client, db, manager, employee, make_course, make_skill, auth):
    c1, c2 = make_course("One"), make_course("Two")
    skill = make_skill("SQL")
    db.add(UserSkill(user_id=employee.id, skill_id=skill.id, proficiency_level=2))
    db.commit()
    for c in (c1, c2):
        client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": c.id})
    eid = client.get("/api/courseEnrollments/user/me", headers=auth(employee)).json()["data"][0]["id"]
    client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee), json={"progress_percentage": 100})

    data = client.get("/api/analytics/dashboard", headers=auth(employee)).json()["data"]
    assert data["overview"]["total_enrollments"] == 2
    assert data["overview"]["completion_rate"] == 50
    assert data["overview"]["total_courses"] == 2
    me = data["me"]
    assert (me["enrollments"], me["completed_courses"], me["skills"]) == (2, 1, 1)
    # 25 + 25 inscripciones, 25 inicio, 25+50+75 hitos, 150 completado
    assert me["total_points"] == 375
    assert me["ranking_position"] == 1


def test_user_and_project_stats_placeholder_for_employees(client, employee, manager, admin, auth):
    data = client.get("/api/analytics/users", headers=auth(employee)).json()["data"]
    assert data["total_users"] == "N/A"
    assert "message" in data
    assert client.get("/api/analytics/projects", headers=auth(employee)).json()["data"]["total_projects"] == "N/A"

    data = client.get("/api/analytics/users", headers=auth(manager)).json()["data"]
    assert data["total_users"] == 3
    assert data["by_role"] == {"admin": 1, "employee": 1, "manager": 1}
    assert data["by_department"] == {"Engineering": 2, "IT": 1}


def test_skill_distribution(client, db, employee, make_user, make_skill, auth):
    py, go = make_skill("Python"), make_skill("Go")
    other = make_user()
    db.add_all([
        UserSkill(user_id=employee.id, skill_id=py.id, proficiency_level=4),
        UserSkill(user_id=other.id, skill_id=py.id, proficiency_level=3),
    ])
    db.commit()
    rows = client.get("/api/analytics/skills", headers=auth(employee)).json()["data"]["distribution"]
    assert [(r["skill"], r["user_count"], r["avg_proficiency"]) for r in rows] == [("Python", 2, 3.5), ("Go", 0, 0)]


def test_payment_and_token_stats_admin_only(client, db, manager, admin, employee, auth):
    db.add_all([
        Payment(user_id=employee.id, amount=20, currency="USD", status="succeeded", payment_type="token_purchase"),
        Payment(user_id=employee.id, amount=5, currency="USD", status="failed", payment_type="token_purchase"),
    ])
    db.commit()

    r = client.get("/api/analytics/payments", headers=auth(manager))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "ADMIN_REQUIRED"

    data = client.get("/api/analytics/payments", headers=auth(admin)).json()["data"]
    assert data["total_payments"] == 2
    assert data["total_amount"] == 20.0
    assert data["by_status"] == {"failed": 1, "succeeded": 1}

    client.post("/api/userTokens/earn", headers=auth(admin), json={"user_id": employee.id, "amount": 40})
    client.post("/api/userTokens/spend", headers=auth(employee), json={"amount": 15})
    data = client.get("/api/analytics/tokens", headers=auth(admin)).json()["data"]
    assert (data["total_earned"], data["total_spent"], data["circulating"]) == (40, 15, 25)
