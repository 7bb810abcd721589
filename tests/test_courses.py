from companygrow.models.app_setting import AppSetting
from companygrow.models.badge import Badge


def test_create_course_staff_only(client, manager, employee, auth):
    payload = {"title": "Advanced React", "category": "Frontend", "difficulty_level": "advanced", "price": 99.5}
    assert client.post("/api/courses", headers=auth(employee), json=payload).status_code == 403

    r = client.post("/api/courses", headers=auth(manager), json=payload)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["created_by"] == manager.id
    assert data["price"] == 99.5


def test_create_course_validation(client, manager, auth):
    r = client.post("/api/courses", headers=auth(manager),
                    json={"title": "X", "category": "Y", "difficulty_level": "expert"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_hides_inactive_for_anonymous(client, manager, make_course, auth):
    make_course("Visible")
    make_course("Hidden", is_active=False)

    titles = [c["title"] for c in client.get("/api/courses").json()["data"]]
    assert titles == ["Visible"]

    staff_titles = {c["title"] for c in client.get("/api/courses", headers=auth(manager)).json()["data"]}
    assert staff_titles == {"Visible", "Hidden"}


def test_list_search_sort_and_paginate(client, make_course):
    make_course("Zeta Kubernetes", price=10)
    make_course("Alpha Docker", price=30)
    make_course("Beta Docker", price=20)

    r = client.get("/api/courses", params={"search": "docker", "sort": "title"})
    assert [c["title"] for c in r.json()["data"]] == ["Alpha Docker", "Beta Docker"]

    r = client.get("/api/courses", params={"sort": "price", "limit": 2, "page": 2})
    body = r.json()
    assert [c["title"] for c in body["data"]] == ["Alpha Docker"]
    assert body["pagination"]["total"] == 3


def test_popular_and_categories(client, make_course, employee, make_user, auth):
    a = make_course("A", category="Cloud")
    b = make_course("B", category="Design")
    other = make_user()
    client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": b.id})
    client.post("/api/courseEnrollments", headers=auth(other), json={"course_id": b.id})
    client.post("/api/courseEnrollments", headers=auth(other), json={"course_id": a.id})

    popular = client.get("/api/courses/popular").json()["data"]
    assert [(c["title"], c["enrollment_count"]) for c in popular] == [("B", 2), ("A", 1)]
    assert client.get("/api/courses/categories").json()["data"] == ["Cloud", "Design"]


def test_get_course_with_enrollment(client, employee, make_course, auth):
    c = make_course()
    client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": c.id})

    data = client.get(f"/api/courses/{c.id}", params={"include_enrollment": True},
                      headers=auth(employee)).json()["data"]
    assert data["enrollment_count"] == 1
    assert data["enrollment"]["status"] == "enrolled"


def test_toggle_status_and_delete(client, manager, admin, employee, make_course, auth):
    c = make_course()
    r = client.patch(f"/api/courses/{c.id}/status", headers=auth(manager))
    assert r.json()["data"]["is_active"] is False
    assert client.get(f"/api/courses/{c.id}").status_code == 404

    client.patch(f"/api/courses/{c.id}/status", headers=auth(manager))
    client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": c.id})
    r = client.delete(f"/api/courses/{c.id}", headers=auth(admin))
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "COURSE_HAS_ENROLLMENTS"


# ---- Inscripciones ----

def test_enroll_awards_points_and_notifies(client, employee, make_course, auth, points_of):
    c = make_course("Node.js Backend")
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": c.id})
    assert r.status_code == 201
    assert r.json()["data"]["status"] == "enrolled"
    assert points_of(employee.id) == [("course_enrollment", 25)]

    notes = client.get("/api/notifications", headers=auth(employee)).json()["data"]
    assert notes[0]["title"] == "Course Enrollment Successful"


def test_enroll_errors(client, employee, make_user, make_course, auth):
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": 999})
    assert r.json()["error"]["code"] == "COURSE_NOT_FOUND"

    inactive = make_course("Old", is_active=False)
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": inactive.id})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "COURSE_INACTIVE"

    c = make_course()
    client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": c.id})
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": c.id})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "ALREADY_ENROLLED"

    other = make_user()
    r = client.post("/api/courseEnrollments", headers=auth(employee),
                    json={"course_id": c.id, "user_id": other.id})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED_ENROLLMENT"


def test_staff_enrolls_others(client, manager, employee, make_course, auth):
    c = make_course()
    r = client.post("/api/courseEnrollments", headers=auth(manager),
                    json={"course_id": c.id, "user_id": employee.id})
    assert r.status_code == 201
    assert r.json()["data"]["user_id"] == employee.id


def test_enrollment_limit_setting(client, db, employee, make_course, auth):
    db.add(AppSetting(setting_key="MAX_COURSE_ENROLLMENTS", setting_value="1"))
    db.commit()
    first, second = make_course("One"), make_course("Two")
    assert client.post("/api/courseEnrollments", headers=auth(employee),
                       json={"course_id": first.id}).status_code == 201
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": second.id})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "ENROLLMENT_LIMIT_REACHED"


def _enroll(client, user, course, auth):
    return client.post("/api/courseEnrollments", headers=auth(user), json={"course_id": course.id}).json()["data"]["id"]


def test_progress_points_and_milestones(client, employee, make_course, auth, points_of):
    c = make_course()
    eid = _enroll(client, employee, c, auth)

    r = client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee),
                   json={"progress_percentage": 55})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "in_progress"
    assert data["start_date"] is not None

    # 55 -> 80 cruza solo el hito de 75
    client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee),
               json={"progress_percentage": 80})

    assert points_of(employee.id) == [
        ("course_enrollment", 25),
        ("course_started", 25),
        ("course_progress", 25),
        ("course_progress", 50),
        ("course_progress", 75),
    ]


def test_completion_awards_badges_once(client, db, employee, make_course, auth, points_of):
    c = make_course()
    db.add_all([
        Badge(name="Graduate", description="", badge_type="course_completion", course_id=c.id,
              token_reward=20, is_active=True),
        Badge(name="Top Scorer", description="", badge_type="course_completion", criteria="score>=90",
              token_reward=50, is_active=True),
        Badge(name="Other course", description="", badge_type="skill", token_reward=5, is_active=True),
    ])
    db.commit()
    eid = _enroll(client, employee, c, auth)

    r = client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee),
                   json={"progress_percentage": 100, "final_score": 85})
    assert r.status_code == 200
    body = r.json()
    assert body["data"]["status"] == "completed"
    assert body["data"]["completion_date"] is not None
    assert [b["name"] for b in body["badges_awarded"]] == ["Graduate"]

    # volver a marcar como completado no repite puntos ni badges
    again = client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee),
                       json={"status": "completed", "final_score": 95})
    assert again.json()["badges_awarded"] == []

    types = [t for t, _ in points_of(employee.id)]
    assert types.count("course_completion") == 1
    assert types.count("badge_earned") == 1

    wallet = client.get("/api/userTokens/me", headers=auth(employee)).json()["data"]
    assert wallet["balance"] == 20


def test_status_completed_forces_full_progress(client, employee, make_course, auth):
    c = make_course()
    eid = _enroll(client, employee, c, auth)
    r = client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee),
                   json={"status": "completed"})
    assert r.json()["data"]["progress_percentage"] == 100


def test_progress_validation_and_ownership(client, employee, make_user, make_course, auth):
    c = make_course()
    eid = _enroll(client, employee, c, auth)
    r = client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(employee),
                   json={"progress_percentage": 150})
    assert r.status_code == 400

    other = make_user()
    r = client.put(f"/api/courseEnrollments/{eid}/progress", headers=auth(other),
                   json={"progress_percentage": 10})
    assert r.status_code == 403


def test_unenroll_rules(client, employee, make_course, auth):
    c1, c2 = make_course("One"), make_course("Two")
    e1, e2 = _enroll(client, employee, c1, auth), _enroll(client, employee, c2, auth)

    assert client.delete(f"/api/courseEnrollments/{e1}", headers=auth(employee)).status_code == 200

    client.put(f"/api/courseEnrollments/{e2}/progress", headers=auth(employee), json={"progress_percentage": 100})
    r = client.delete(f"/api/courseEnrollments/{e2}", headers=auth(employee))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "CANNOT_UNENROLL_COMPLETED"

    mine = client.get("/api/courseEnrollments/user/me", headers=auth(employee)).json()["data"]
    assert [e["id"] for e in mine] == [e2]


# ---- Skills de cursos y recomendaciones ----

def test_course_skills_link(client, manager, employee, make_course, make_skill, auth):
    c, s = make_course(), make_skill("Python")
    payload = {"course_id": c.id, "skill_id": s.id, "skill_level": 3}
    assert client.post("/api/courseSkills", headers=auth(employee), json=payload).status_code == 403
    r = client.post("/api/courseSkills", headers=auth(manager), json=payload)
    assert r.status_code == 201
    r = client.post("/api/courseSkills", headers=auth(manager), json=payload)
    assert r.json()["error"]["code"] == "SKILL_ALREADY_LINKED"

    rows = client.get(f"/api/courseSkills/course/{c.id}", headers=auth(employee)).json()["data"]
    assert [(x["skill"]["name"], x["skill_level"]) for x in rows] == [("Python", 3)]
    detail = client.get(f"/api/courses/{c.id}").json()["data"]
    assert [x["skill_id"] for x in detail["skills"]] == [s.id]


def test_recommended_courses_target_gaps(client, db, manager, employee, make_course, make_skill, auth):
    from companygrow.models.course_skill import CourseSkill
    from companygrow.models.project import Project
    from companygrow.models.project_skill import ProjectSkill

    k8s, excel = make_skill("Kubernetes"), make_skill("Excel")
    project = Project(name="Platform", status="active")
    db.add(project)
    db.commit()
    db.add(ProjectSkill(project_id=project.id, skill_id=k8s.id, required_level=3, is_mandatory=True))
    cloud, office, plain = make_course("Cloud Native"), make_course("Office"), make_course("Plain")
    db.add_all([
        CourseSkill(course_id=cloud.id, skill_id=k8s.id, skill_level=2),
        CourseSkill(course_id=office.id, skill_id=excel.id, skill_level=4),
    ])
    db.commit()

    recs = client.get("/api/courses/recommended", headers=auth(employee)).json()["data"]
    assert [r["course"]["title"] for r in recs] == ["Cloud Native"]
    # min(2, 3) + 1 por ser obligatoria
    assert recs[0]["relevance"] == 3
    assert recs[0]["addresses_skills"] == ["Kubernetes"]


def test_recommended_falls_back_to_popular(client, employee, make_user, make_course, auth):
    quiet, busy = make_course("Quiet"), make_course("Busy")
    client.post("/api/courseEnrollments", headers=auth(make_user()), json={"course_id": busy.id})

    recs = client.get("/api/courses/recommended", headers=auth(employee)).json()["data"]
    assert [r["course"]["title"] for r in recs] == ["Busy", "Quiet"]
    assert {r["relevance"] for r in recs} == {0}


def test_recompleting_course_pays_once(client, employee, make_course, auth, points_of):
    c = make_course()
    eid = _enroll(client, employee, c, auth)
    url = f"/api/courseEnrollments/{eid}/progress"

    first = client.put(url, headers=auth(employee), json={"progress_percentage": 100}).json()["data"]
    client.put(url, headers=auth(employee), json={"status": "in_progress", "progress_percentage": 10})
    again = client.put(url, headers=auth(employee), json={"progress_percentage": 100}).json()["data"]

    assert again["status"] == "completed"
    assert again["completion_date"] == first["completion_date"]
    types = [t for t, _ in points_of(employee.id)]
    assert types.count("course_completion") == 1
    assert types.count("course_progress") == 3


def test_lowering_progress_reopens_course(client, employee, make_course, auth):
    c = make_course()
    eid = _enroll(client, employee, c, auth)
    url = f"/api/courseEnrollments/{eid}/progress"
    client.put(url, headers=auth(employee), json={"progress_percentage": 100})

    data = client.put(url, headers=auth(employee), json={"progress_percentage": 40}).json()["data"]
    assert (data["status"], data["progress_percentage"]) == ("in_progress", 40)
    assert data["completion_date"] is not None
