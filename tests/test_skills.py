def test_skill_crud_and_unique_name(client, manager, admin, employee, auth):
    r = client.post("/api/skills", headers=auth(manager), json={"name": "Docker", "category": "DevOps"})
    assert r.status_code == 201
    skill_id = r.json()["data"]["id"]

    dup = client.post("/api/skills", headers=auth(manager), json={"name": "Docker", "category": "Other"})
    assert dup.status_code == 409
    assert dup.json()["error"]["code"] == "SKILL_EXISTS"

    assert client.post("/api/skills", headers=auth(employee),
                       json={"name": "Go", "category": "Programming"}).status_code == 403

    listing = client.get("/api/skills", params={"category": "DevOps"})
    assert [s["name"] for s in listing.json()["data"]] == ["Docker"]
    assert client.get("/api/skills/categories").json()["data"] == ["DevOps"]

    assert client.delete(f"/api/skills/{skill_id}", headers=auth(manager)).status_code == 403
    assert client.delete(f"/api/skills/{skill_id}", headers=auth(admin)).status_code == 200
    assert client.get(f"/api/skills/{skill_id}").status_code == 404


def test_user_skill_points(client, employee, make_skill, auth, points_of):
    sql = make_skill("SQL", "Database")
    r = client.post("/api/userSkills", headers=auth(employee), json={"skill_id": sql.id, "proficiency_level": 2})
    assert r.status_code == 201
    us_id = r.json()["data"]["id"]

    r = client.put(f"/api/userSkills/{us_id}", headers=auth(employee), json={"proficiency_level": 5})
    assert r.status_code == 200

    r = client.delete(f"/api/userSkills/{us_id}", headers=auth(employee))
    assert r.status_code == 200

    assert points_of(employee.id) == [
        ("skill_added", 30),
        ("skill_improvement", 45),
        ("skill_mastery", 100),
        ("skill_removed", -10),
    ]


def test_level_five_skill_gets_mastery_bonus(client, employee, make_skill, auth, points_of):
    k8s = make_skill("Kubernetes", "DevOps")
    client.post("/api/userSkills", headers=auth(employee), json={"skill_id": k8s.id, "proficiency_level": 5})
    assert points_of(employee.id) == [("skill_added", 45), ("skill_mastery", 100)]


def test_duplicate_user_skill(client, employee, make_skill, auth):
    git = make_skill("Git", "Version Control")
    client.post("/api/userSkills", headers=auth(employee), json={"skill_id": git.id})
    r = client.post("/api/userSkills", headers=auth(employee), json={"skill_id": git.id})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "SKILL_ALREADY_ADDED"


def test_only_staff_verify_and_assign(client, employee, manager, make_user, make_skill, auth, points_of):
    aws = make_skill("AWS", "Cloud")
    other = make_user()

    r = client.post("/api/userSkills", headers=auth(employee), json={"skill_id": aws.id, "user_id": other.id})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED_SKILL_ASSIGNMENT"

    us_id = client.post("/api/userSkills", headers=auth(employee),
                        json={"skill_id": aws.id}).json()["data"]["id"]
    r = client.put(f"/api/userSkills/{us_id}", headers=auth(employee), json={"is_verified": True})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED_VERIFICATION"

    r = client.put(f"/api/userSkills/{us_id}", headers=auth(manager), json={"is_verified": True})
    assert r.status_code == 200
    assert r.json()["data"]["is_verified"] is True
    assert ("skill_verified", 30) in points_of(employee.id)

    notes = client.get("/api/notifications", headers=auth(employee)).json()["data"]
    assert any(n["title"] == "Skill Verified" for n in notes)


def test_staff_lists_all_user_skills(client, employee, manager, make_user, make_skill, auth):
    js = make_skill("JavaScript")
    other = make_user()
    client.post("/api/userSkills", headers=auth(employee), json={"skill_id": js.id})
    client.post("/api/userSkills", headers=auth(other), json={"skill_id": js.id})

    mine = client.get("/api/userSkills", headers=auth(employee)).json()["data"]
    assert [s["user_id"] for s in mine] == [employee.id]

    filtered = client.get("/api/userSkills", params={"user_id": other.id}, headers=auth(manager)).json()["data"]
    assert [s["user_id"] for s in filtered] == [other.id]
    assert len(client.get("/api/userSkills", headers=auth(manager)).json()["data"]) == 2
