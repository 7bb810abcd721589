def _review(client, headers, employee_id, **kw):
    payload = {"employee_id": employee_id, "overall_rating": 4, "communication_rating": 5,
               "review_period_start": "2026-01-01T00:00:00", "review_period_end": "2026-06-30T00:00:00", **kw}
    r = client.post("/api/performanceReviews", headers=headers, json=payload)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _status(client, headers, review_id, status):
    return client.put(f"/api/performanceReviews/{review_id}/status", headers=headers, json={"status": status})


def test_create_review(client, manager, employee, auth):
    data = _review(client, auth(manager), employee.id)
    assert data["status"] == "draft"
    assert data["reviewer_id"] == manager.id

    r = client.post("/api/performanceReviews", headers=auth(employee), json={"employee_id": employee.id})
    assert r.status_code == 403
    r = client.post("/api/performanceReviews", headers=auth(manager), json={"employee_id": 999})
    assert r.json()["error"]["code"] == "EMPLOYEE_NOT_FOUND"


def test_rating_and_period_validation(client, manager, employee, auth):
    r = client.post("/api/performanceReviews", headers=auth(manager),
                    json={"employee_id": employee.id, "overall_rating": 6})
    assert r.status_code == 400
    r = client.post("/api/performanceReviews", headers=auth(manager), json={
        "employee_id": employee.id,
        "review_period_start": "2026-06-01T00:00:00", "review_period_end": "2026-01-01T00:00:00",
    })
    assert r.status_code == 400

    rid = _review(client, auth(manager), employee.id)["id"]
    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(manager),
                   json={"review_period_end": "2025-12-01T00:00:00"})
    assert r.json()["error"]["code"] == "INVALID_DATE_RANGE"


def test_employee_only_comments(client, manager, employee, make_user, auth):
    rid = _review(client, auth(manager), employee.id)["id"]

    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(employee),
                   json={"employee_comments": "Thanks!", "overall_rating": 5})
    data = r.json()["data"]
    assert data["employee_comments"] == "Thanks!"
    assert data["overall_rating"] == 4

    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(employee), json={"overall_rating": 5})
    assert r.json()["error"]["code"] == "NO_UPDATE_FIELDS"

    # el staff no puede escribir comentarios del empleado
    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(manager),
                   json={"employee_comments": "forged", "achievements": "Shipped v2"})
    assert r.json()["data"]["employee_comments"] == "Thanks!"
    assert r.json()["data"]["achievements"] == "Shipped v2"

    stranger = make_user()
    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(stranger), json={"employee_comments": "x"})
    assert r.status_code == 403
    assert client.get(f"/api/performanceReviews/{rid}", headers=auth(stranger)).status_code == 403


def test_workflow_points_and_lock(client, manager, admin, employee, auth, points_of):
    rid = _review(client, auth(manager), employee.id)["id"]

    assert _status(client, auth(manager), rid, "approved").json()["error"]["code"] == "INVALID_STATUS_TRANSITION"
    assert _status(client, auth(manager), rid, "submitted").status_code == 200
    assert _status(client, auth(manager), rid, "approved").json()["data"]["status"] == "approved"
    assert points_of(manager.id) == [("peer_review", 40)]

    titles = [n["title"] for n in client.get("/api/notifications", headers=auth(employee)).json()["data"]]
    assert titles.count("Performance Review Update") == 2

    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(manager), json={"overall_rating": 1})
    assert r.json()["error"]["code"] == "REVIEW_LOCKED"
    # el empleado aún puede comentar una evaluación aprobada
    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(employee), json={"employee_comments": "ok"})
    assert r.status_code == 200

    r = client.delete(f"/api/performanceReviews/{rid}", headers=auth(admin))
    assert r.json()["error"]["code"] == "REVIEW_NOT_DRAFT"


def test_delete_draft_requires_admin(client, manager, admin, employee, auth):
    rid = _review(client, auth(manager), employee.id)["id"]
    assert client.delete(f"/api/performanceReviews/{rid}", headers=auth(manager)).status_code == 403
    assert client.delete(f"/api/performanceReviews/{rid}", headers=auth(admin)).status_code == 200
    r = client.get(f"/api/performanceReviews/{rid}", headers=auth(admin))
    assert r.json()["error"]["code"] == "REVIEW_NOT_FOUND"


def test_summary_uses_approved_reviews(client, manager, employee, auth):
    for overall in (4, 5):
        rid = _review(client, auth(manager), employee.id, overall_rating=overall)["id"]
        _status(client, auth(manager), rid, "submitted")
        _status(client, auth(manager), rid, "approved")
    _review(client, auth(manager), employee.id, overall_rating=1)

    data = client.get(f"/api/performanceReviews/employee/{employee.id}/summary",
                      headers=auth(employee)).json()["data"]
    assert data["approved_reviews"] == 2
    assert data["averages"]["overall_rating"] == 4.5
    assert data["averages"]["teamwork_rating"] is None
    assert data["latest_review"]["overall_rating"] == 5

    mine = client.get("/api/performanceReviews/me", headers=auth(employee)).json()["data"]
    assert len(mine) == 3
    listed = client.get("/api/performanceReviews", headers=auth(manager), params={"status": "draft"}).json()
    assert listed["pagination"]["total"] == 1


def test_staff_under_review_only_comments(client, admin, manager, auth):
    rid = _review(client, auth(admin), manager.id, overall_rating=2)["id"]

    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(manager), json={"overall_rating": 5})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "NO_UPDATE_FIELDS"

    r = client.put(f"/api/performanceReviews/{rid}", headers=auth(manager),
                   json={"overall_rating": 5, "employee_comments": "Fair assessment"})
    data = r.json()["data"]
    assert data["overall_rating"] == 2
    assert data["employee_comments"] == "Fair assessment"

    r = _status(client, auth(manager), rid, "submitted")
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED_UPDATE"
    assert _status(client, auth(admin), rid, "submitted").status_code == 200


def test_staff_cannot_review_themselves(client, manager, auth):
    r = client.post("/api/performanceReviews", headers=auth(manager), json={"employee_id": manager.id})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED_REVIEW"
