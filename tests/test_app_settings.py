def test_settings_are_admin_only(client, manager, auth):
    assert client.get("/api/appSettings", headers=auth(manager)).status_code == 403
    r = client.put("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=auth(manager), json={"setting_value": "2"})
    assert r.status_code == 403


def test_upsert_get_delete(client, admin, auth):
    h = auth(admin)
    r = client.put("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=h,
                   json={"setting_value": "3", "description": "Open enrollments per user"})
    assert r.json()["message"] == "Setting created"

    r = client.put("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=h, json={"setting_value": "4"})
    assert r.json()["message"] == "Setting updated"
    data = client.get("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=h).json()["data"]
    assert data["setting_value"] == "4"
    assert data["description"] == "Open enrollments per user"

    assert [s["setting_key"] for s in client.get("/api/appSettings", headers=h).json()["data"]] \
        == ["MAX_COURSE_ENROLLMENTS"]

    assert client.delete("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=h).status_code == 200
    r = client.get("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=h)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "SETTING_NOT_FOUND"


def test_setting_drives_enrollment_limit(client, admin, employee, make_course, auth):
    client.put("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=auth(admin), json={"setting_value": "1"})
    first, second = make_course("A"), make_course("B")
    client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": first.id})
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": second.id})
    assert r.json()["error"]["code"] == "ENROLLMENT_LIMIT_REACHED"

    # un valor no numérico se ignora
    client.put("/api/appSettings/MAX_COURSE_ENROLLMENTS", headers=auth(admin), json={"setting_value": "many"})
    r = client.post("/api/courseEnrollments", headers=auth(employee), json={"course_id": second.id})
    assert r.status_code == 201
