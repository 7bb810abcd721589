from datetime import datetime, timedelta, timezone

from companygrow.models.notification import Notification


def _seed(db, user, n=3, **kw):
    rows = [Notification(user_id=user.id, title=f"Note {i}", message="hello", type="system",
                         is_read=False, **kw) for i in range(n)]
    db.add_all(rows)
    db.commit()
    return rows


def test_unread_count_and_read_all(client, db, employee, auth):
    _seed(db, employee)
    h = auth(employee)
    assert client.get("/api/notifications/unread-count", headers=h).json()["data"]["count"] == 3

    r = client.put("/api/notifications/read-all", headers=h)
    assert r.json()["data"]["updated"] == 3
    assert client.get("/api/notifications/unread-count", headers=h).json()["data"]["count"] == 0


def test_mark_single_read_and_filter(client, db, employee, auth):
    rows = _seed(db, employee, 2)
    h = auth(employee)
    r = client.put(f"/api/notifications/{rows[0].id}/read", headers=h)
    assert r.json()["data"]["is_read"] is True

    unread = client.get("/api/notifications", headers=h, params={"unread_only": True}).json()["data"]
    assert [n["id"] for n in unread] == [rows[1].id]


def test_foreign_notification_is_not_found(client, db, employee, make_user, auth):
    other = make_user()
    row = _seed(db, other, 1)[0]
    for method in ("get", "delete"):
        r = getattr(client, method)(f"/api/notifications/{row.id}", headers=auth(employee))
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "NOTIFICATION_NOT_FOUND"


def test_bulk_create_by_staff(client, manager, employee, make_user, auth):
    other = make_user()
    payload = {"user_ids": [employee.id, other.id, employee.id], "title": "Town hall", "message": "Friday 5pm"}
    assert client.post("/api/notifications", headers=auth(employee), json=payload).status_code == 403

    r = client.post("/api/notifications", headers=auth(manager), json=payload)
    assert r.status_code == 201
    assert len(r.json()["data"]) == 2

    r = client.post("/api/notifications", headers=auth(manager),
                    json={**payload, "user_ids": [employee.id, 9999]})
    assert r.status_code == 404
    assert r.json()["error"]["field"] == "user_ids"


def test_cleanup_removes_only_old_read(client, db, admin, employee, auth):
    old = datetime.now(timezone.utc) - timedelta(days=60)
    old_read = _seed(db, employee, 1, created_at=old)[0]
    old_read.is_read = True
    _seed(db, employee, 1, created_at=old)
    _seed(db, employee, 1)
    db.commit()

    assert client.delete("/api/notifications/cleanup", headers=auth(employee)).status_code == 403
    r = client.delete("/api/notifications/cleanup", headers=auth(admin), params={"days": 30})
    assert r.json()["data"]["deleted"] == 1
    left = client.get("/api/notifications", headers=auth(employee)).json()["pagination"]["total"]
    assert left == 2
