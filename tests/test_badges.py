def _badge(client, headers, **kw):
    payload = {"name": "Team Player", "description": "Helped the team", "badge_type": "special",
               "token_reward": 15, "rarity": "rare", **kw}
    r = client.post("/api/badges", headers=headers, json=payload)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_create_badge_staff_only(client, employee, manager, auth):
    r = client.post("/api/badges", headers=auth(employee), json={"name": "X"})
    assert r.status_code == 403
    data = _badge(client, auth(manager))
    assert data["rarity"] == "rare"
    assert data["token_reward"] == 15


def test_badge_for_unknown_course(client, manager, auth):
    r = client.post("/api/badges", headers=auth(manager), json={"name": "X", "course_id": 404})
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "COURSE_NOT_FOUND"


def test_award_side_effects(client, manager, employee, auth, points_of):
    b = _badge(client, auth(manager))
    r = client.post("/api/badges/award", headers=auth(manager),
                    json={"user_id": employee.id, "badge_id": b["id"], "notes": "Great sprint"})
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["awarded_by"] == manager.id
    assert data["badge"]["name"] == "Team Player"

    assert points_of(employee.id) == [("badge_earned", 75)]
    wallet = client.get("/api/userTokens/me", headers=auth(employee)).json()["data"]
    assert wallet["balance"] == 15
    titles = [n["title"] for n in client.get("/api/notifications", headers=auth(employee)).json()["data"]]
    assert "Badge Earned!" in titles

    again = client.post("/api/badges/award", headers=auth(manager),
                        json={"user_id": employee.id, "badge_id": b["id"]})
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "BADGE_ALREADY_EARNED"


def test_award_unknown_badge(client, manager, employee, auth):
    r = client.post("/api/badges/award", headers=auth(manager), json={"user_id": employee.id, "badge_id": 77})
    assert r.json()["error"]["code"] == "BADGE_NOT_FOUND"


def test_catalog_rarity_and_ownership(client, manager, employee, admin, auth):
    b = _badge(client, auth(manager))
    _badge(client, auth(manager), name="Hidden", is_active=False)
    client.post("/api/badges/award", headers=auth(manager), json={"user_id": employee.id, "badge_id": b["id"]})

    mine = client.get("/api/badges", headers=auth(employee)).json()["data"]
    assert [x["name"] for x in mine] == ["Team Player"]
    assert mine[0]["earned_count"] == 1
    assert mine[0]["rarity_pct"] == 33.33
    assert mine[0]["owned"] is True

    assert client.get("/api/badges", headers=auth(admin)).json()["data"][0]["owned"] is False
    assert client.get("/api/badges").json()["data"][0]["owned"] is None


def test_user_badges_and_delete(client, manager, admin, employee, auth):
    b = _badge(client, auth(manager))
    client.post("/api/badges/award", headers=auth(manager), json={"user_id": employee.id, "badge_id": b["id"]})
    rows = client.get(f"/api/badges/user/{employee.id}", headers=auth(employee)).json()["data"]
    assert [r["badge_id"] for r in rows] == [b["id"]]

    assert client.delete(f"/api/badges/{b['id']}", headers=auth(manager)).status_code == 403
    assert client.delete(f"/api/badges/{b['id']}", headers=auth(admin)).status_code == 200
    assert client.get(f"/api/badges/user/{employee.id}", headers=auth(employee)).json()["data"] == []
