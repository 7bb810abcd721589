from datetime import date, timedelta


def _award(client, headers, user_id, points, points_type="manual_bonus"):
    r = client.post("/api/leaderboard/award", headers=headers,
                    json={"user_id": user_id, "points_earned": points, "points_type": points_type})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_award_requires_staff(client, employee, auth):
    r = client.post("/api/leaderboard/award", headers=auth(employee),
                    json={"user_id": employee.id, "points_earned": 10, "points_type": "x"})
    assert r.status_code == 403


def test_ranking_order_and_ties(client, manager, employee, make_user, auth):
    a, b = make_user(), make_user()
    _award(client, auth(manager), b.id, 300)
    _award(client, auth(manager), employee.id, 100)
    _award(client, auth(manager), a.id, 100)

    r = client.get("/api/leaderboard", headers=auth(employee))
    body = r.json()
    assert body["period"] == "all"
    ranking = [(row["rank"], row["user"]["id"], row["points"]) for row in body["data"]]
    # empate: gana el user_id menor
    assert ranking == [(1, b.id, 300), (2, employee.id, 100), (3, a.id, 100)]

    monthly = client.get("/api/leaderboard", headers=auth(employee), params={"period": "monthly"}).json()
    assert monthly["data"][0]["user"]["id"] == b.id


def test_invalid_period(client, employee, auth):
    r = client.get("/api/leaderboard", headers=auth(employee), params={"period": "weekly"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "INVALID_PERIOD"
    assert err["field"] == "period"


def test_user_position(client, manager, employee, make_user, auth):
    other = make_user()
    _award(client, auth(manager), other.id, 500)
    _award(client, auth(manager), employee.id, 200)

    data = client.get(f"/api/leaderboard/user/{employee.id}", headers=auth(employee)).json()["data"]
    assert data["rank"] == 2
    assert data["total_points"] == 200
    assert data["total_participants"] == 2
    assert data["current_streak"] == 1

    assert client.get(f"/api/leaderboard/user/{other.id}", headers=auth(employee)).status_code == 403
    r = client.get(f"/api/leaderboard/user/{manager.id}", headers=auth(manager))
    assert r.json()["error"]["code"] == "USER_STATS_NOT_FOUND"


def test_department_board(client, manager, make_user, auth):
    eng = make_user(department="Engineering")
    sales = make_user(department="Sales")
    _award(client, auth(manager), eng.id, 50)
    _award(client, auth(manager), sales.id, 80)

    rows = client.get("/api/leaderboard/department/Engineering", headers=auth(manager)).json()["data"]
    assert [r["user"]["id"] for r in rows] == [eng.id]


def test_achievement_unlock_and_bonus(client, admin, manager, employee, auth, points_of):
    r = client.post("/api/leaderboard/achievements", headers=auth(admin), json={
        "name": "Century", "achievement_type": "points_milestone", "criteria_value": 100, "points_reward": 25,
    })
    assert r.status_code == 201
    client.post("/api/leaderboard/achievements", headers=auth(admin), json={
        "name": "Thousand", "achievement_type": "points_milestone", "criteria_value": 1000,
    })
    assert client.post("/api/leaderboard/achievements", headers=auth(manager), json={
        "name": "Nope", "achievement_type": "streak", "criteria_value": 3,
    }).status_code == 403

    _award(client, auth(manager), employee.id, 120)
    _award(client, auth(manager), employee.id, 5)
    assert points_of(employee.id) == [("manual_bonus", 120), ("achievement_bonus", 25), ("manual_bonus", 5)]

    data = client.get(f"/api/leaderboard/user/{employee.id}/achievements", headers=auth(employee)).json()["data"]
    assert [a["name"] for a in data["unlocked"]] == ["Century"]
    assert data["unlocked"][0]["unlocked_at"] is not None
    assert [a["name"] for a in data["locked"]] == ["Thousand"]
    assert data["progress"] == {"unlocked_count": 1, "total_count": 2, "completion_percentage": 50.0}

    stats = client.get("/api/leaderboard/stats", headers=auth(employee)).json()["data"]
    assert stats["overview"]["total_points_awarded"] == 150
    assert stats["top_performer"]["user_id"] == employee.id
    assert stats["popular_achievements"] == [{"name": "Century", "unlock_count": 1}]


def test_activity_feed(client, manager, employee, auth):
    _award(client, auth(manager), employee.id, 10, "first")
    _award(client, auth(manager), employee.id, 20, "second")
    rows = client.get("/api/leaderboard/activity", headers=auth(employee), params={"limit": 1}).json()["data"]
    assert [r["points_type"] for r in rows] == ["second"]


def test_seasons(client, admin, employee, auth):
    today = date.today()
    assert client.get("/api/leaderboard/seasons/current", headers=auth(employee)).json()["error"]["code"] \
        == "SEASON_NOT_FOUND"

    payload = {"name": "Q Season", "start_date": str(today - timedelta(days=10)),
               "end_date": str(today + timedelta(days=10)), "is_active": True}
    assert client.post("/api/leaderboard/seasons", headers=auth(employee), json=payload).status_code == 403
    assert client.post("/api/leaderboard/seasons", headers=auth(admin), json=payload).status_code == 201
    client.post("/api/leaderboard/seasons", headers=auth(admin), json={
        "name": "Past", "start_date": "2020-01-01", "end_date": "2020-03-31", "is_active": True,
    })

    current = client.get("/api/leaderboard/seasons/current", headers=auth(employee)).json()["data"]
    assert current["name"] == "Q Season"
    assert len(client.get("/api/leaderboard/seasons", headers=auth(employee)).json()["data"]) == 2

    r = client.post("/api/leaderboard/seasons", headers=auth(admin),
                    json={**payload, "end_date": str(today - timedelta(days=30))})
    assert r.status_code == 400
