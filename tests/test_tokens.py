def test_wallet_created_on_demand(client, employee, auth):
    data = client.get("/api/userTokens/me", headers=auth(employee)).json()["data"]
    assert data["user_id"] == employee.id
    assert (data["balance"], data["lifetime_earned"], data["lifetime_spent"]) == (0, 0, 0)


def test_earn_and_spend(client, manager, employee, auth):
    r = client.post("/api/userTokens/earn", headers=auth(manager),
                    json={"user_id": employee.id, "amount": 100, "description": "hackathon winner"})
    assert r.status_code == 201
    body = r.json()["data"]
    assert body["transaction"]["balance_after"] == 100
    assert body["wallet"]["lifetime_earned"] == 100

    r = client.post("/api/userTokens/spend", headers=auth(employee), json={"amount": 30})
    assert r.status_code == 201
    wallet = r.json()["data"]["wallet"]
    assert (wallet["balance"], wallet["lifetime_spent"]) == (70, 30)

    r = client.post("/api/userTokens/spend", headers=auth(employee), json={"amount": 71})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INSUFFICIENT_TOKENS"
    assert client.get("/api/userTokens/me", headers=auth(employee)).json()["data"]["balance"] == 70


def test_earn_requires_staff_and_positive_amount(client, manager, employee, auth):
    r = client.post("/api/userTokens/earn", headers=auth(employee), json={"user_id": employee.id, "amount": 5})
    assert r.status_code == 403
    r = client.post("/api/userTokens/earn", headers=auth(manager), json={"user_id": employee.id, "amount": 0})
    assert r.status_code == 400
    r = client.post("/api/userTokens/earn", headers=auth(manager), json={"user_id": 999, "amount": 5})
    assert r.json()["error"]["code"] == "USER_NOT_FOUND"


def test_transactions_are_scoped(client, manager, employee, make_user, auth):
    other = make_user()
    for uid in (employee.id, other.id):
        client.post("/api/userTokens/earn", headers=auth(manager), json={"user_id": uid, "amount": 10})

    mine = client.get("/api/tokenTransactions", headers=auth(employee)).json()["data"]
    assert {t["user_id"] for t in mine} == {employee.id}

    # el filtro user_id solo aplica al staff
    r = client.get("/api/tokenTransactions", headers=auth(employee), params={"user_id": other.id})
    assert {t["user_id"] for t in r.json()["data"]} == {employee.id}

    everything = client.get("/api/tokenTransactions", headers=auth(manager)).json()
    assert everything["pagination"]["total"] == 2

    foreign = client.get("/api/tokenTransactions", headers=auth(manager),
                         params={"user_id": other.id}).json()["data"][0]
    r = client.get(f"/api/tokenTransactions/{foreign['id']}", headers=auth(employee))
    assert r.status_code == 403
    assert client.get("/api/tokenTransactions/999", headers=auth(employee)).json()["error"]["code"] \
        == "TRANSACTION_NOT_FOUND"


def test_other_wallet_needs_staff(client, manager, employee, make_user, auth):
    other = make_user()
    assert client.get(f"/api/userTokens/{other.id}", headers=auth(employee)).status_code == 403
    assert client.get(f"/api/userTokens/{other.id}", headers=auth(manager)).status_code == 200
    assert client.get("/api/userTokens", headers=auth(employee)).status_code == 403
