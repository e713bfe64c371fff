from bson import ObjectId


def test_admin_adds_and_deletes_coach(client, admin_headers, docs):
    res = client.post(
        "/api/coaches",
        headers=admin_headers,
        json={"first_name": "Pat", "last_name": "Quinn", "email": "pat@example.com", "password": "pw"},
    )
    assert res.status_code == 201
    coach_id = res.json()["coach"]["_id"]
    assert docs.users.find_one({"email": "pat@example.com"})["object_id"] == coach_id

    res = client.post(
        "/api/coaches",
        headers=admin_headers,
        json={"first_name": "Pat", "last_name": "Quinn", "email": "pat@example.com", "password": "pw"},
    )
    assert res.status_code == 409

    docs.groups.insert_one({"name": "Bullpen", "head_coach": [ObjectId(coach_id)], "assistants": [], "athletes": []})
    res = client.get(f"/api/coaches/{coach_id}", headers=admin_headers)
    assert [g["name"] for g in res.json()["groups"]] == ["Bullpen"]

    res = client.delete(f"/api/coaches/{coach_id}", headers=admin_headers)
    assert res.status_code == 200
    assert docs.coaches.count_documents({}) == 0
    assert docs.users.count_documents({}) == 0
    assert docs.groups.find_one({"name": "Bullpen"})["head_coach"] == []


def test_coach_cannot_add_coach(client, coach_headers):
    res = client.post(
        "/api/coaches",
        headers=coach_headers,
        json={"first_name": "A", "last_name": "B", "email": "ab@example.com", "password": "pw"},
    )
    assert res.status_code == 403


def test_list_and_missing_coach(client, coach, coach_headers):
    res = client.get("/api/coaches", headers=coach_headers)
    assert [c["first_name"] for c in res.json()["coaches"]] == ["Casey"]
    assert client.get(f"/api/coaches/{ObjectId()}", headers=coach_headers).status_code == 404
