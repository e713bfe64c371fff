from sqlalchemy import select

from perftrack.db.tables import WeightLog


def test_list_athletes_requires_u(client, coach_headers, athlete):
    res = client.get("/api/athletes", headers=coach_headers)
    assert res.status_code == 400
    assert res.json() == {"error": "Missing u param"}

    res = client.get("/api/athletes", params={"u": "org-1"}, headers=coach_headers)
    assert res.status_code == 200
    assert [a["first_name"] for a in res.json()["athletes"]] == ["Jordan"]


def test_add_athlete_with_login(client, coach_headers, docs):
    res = client.post(
        "/api/athletes",
        headers=coach_headers,
        json={"first_name": "Sam", "last_name": "Lee", "email": "Sam@Example.com", "level": "College", "password": "pw"},
    )
    assert res.status_code == 201
    created = res.json()["athlete"]
    assert created["email"] == "sam@example.com"
    assert created["blast_tags"] == []

    user = docs.users.find_one({"email": "sam@example.com"})
    assert user["role"] == "ATHLETE"
    assert user["object_id"] == created["_id"]

    # same email again
    res = client.post(
        "/api/athletes",
        headers=coach_headers,
        json={"first_name": "Sam", "last_name": "Lee", "email": "sam@example.com", "password": "pw"},
    )
    assert res.status_code == 409


def test_athlete_cannot_add_athletes(client, athlete_headers):
    res = client.post("/api/athletes", headers=athlete_headers, json={"first_name": "A", "last_name": "B", "email": "ab@x.io"})
    assert res.status_code == 403


def test_weight_update_logs_history(client, coach_headers, athlete_id, docs, metrics):
    res = client.put(f"/api/athlete/{athlete_id}/weight", headers=coach_headers, json={"weight": 180})
    assert res.status_code == 200
    res = client.put(f"/api/athlete/{athlete_id}/weight", headers=coach_headers, json={"weight": 185})
    assert res.json() == {"weight": 185}

    # document and relational store agree
    assert docs.athletes.find_one({"first_name": "Jordan"})["weight"] == 185
    with metrics.session_scope() as s:
        logs = s.scalars(select(WeightLog).where(WeightLog.athlete_id == athlete_id).order_by(WeightLog.id)).all()
        assert [w.weight for w in logs] == [180, 185]

    res = client.get(f"/api/athlete/{athlete_id}/weight/progress", headers=coach_headers)
    assert [w["weight"] for w in res.json()["weightLogs"]] == [180, 185]


def test_weight_must_be_positive(client, coach_headers, athlete_id):
    res = client.put(f"/api/athlete/{athlete_id}/weight", headers=coach_headers, json={"weight": 0})
    assert res.status_code == 400


def test_update_rejects_unknown_fields(client, coach_headers, athlete_id, docs):
    res = client.put(f"/api/athlete/{athlete_id}/update", headers=coach_headers, json={"_id": "x", "level": "Pro"})
    assert res.status_code == 400
    assert docs.athletes.find_one({"first_name": "Jordan"})["level"] == "High School"

    res = client.put(f"/api/athlete/{athlete_id}/update", headers=coach_headers, json={"level": "Pro"})
    assert res.status_code == 200
    assert res.json()["athlete"]["level"] == "Pro"


def test_get_athlete_bad_and_missing_ids(client, coach_headers):
    assert client.get("/api/athlete/not-an-id", headers=coach_headers).status_code == 400
    res = client.get("/api/athlete/65a000000000000000000001", headers=coach_headers)
    assert res.status_code == 404
    assert res.json() == {"error": "Athlete not found"}


def test_notes_visibility(client, coach_headers, athlete_id):
    for note in (
        {"coach_note": "Stay closed", "section": "trackman", "is_athlete": True},
        {"coach_note": "Watch the elbow", "section": "trackman"},
        {"coach_note": "Good day", "section": "blast", "is_athlete": True},
    ):
        res = client.put(f"/api/athlete/{athlete_id}/notes", headers=coach_headers, json={"note": note})
        assert res.json() == {"message": "Note saved!"}

    res = client.put(f"/api/athlete/{athlete_id}/notes", headers=coach_headers, json={})
    assert res.status_code == 400
    assert res.json() == {"error": "Missing Coaches Note"}

    res = client.get(f"/api/athlete/{athlete_id}", params={"section": "trackman", "isAthlete": "true"}, headers=coach_headers)
    assert [n["coach_note"] for n in res.json()["athlete"]["coaches_notes"]] == ["Stay closed"]

    res = client.get(f"/api/athlete/{athlete_id}", params={"section": "trackman"}, headers=coach_headers)
    assert len(res.json()["athlete"]["coaches_notes"]) == 2


def test_delete_athlete_cascades(client, admin_headers, athlete, athlete_id, docs):
    docs.teams.insert_one({"name": "Varsity", "players": [athlete["_id"]]})
    docs.goals.insert_one({"athlete": athlete["_id"], "tech": "blast"})
    docs.users.insert_one({"email": "jordan@example.com", "object_id": athlete_id, "role": "ATHLETE"})

    res = client.delete(f"/api/athlete/{athlete_id}", headers=admin_headers)
    assert res.status_code == 200
    assert docs.athletes.count_documents({}) == 0
    assert docs.teams.find_one({"name": "Varsity"})["players"] == []
    assert docs.goals.count_documents({}) == 0
    assert docs.users.count_documents({}) == 0


def test_manage_athletes_scoped_to_coach(client, coach, coach_headers, athlete, docs):
    docs.athletes.insert_one({"first_name": "Other", "last_name": "Kid"})
    docs.teams.insert_one({"name": "Varsity", "coach": coach["_id"], "players": [athlete["_id"]]})

    res = client.get("/api/manage-athletes", headers=coach_headers)
    assert [a["first_name"] for a in res.json()["athletes"]] == ["Jordan"]
