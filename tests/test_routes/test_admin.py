from datetime import datetime

from perftrack.db.tables import BlastMotion, HitTrax, Trackman


def test_dashboard_counts(client, admin_headers, athlete, athlete_id, coach, docs, metrics):
    docs.athletes.insert_one({"first_name": "H", "last_name": "Itter", "program_type": "Hitting"})
    with metrics.session_scope() as s:
        s.add(Trackman(athlete_id=athlete_id, session_id="t1", pitch_release_speed=80))
        s.add(BlastMotion(athlete_id=athlete_id, session_id="b1", bat_speed=60))

    body = client.get("/api/admin/dashboard", headers=admin_headers).json()
    assert body["athleteCount"] == 2
    assert body["athletePCount"] == 1
    assert body["athleteHCount"] == 1
    assert body["athletePHCount"] == 0
    assert body["coachCount"] == 1
    assert body["pitchCount"] == 1
    assert body["blastCount"] == 1
    assert body["hitCount"] == 0
    assert body["cmjCount"] == 0


def test_coach_cannot_see_dashboard(client, coach_headers):
    assert client.get("/api/admin/dashboard", headers=coach_headers).status_code == 403


def test_hittrax_dashboard_by_level(client, admin_headers, athlete_id, metrics):
    with metrics.session_scope() as s:
        s.add_all([
            HitTrax(athlete_id=athlete_id, session_id="h1", play_level="High School", velo=97, dist=360,
                    date=datetime(2024, 5, 1)),
            HitTrax(athlete_id=athlete_id, session_id="h1", play_level="High School", velo=80, dist=250,
                    date=datetime(2024, 5, 1)),
            HitTrax(athlete_id=athlete_id, session_id="h2", play_level="College", velo=105, dist=410,
                    date=datetime(2024, 5, 2)),
        ])

    res = client.get("/api/admin/dashboard/hittrax", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {
        "maxExitVelo": 97,
        "maxDistance": 360,
        "hardHitRate": 50.0,
        "sessionAverages": [{"sessionId": "h1", "date": "2024-05-01", "avgExitVelo": 88.5}],
    }

    body = client.get("/api/admin/dashboard/hittrax", params={"level": "College"}, headers=admin_headers).json()
    assert body["maxExitVelo"] == 105


def test_blast_dashboard_session_averages(client, admin_headers, athlete_id, metrics):
    with metrics.session_scope() as s:
        s.add_all([
            BlastMotion(athlete_id=athlete_id, session_id="b1", play_level="High School", bat_speed=62,
                        peak_hand_speed=20, date=datetime(2024, 4, 1)),
            BlastMotion(athlete_id=athlete_id, session_id="b2", play_level="High School", bat_speed=70,
                        peak_hand_speed=24, date=datetime(2024, 5, 1)),
            BlastMotion(athlete_id=athlete_id, session_id="b2", play_level="High School", bat_speed=66,
                        peak_hand_speed=22, date=datetime(2024, 5, 1)),
        ])

    body = client.get("/api/admin/dashboard/blast-motion", headers=admin_headers).json()
    assert body["maxBatSpeed"] == 70
    assert body["maxHandSpeed"] == 24
    # newest session first
    assert body["sessionAverages"] == [
        {"sessionId": "b2", "date": "2024-05-01", "avgBatSpeed": 68, "avgHandSpeed": 23},
        {"sessionId": "b1", "date": "2024-04-01", "avgBatSpeed": 62, "avgHandSpeed": 20},
    ]


def test_trackman_dashboard_and_missing_level(client, admin_headers, athlete_id, metrics):
    with metrics.session_scope() as s:
        s.add_all([
            Trackman(athlete_id=athlete_id, session_id="t1", play_level="High School", pitch_type="Fastball",
                     pitch_release_speed=84, created_at=datetime(2024, 5, 1)),
            Trackman(athlete_id=athlete_id, session_id="t1", play_level="High School", pitch_type="Fastball",
                     pitch_release_speed=86, created_at=datetime(2024, 5, 1)),
            Trackman(athlete_id=athlete_id, session_id="t1", play_level="High School", pitch_release_speed=72,
                     created_at=datetime(2024, 5, 1)),
        ])

    body = client.get("/api/admin/dashboard/trackman", headers=admin_headers).json()
    assert {p["pitchType"]: p["peakSpeed"] for p in body["pitchStats"]} == {"Fastball": 86, "Unknown": 72}
    assert {"date": "2024-05-01", "pitchType": "Fastball", "avgSpeed": 85} in body["avgPitchSpeeds"]

    res = client.get("/api/admin/dashboard/trackman", params={"level": "Pro"}, headers=admin_headers)
    assert res.status_code == 404
    assert res.json() == {"error": "No Trackman data found for level: Pro"}
