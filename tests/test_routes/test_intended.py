def _pitch(ptype, ix, iy, ax, ay):
    return {
        "pitchType": ptype,
        "intended": {"x": ix, "y": iy},
        "actual": {"x": ax, "y": ay},
        "distance": {"inches": 6.0, "percent": 12.5},
    }


def test_intended_session_round_trip(client, coach_headers, athlete_id):
    pitches = [
        _pitch("Fastball", 0.0, 2.5, 0.5, 2.5),
        _pitch("Fastball", 0.0, 2.5, 0.0, 2.0),
        _pitch("Slider", 0.5, 2.0, 0.5, 2.0),
    ]
    res = client.post(
        "/api/intended-zone",
        headers=coach_headers,
        json={"athleteId": athlete_id, "sessionName": "Bullpen 1", "pitches": pitches},
    )
    assert res.status_code == 201
    session_id = res.json()["sessionId"]

    res = client.get(f"/api/intended-zone/session/{session_id}", headers=coach_headers)
    assert res.status_code == 200
    data = res.json()["intendedData"]
    assert [p["pitch_type"] for p in data] == ["Fastball", "Fastball", "Slider"]
    assert [p["actual_x"] for p in data] == [0.5, 0.0, 0.5]
    assert {p["session_name"] for p in data} == {"Bullpen 1"}

    # 6 inches right and 6 inches low average to 6 inches of miss
    res = client.get(f"/api/athlete/{athlete_id}/reports/intended-zone", headers=coach_headers)
    fastball = next(p for p in res.json()["globalAverages"] if p["pitchType"] == "Fastball")
    assert fastball == {"pitchType": "Fastball", "avgMiss": 6.0, "avgHorz": 3.0, "avgVert": -3.0}


def test_intended_requires_pitches(client, coach_headers, athlete_id):
    res = client.post("/api/intended-zone", headers=coach_headers, json={"athleteId": athlete_id, "pitches": []})
    assert res.status_code == 400


def test_intended_unknown_athlete(client, coach_headers):
    res = client.post(
        "/api/intended-zone",
        headers=coach_headers,
        json={"athleteId": "65a000000000000000000001", "pitches": [_pitch("Fastball", 0, 0, 0, 0)]},
    )
    assert res.status_code == 404


def test_intended_session_missing(client, coach_headers):
    res = client.get("/api/intended-zone/session/nope", headers=coach_headers)
    assert res.status_code == 404


def test_intended_updates_goal(client, coach_headers, athlete_id, docs):
    client.post(
        f"/api/athlete/{athlete_id}/goals",
        headers=coach_headers,
        json={"goal_name": "Miss", "tech": "intended", "metric_to_track": "Miss Distance", "goal_value": 4, "avg_max": "avg"},
    )
    client.post(
        "/api/intended-zone",
        headers=coach_headers,
        json={"athleteId": athlete_id, "pitches": [_pitch("Fastball", 0, 0, 0, 0)]},
    )
    goal = docs.goals.find_one({"goal_name": "Miss"})
    assert goal["current_value"] == 6.0
    assert goal["length"] == 1
