from bson import ObjectId

TEMPLATE = {
    "name": "Hip screen",
    "sections": [
        {
            "title": "Hips",
            "is_scored": True,
            "passing_score": 50,
            "fields": [
                {
                    "label": "Internal rotation",
                    "type": "number",
                    "client_id": "ir",
                    "is_scored": True,
                    "max_score": 10,
                    "passing_score": 5,
                    "score_ranges": [{"min": 0, "max": 29, "score": 2}, {"min": 30, "max": 45, "score": 10}],
                },
                {"label": "Notes", "client_id": "notes"},
            ],
        }
    ],
}


def _template(client, headers):
    res = client.post("/api/assessment/template", headers=headers, json=TEMPLATE)
    assert res.status_code == 201
    return res.json()["template"]


def test_template_crud(client, coach_headers):
    template = _template(client, coach_headers)
    assert template["available"] is True
    assert template["sections"][0]["fields"][0]["_id"]

    res = client.get("/api/assessment/template", headers=coach_headers)
    assert [t["name"] for t in res.json()["templates"]] == ["Hip screen"]

    res = client.patch(f"/api/assessment/template/{template['_id']}", headers=coach_headers, json={"available": False})
    assert res.json()["template"]["available"] is False

    res = client.patch(f"/api/assessment/template/{template['_id']}", headers=coach_headers, json={"available": False, "name": "x"})
    assert res.status_code == 400

    assert client.get(f"/api/assessment/template/{ObjectId()}", headers=coach_headers).status_code == 404


def test_template_requires_sections(client, coach_headers):
    res = client.post("/api/assessment/template", headers=coach_headers, json={"name": "Empty"})
    assert res.status_code == 400


def test_assessment_scored(client, coach_headers, athlete_id, docs):
    template = _template(client, coach_headers)
    res = client.post(
        "/api/assessment",
        headers=coach_headers,
        json={
            "athleteId": athlete_id,
            "templateId": template["_id"],
            "sections": [{"title": "Hips", "responses": {"ir": 35, "notes": "tight"}}],
        },
    )
    assert res.status_code == 201
    assessment = res.json()["assessment"]
    assert assessment["title"] == "Hip screen"
    assert docs.athletes.find_one({"_id": ObjectId(athlete_id)})["assessments"] == [ObjectId(assessment["_id"])]

    res = client.get(f"/api/assessment/{athlete_id}", headers=coach_headers)
    assert len(res.json()["assessments"]) == 1

    res = client.get(f"/api/assessment/{athlete_id}/{assessment['_id']}", headers=coach_headers)
    body = res.json()
    assert body["overall_score"]["percentage"] == 100.0
    assert body["sections"][0]["responses"][0]["score"]["score"] == 10
    assert body["template"]["name"] == "Hip screen"


def test_assessment_id_conflict(client, coach_headers, athlete_id, docs):
    template = _template(client, coach_headers)
    res = client.post(
        "/api/assessment",
        headers=coach_headers,
        json={"athleteId": athlete_id, "templateId": template["_id"], "sections": []},
    )
    other = ObjectId()
    res = client.get(f"/api/assessment/{other}/{res.json()['assessment']['_id']}", headers=coach_headers)
    assert res.status_code == 400
    assert res.json() == {"error": "ID conflict"}


def test_unavailable_template_rejected(client, coach_headers, athlete_id):
    template = _template(client, coach_headers)
    client.patch(f"/api/assessment/template/{template['_id']}", headers=coach_headers, json={"available": False})
    res = client.post(
        "/api/assessment",
        headers=coach_headers,
        json={"athleteId": athlete_id, "templateId": template["_id"], "sections": []},
    )
    assert res.status_code == 400
