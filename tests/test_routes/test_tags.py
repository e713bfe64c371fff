from bson import ObjectId


def _tag(client, headers, athlete_id, tech, name):
    res = client.post(f"/api/tags/{athlete_id}/{tech}", headers=headers, json={"name": name, "notes": f"{name} notes"})
    assert res.status_code == 201
    return res.json()["tag"]


def test_create_tag_requires_name_and_notes(client, coach_headers, athlete_id, docs):
    for body in ({"notes": "only notes"}, {"name": "only name"}, {"name": "  ", "notes": "x"}):
        res = client.post(f"/api/tags/{athlete_id}/blast", headers=coach_headers, json=body)
        assert res.status_code == 400
        assert res.json() == {"error": "Missing required fields: name and notes are required."}

    res = client.post("/api/tags", headers=coach_headers, json={"name": "x"})
    assert res.status_code == 400

    # nothing written
    assert docs.tags.count_documents({}) == 0
    assert docs.athletes.find_one({"_id": ObjectId(athlete_id)})["blast_tags"] == []


def test_athlete_tags_round_trip(client, coach_headers, athlete_id):
    tag = _tag(client, coach_headers, athlete_id, "trackman", "Arm drag")
    res = client.get(f"/api/tags/{athlete_id}/trackman", headers=coach_headers)
    assert res.status_code == 200
    assert [t["_id"] for t in res.json()["tags"]] == [tag["_id"]]
    assert res.json()["tags"][0]["tech"] == "trackman"


def test_invalid_tech(client, coach_headers, athlete_id):
    res = client.get(f"/api/tags/{athlete_id}/golf", headers=coach_headers)
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid tech: golf"}


def test_delete_removes_exactly_one_id(client, coach_headers, athlete_id, docs):
    keep = _tag(client, coach_headers, athlete_id, "blast", "Early release")
    drop = _tag(client, coach_headers, athlete_id, "blast", "Casting")
    other = _tag(client, coach_headers, athlete_id, "hittrax", "Pull side")
    before = docs.athletes.find_one({"_id": ObjectId(athlete_id)})

    res = client.delete(f"/api/tags/{athlete_id}/blast/{drop['_id']}", headers=coach_headers)
    assert res.status_code == 200
    assert "message" in res.json()

    after = docs.athletes.find_one({"_id": ObjectId(athlete_id)})
    assert after["blast_tags"] == [ObjectId(keep["_id"])]
    assert after["hit_tags"] == [ObjectId(other["_id"])]
    for field in ("track_tags", "arm_tags", "force_tags", "assessment_tags"):
        assert after[field] == before[field]
    # the tag itself stays in the library
    assert docs.tags.count_documents({}) == 3


def test_delete_for_missing_athlete(client, coach_headers):
    res = client.delete(f"/api/tags/{ObjectId()}/blast/{ObjectId()}", headers=coach_headers)
    assert res.status_code == 404


def test_attach_existing_tag_is_idempotent(client, coach_headers, athlete_id, docs):
    res = client.post("/api/tags", headers=coach_headers, json={"name": "Lead leg", "notes": "firm up"})
    assert res.status_code == 201
    tag_id = res.json()["tag"]["_id"]

    for _ in range(2):
        res = client.post(f"/api/tags/{athlete_id}/armcare", headers=coach_headers, json={"tagId": tag_id})
        assert res.status_code == 201
    assert docs.athletes.find_one({"_id": ObjectId(athlete_id)})["arm_tags"] == [ObjectId(tag_id)]


def test_automatic_tag_needs_metric(client, coach_headers):
    res = client.post("/api/tags", headers=coach_headers, json={"name": "Velo", "notes": "n", "automatic": True, "tech": "trackman"})
    assert res.status_code == 400

    res = client.post(
        "/api/tags",
        headers=coach_headers,
        json={"name": "Velo", "notes": "n", "automatic": True, "tech": "trackman", "metric": "pitch_release_speed", "greaterThan": 85},
    )
    assert res.status_code == 201
    assert res.json()["tag"]["greater_than"] == 85


def test_folders(client, coach_headers, docs):
    tag_id = client.post("/api/tags", headers=coach_headers, json={"name": "A", "notes": "n"}).json()["tag"]["_id"]
    f1 = client.post("/api/tags/folder", headers=coach_headers, json={"folderName": "Hitting"}).json()["folder"]
    f2 = client.post("/api/tags/folder", headers=coach_headers, json={"folderName": "Pitching"}).json()["folder"]

    res = client.post("/api/tags/folder/update", headers=coach_headers, json={"tagId": tag_id, "folderId": f1["_id"]})
    assert res.json()["folder"]["tags"] == [tag_id]

    # moving takes it out of the first folder
    res = client.post("/api/tags/folder/update", headers=coach_headers, json={"tagId": tag_id, "folderId": f2["_id"]})
    assert res.json()["folder"]["tags"] == [tag_id]
    assert docs.tag_folders.find_one({"_id": ObjectId(f1["_id"])})["tags"] == []

    res = client.post("/api/tags/folder/update", headers=coach_headers, json={"tagId": tag_id, "folderId": str(ObjectId())})
    assert res.status_code == 404

    res = client.get("/api/tags", headers=coach_headers)
    assert [f["name"] for f in res.json()["folders"]] == ["Hitting", "Pitching"]
    assert len(res.json()["tags"]) == 1


def test_get_and_delete_library_tag(client, coach_headers, athlete_id, docs):
    tag = _tag(client, coach_headers, athlete_id, "blast", "Casting")

    res = client.get(f"/api/tags/tag/{tag['_id']}", headers=coach_headers)
    assert res.json()["tag"]["name"] == "Casting"
    res = client.get(f"/api/tags/tag/blast/{tag['_id']}", headers=coach_headers)
    assert res.status_code == 200
    res = client.get(f"/api/tags/tag/hittrax/{tag['_id']}", headers=coach_headers)
    assert res.status_code == 404

    res = client.delete(f"/api/tags/tag/{tag['_id']}", headers=coach_headers)
    assert res.json() == {"message": "Tag deleted"}
    assert docs.athletes.find_one({"_id": ObjectId(athlete_id)})["blast_tags"] == []

    res = client.get(f"/api/tags/tag/{tag['_id']}", headers=coach_headers)
    assert res.status_code == 404
    assert res.json() == {"error": "Tag not found"}
