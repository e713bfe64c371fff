import io

from sqlalchemy import select

from perftrack.db.tables import Trackman

TRACKMAN_CSV = (
    b"pitch_release_speed_imp,Pitch Type,Spin rate (rpm),Induced Vertical Break (in)\n"
    b"88.4,Fastball,2301,16.2\n"
    b"0,Fastball,2100,15.0\n"
    b"76.0,Slider,2500,2.1\n"
)


def _upload(client, headers, athlete_id, tech, content, **form):
    return client.post(
        f"/api/athlete/{athlete_id}/upload/{tech}",
        headers=headers,
        files={"file": ("export.csv", io.BytesIO(content), "text/csv")},
        data=form,
    )


def test_trackman_upload(client, coach_headers, athlete_id, metrics, docs):
    res = _upload(client, coach_headers, athlete_id, "trackman", TRACKMAN_CSV, sessionName="Pen 1")
    assert res.status_code == 201
    body = res.json()
    assert body["inserted"] == 2
    assert body["warnings"] == []

    with metrics.session_scope() as s:
        rows = s.scalars(select(Trackman).where(Trackman.session_id == body["sessionId"]).order_by(Trackman.id)).all()
        assert [r.pitch_type for r in rows] == ["Fastball", "Slider"]
        assert {r.session_name for r in rows} == {"Pen 1"}
        assert {r.play_level for r in rows} == {"High School"}

    assert docs.activity_logs.find_one({"action": "upload_ingested"})["metadata"]["tech"] == "trackman"


def test_upload_warns_on_unexpected_headers(client, coach_headers, athlete_id):
    res = _upload(client, coach_headers, athlete_id, "hittrax", b"Exit Velocity,Distance\n99,380\n")
    assert res.status_code == 201
    assert len(res.json()["warnings"]) == 1


def test_upload_invalid_tech(client, coach_headers, athlete_id):
    res = _upload(client, coach_headers, athlete_id, "rapsodo", TRACKMAN_CSV)
    assert res.status_code == 400


def test_upload_without_usable_rows(client, coach_headers, athlete_id):
    res = _upload(client, coach_headers, athlete_id, "trackman", b"pitch_release_speed_imp,Pitch Type\n0,Fastball\n")
    assert res.status_code == 400
    assert res.json() == {"error": "No valid data found in the uploaded file"}


def test_upload_empty_file(client, coach_headers, athlete_id):
    res = _upload(client, coach_headers, athlete_id, "trackman", b"")
    assert res.status_code == 400


def test_athlete_cannot_upload(client, athlete_headers, athlete_id):
    res = _upload(client, athlete_headers, athlete_id, "trackman", TRACKMAN_CSV)
    assert res.status_code == 403


def test_hittrax_blast_upload_feeds_report(client, coach_headers, athlete_id):
    csv_bytes = (
        b"Date,Exit Velocity,Bat Speed,Squared Up Rate\n"
        b"2024-05-02,92,68,80\n"
        b"2024-05-02,85,66,60\n"
        b"2024-05-09,,65,\n"
    )
    res = _upload(client, coach_headers, athlete_id, "hittrax-blast", csv_bytes)
    assert res.status_code == 201
    assert res.json()["inserted"] == 2

    body = client.get(f"/api/athlete/{athlete_id}/hitting", headers=coach_headers).json()
    assert body["hittraxBlast"] is True

    body = client.get(f"/api/athlete/{athlete_id}/reports/hittrax-blast", headers=coach_headers).json()
    assert body["avgSquaredUpRate"] == 70
    assert body["sessions"] == [{"date": "2024-05-02", "avgSquaredUpRate": 70}]
