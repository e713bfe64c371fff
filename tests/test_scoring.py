from perftrack.scoring import field_score, score_assessment


def _template():
    return {
        "name": "Mobility",
        "graphs": [{"type": "bar"}],
        "sections": [
            {
                "title": "Hips",
                "is_scored": True,
                "weight": 1,
                "passing_score": 50,
                "fields": [
                    {
                        "_id": "f1",
                        "label": "Internal rotation",
                        "type": "number",
                        "is_scored": True,
                        "max_score": 10,
                        "weight": 1,
                        "passing_score": 5,
                        "score_ranges": [
                            {"min": 0, "max": 29, "score": 2},
                            {"min": 30, "max": 45, "score": 10},
                        ],
                    },
                    {"_id": "f2", "label": "Comment", "type": "text"},
                ],
            },
            {"title": "Notes", "is_scored": False, "fields": [{"_id": "f3", "label": "Free text"}]},
        ],
    }


def test_field_score_range_hit():
    field = _template()["sections"][0]["fields"][0]
    fs = field_score(field, "40")
    assert fs["score"] == 10
    assert fs["percentage"] == 100.0
    assert fs["passed"] is True


def test_field_score_outside_ranges_scores_zero():
    field = _template()["sections"][0]["fields"][0]
    fs = field_score(field, 90)
    assert fs["score"] == 0
    assert fs["passed"] is False


def test_field_score_ignores_text_and_junk():
    field = _template()["sections"][0]["fields"][0]
    assert field_score(field, "n/a") is None
    assert field_score({"type": "text", "is_scored": True}, "5") is None


def test_score_assessment():
    assessment = {
        "sections": [
            {"title": "Hips", "responses": {"f1": 35, "f2": "tight left side"}},
            {"title": "Notes", "responses": {"f3": "ok"}},
        ]
    }
    out = score_assessment(assessment, _template())

    hips, notes = out["sections"]
    assert hips["score"]["percentage"] == 100.0
    assert hips["score"]["passed"] is True
    assert [r["label"] for r in hips["responses"]] == ["Internal rotation", "Comment"]
    assert notes["score"] is None
    assert notes["is_scored"] is False

    assert out["overall_score"]["percentage"] == 100.0
    assert out["graphs"] == [{"type": "bar"}]


def test_score_assessment_nothing_scored():
    out = score_assessment({"sections": [{"title": "Notes", "responses": {"f3": "ok"}}]}, _template())
    assert out["overall_score"] is None
