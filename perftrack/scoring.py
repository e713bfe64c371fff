# perftrack/scoring.py
"""Assessment scoring against the template the assessment was filled from."""
from __future__ import annotations

from typing import Optional


def _pct(score: float, max_score: float) -> float:
    return round(score / max_score * 100, 1) if max_score else 0.0


def field_score(field: dict, value) -> Optional[dict]:
    if not field.get("is_scored") or field.get("type") != "number":
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None

    hit = next(
        (r for r in field.get("score_ranges") or [] if r.get("min", 0) <= num <= r.get("max", 0)),
        None,
    )
    score = hit.get("score", 0) if hit else 0
    max_score = field.get("max_score") or 0
    return {
        "score": score,
        "max_score": max_score,
        "weight": field.get("weight") or 1,
        "percentage": _pct(score, max_score),
        "passed": score >= (field.get("passing_score") or 0),
    }


def _find_field(section: Optional[dict], field_id: str) -> Optional[dict]:
    if not section:
        return None
    for f in section.get("fields") or []:
        if str(f.get("_id", "")) == field_id or f.get("client_id") == field_id:
            return f
    return None


def section_score(section: dict, scored: list[dict]) -> Optional[dict]:
    if not section.get("is_scored"):
        return None
    total = max_total = weights = 0.0
    all_passed = True
    for fs in scored:
        total += fs["score"] * fs["weight"]
        max_total += fs["max_score"] * fs["weight"]
        weights += fs["weight"]
        if not fs["passed"]:
            all_passed = False
    if weights == 0:
        return None

    score = total / weights
    max_score = max_total / weights
    percentage = _pct(score, max_score)
    return {
        "score": round(score, 1),
        "max_score": round(max_score, 1),
        "percentage": percentage,
        "passed": all_passed and percentage >= (section.get("passing_score") or 0),
    }


def score_assessment(assessment: dict, template: dict) -> dict:
    """
    Pair each assessment section with the template section at the same index
    and score every numeric field. Returns the display sections plus an
    overall score weighted by section weight (None when nothing is scored).
    """
    tsections = template.get("sections") or []
    sections = []
    total = max_total = weights = 0.0
    all_passed = True

    for i, asec in enumerate(assessment.get("sections") or []):
        tsec = tsections[i] if i < len(tsections) else None
        responses = []
        scored = []
        for field_id, value in (asec.get("responses") or {}).items():
            field = _find_field(tsec, field_id)
            fs = field_score(field, value) if field else None
            if fs:
                scored.append(fs)
            responses.append({
                "field_id": (field or {}).get("client_id") or field_id,
                "label": field["label"] if field else field_id,
                "type": field.get("type", "text") if field else "text",
                "value": value,
                "score": fs,
            })

        sscore = section_score(tsec, scored) if tsec else None
        sections.append({
            "title": asec.get("title"),
            "responses": responses,
            "score": sscore,
            "is_scored": bool(tsec and tsec.get("is_scored")),
        })

        if sscore:
            w = tsec.get("weight") or 1
            total += sscore["score"] * w
            max_total += sscore["max_score"] * w
            weights += w
            if not sscore["passed"]:
                all_passed = False

    overall = None
    if weights > 0:
        overall = {
            "score": round(total / weights, 1),
            "max_score": round(max_total / weights, 1),
            "percentage": _pct(total, max_total),
            "passed": all_passed,
        }
    return {"sections": sections, "graphs": template.get("graphs") or [], "overall_score": overall}
