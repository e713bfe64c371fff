# perftrack/routes/athlete_stats.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from perftrack import aggregation as agg
from perftrack.auth import get_current_user
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import ArmCare, BlastMotion, HitTrax, HittraxBlast, Intended, Trackman
from perftrack.deps import get_docs, get_metrics
from perftrack.services.lookups import get_athlete
from perftrack.services.rows import count_rows, fetch_rows, has_rows, model_for, numeric_column
from perftrack.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/athlete", tags=["athlete-stats"], dependencies=[Depends(get_current_user)])

# dashboard key -> athlete tag array
DASH_TAGS = {
    "hitTags": "hit_tags",
    "blastTags": "blast_tags",
    "trackTags": "track_tags",
    "armTags": "arm_tags",
    "forceTags": "force_tags",
    "assessmentTags": "assessment_tags",
}


@router.get("/{athlete_id}/hitting")
def hitting(athlete_id: str, metrics: MetricsStore = Depends(get_metrics)):
    hittrax = has_rows(metrics, HitTrax, athlete_id)
    blast = has_rows(metrics, BlastMotion, athlete_id)
    hittrax_blast = has_rows(metrics, HittraxBlast, athlete_id)
    return {
        "hittrax": hittrax,
        "blast": blast,
        "hittraxBlast": hittrax_blast,
        "hasNone": not (hittrax or blast or hittrax_blast),
    }


@router.get("/{athlete_id}/pitching")
def pitching(athlete_id: str, metrics: MetricsStore = Depends(get_metrics)):
    trackman = has_rows(metrics, Trackman, athlete_id)
    intended = has_rows(metrics, Intended, athlete_id)
    arm_care = has_rows(metrics, ArmCare, athlete_id)
    return {
        "trackman": trackman,
        "intended": intended,
        "armCare": arm_care,
        "noneExist": not (trackman or intended or arm_care),
    }


@router.get("/{athlete_id}/dash")
def dash(
    athlete_id: str,
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    athlete = get_athlete(docs, athlete_id)

    tag_ids = set()
    for field in DASH_TAGS.values():
        tag_ids.update(athlete.get(field) or [])
    tags = {t["_id"]: t for t in docs.tags.find({"_id": {"$in": list(tag_ids)}})}

    out = {
        "swingCount": count_rows(metrics, BlastMotion, athlete_id) + count_rows(metrics, HitTrax, athlete_id),
        "pitchCount": count_rows(metrics, Trackman, athlete_id) + count_rows(metrics, Intended, athlete_id),
    }
    for key, field in DASH_TAGS.items():
        # ids whose tag was deleted are skipped
        out[key] = [tags[t] for t in athlete.get(field) or [] if t in tags]
    out["goals"] = list(docs.goals.find({"athlete": athlete["_id"]}))
    return to_jsonable(out)


@router.get("/{athlete_id}/stats")
def stats(
    athlete_id: str,
    range_: Optional[str] = Query(None, alias="range"),
    metrics: MetricsStore = Depends(get_metrics),
):
    since = agg.range_start(range_)

    blast_rows = fetch_rows(metrics, BlastMotion, athlete_id, since=since)
    bat_by_day = agg.average_by_date(blast_rows, "date", "bat_speed")
    hand_by_day = {d["date"]: d["average"] for d in agg.average_by_date(blast_rows, "date", "peak_hand_speed")}
    blast = {
        "maxBatSpeed": agg.overall_max(blast_rows, "bat_speed"),
        "maxHandSpeed": agg.overall_max(blast_rows, "peak_hand_speed"),
        "sessionAverages": [
            {"date": d["date"], "avgBatSpeed": d["average"], "avgHandSpeed": hand_by_day.get(d["date"], 0)}
            for d in bat_by_day
        ],
    }

    hit_rows = fetch_rows(metrics, HitTrax, athlete_id, since=since)
    hittrax = {
        "maxExitVelo": agg.overall_max(hit_rows, "velo"),
        "maxDistance": agg.overall_max(hit_rows, "dist"),
        "hardHitAverage": agg.hard_hit_rate(agg.values(hit_rows, "velo")),
        "sessionAverages": [
            {"date": d["date"], "avgExitVelo": d["average"]}
            for d in agg.average_by_date(hit_rows, "date", "velo")
        ],
    }

    track_rows = fetch_rows(metrics, Trackman, athlete_id, since=since)
    by_type = agg.group_by(track_rows, lambda r: r.get("pitch_type") or "Unknown")
    pitch_stats = [
        {"pitchType": ptype, "peakSpeed": agg.overall_max(rows, "pitch_release_speed")}
        for ptype, rows in by_type.items()
    ]
    avg_pitch_speeds = []
    for ptype, rows in by_type.items():
        for d in agg.average_by_date(rows, "created_at", "pitch_release_speed"):
            avg_pitch_speeds.append({"date": d["date"], "pitchType": ptype, "avgSpeed": d["average"]})
    avg_pitch_speeds.sort(key=lambda r: r["date"])

    return {
        "blast": blast,
        "hittrax": hittrax,
        "trackman": {"pitchStats": pitch_stats, "avgPitchSpeeds": avg_pitch_speeds},
    }


def _by_session(rows: list[dict], field: str, date_field: str) -> list[dict]:
    out = []
    for session_id, group in agg.group_by(rows, "session_id").items():
        vals = agg.values(group, field)
        if not session_id or not vals:
            continue
        dates = [r.get(date_field) for r in group if r.get(date_field)]
        out.append({"sessionId": session_id, "x": min(dates) if dates else None, "y": agg.mean(vals)})
    out.sort(key=lambda r: r["sessionId"])
    return out


@router.get("/{athlete_id}/comparison")
def comparison(
    athlete_id: str,
    metric1: str = Query(...),
    tech1: str = Query(...),
    metric2: str = Query(...),
    tech2: str = Query(...),
    metrics: MetricsStore = Depends(get_metrics),
):
    out = {}
    for key, metric, tech in (("metric1", metric1, tech1), ("metric2", metric2, tech2)):
        model = model_for(tech)
        numeric_column(model, metric)
        date_field = "created_at" if hasattr(model, "created_at") else "date"
        rows = fetch_rows(metrics, model, athlete_id)
        out[key] = _by_session(rows, metric, date_field)
    return out
