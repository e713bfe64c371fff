# perftrack/routes/admin.py
from fastapi import APIRouter, Depends, Query

from perftrack import aggregation as agg
from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import ArmCare, BlastMotion, ForceCMJ, HitTrax, Intended, Trackman
from perftrack.deps import get_docs, get_metrics
from perftrack.errors import NotFound
from perftrack.services.rows import count_rows, fetch_level_rows

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_user), Depends(require_role("ADMIN"))],
)

PROGRAM_COUNTS = {
    "athletePCount": "Pitching",
    "athleteHCount": "Hitting",
    "athletePHCount": "Pitching + Hitting",
    "athleteSCCount": "S + C",
    "athleteTACount": "Team Athlete",
}

DEFAULT_LEVEL = "High School"


@router.get("/dashboard")
def dashboard(docs: DocumentStore = Depends(get_docs), metrics: MetricsStore = Depends(get_metrics)):
    out = {"athleteCount": docs.athletes.count_documents({})}
    for key, program in PROGRAM_COUNTS.items():
        out[key] = docs.athletes.count_documents({"program_type": program})
    out.update({
        "coachCount": docs.coaches.count_documents({}),
        "pitchCount": count_rows(metrics, Trackman),
        "blastCount": count_rows(metrics, BlastMotion),
        "hitCount": count_rows(metrics, HitTrax),
        "armCount": count_rows(metrics, ArmCare),
        "intendedCount": count_rows(metrics, Intended),
        "cmjCount": count_rows(metrics, ForceCMJ),
    })
    return out


def _level_rows(metrics: MetricsStore, model, level: str, label: str) -> list[dict]:
    rows = fetch_level_rows(metrics, model, level)
    if not rows:
        raise NotFound(f"No {label} data found for level: {level}")
    return rows


@router.get("/dashboard/hittrax")
def hittrax_dashboard(level: str = Query(DEFAULT_LEVEL), metrics: MetricsStore = Depends(get_metrics)):
    rows = _level_rows(metrics, HitTrax, level, "HitTrax")
    return {
        "maxExitVelo": agg.overall_max(rows, "velo"),
        "maxDistance": agg.overall_max(rows, "dist"),
        "hardHitRate": agg.hard_hit_rate(agg.values(rows, "velo")),
        "sessionAverages": [
            {
                "sessionId": sid,
                "date": agg.day_key(group[0].get("date")),
                "avgExitVelo": agg.mean(agg.values(group, "velo")),
            }
            for sid, group in agg.group_by(rows, "session_id").items()
        ],
    }


@router.get("/dashboard/blast-motion")
def blast_dashboard(level: str = Query(DEFAULT_LEVEL), metrics: MetricsStore = Depends(get_metrics)):
    rows = _level_rows(metrics, BlastMotion, level, "BlastMotion")
    return {
        "maxBatSpeed": agg.overall_max(rows, "bat_speed"),
        "maxHandSpeed": agg.overall_max(rows, "peak_hand_speed"),
        "sessionAverages": [
            {
                "sessionId": sid,
                "date": agg.day_key(group[0].get("date")),
                "avgBatSpeed": agg.mean(agg.values(group, "bat_speed")),
                "avgHandSpeed": agg.mean(agg.values(group, "peak_hand_speed")),
            }
            for sid, group in agg.group_by(rows, "session_id").items()
        ],
    }


@router.get("/dashboard/trackman")
def trackman_dashboard(level: str = Query(DEFAULT_LEVEL), metrics: MetricsStore = Depends(get_metrics)):
    rows = _level_rows(metrics, Trackman, level, "Trackman")
    by_type = agg.group_by(rows, lambda r: r.get("pitch_type") or "Unknown")

    avg_pitch_speeds = []
    for ptype, group in by_type.items():
        for d in agg.average_by_date(group, "created_at", "pitch_release_speed"):
            avg_pitch_speeds.append({"date": d["date"], "pitchType": ptype, "avgSpeed": d["average"]})
    avg_pitch_speeds.sort(key=lambda r: r["date"])

    return {
        "pitchStats": [
            {"pitchType": ptype, "peakSpeed": agg.overall_max(group, "pitch_release_speed")}
            for ptype, group in by_type.items()
        ],
        "avgPitchSpeeds": avg_pitch_speeds,
    }
