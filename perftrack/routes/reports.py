# perftrack/routes/reports.py
"""
Per-athlete report pages over the relational store.

Every report 404s when the athlete has no rows for that tech, and carries the
coach notes for its section (only the athlete-visible ones with ``isAthlete=true``).
"""
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query

from perftrack import aggregation as agg
from perftrack.auth import get_current_user
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import ArmCare, BlastMotion, HitTrax, HittraxBlast, Intended, Trackman
from perftrack.deps import get_docs, get_metrics
from perftrack.errors import NotFound
from perftrack.services.lookups import get_athlete, parse_bool, visible_notes
from perftrack.services.rows import fetch_rows
from perftrack.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/athlete", tags=["reports"], dependencies=[Depends(get_current_user)])

NO_DATA = "No data found for this athlete"


def _rows_or_404(metrics: MetricsStore, model, athlete_id: str, newest_first: bool = False) -> list[dict]:
    rows = fetch_rows(metrics, model, athlete_id, newest_first=newest_first)
    if not rows:
        raise NotFound(NO_DATA)
    return rows


def _notes(docs: DocumentStore, athlete_id: str, section: str, is_athlete: Optional[str]) -> list:
    athlete = get_athlete(docs, athlete_id, {"coaches_notes": 1})
    return to_jsonable(visible_notes(athlete, section, parse_bool(is_athlete)))


def _sessions(groups, date_field: str) -> list[dict]:
    return [
        {"sessionId": sid, "date": agg.day_key(rows[0].get(date_field))}
        for sid, rows in groups.items()
    ]


@router.get("/{athlete_id}/reports/trackman")
def trackman_report(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    rows = _rows_or_404(metrics, Trackman, athlete_id)
    typed = [r for r in rows if r.get("pitch_type") and r.get("pitch_release_speed")]

    peak_speeds = [
        {"pitchType": ptype, "peakSpeed": agg.overall_max(group, "pitch_release_speed")}
        for ptype, group in agg.group_by(typed, "pitch_type").items()
    ]

    # one point per day, one key per pitch type thrown that day
    by_day = {}
    for ptype, group in agg.group_by(typed, "pitch_type").items():
        for d in agg.average_by_date(group, "created_at", "pitch_release_speed"):
            by_day.setdefault(d["date"], {"date": d["date"]})[ptype] = d["average"]

    return {
        "peakSpeeds": peak_speeds,
        "avgPitchSpeeds": [by_day[d] for d in sorted(by_day)],
        "sessions": _sessions(agg.group_by(rows, "session_id"), "created_at"),
        "coachesNotes": _notes(docs, athlete_id, "trackman", isAthlete),
    }


@router.get("/{athlete_id}/reports/hittrax")
def hittrax_report(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    rows = _rows_or_404(metrics, HitTrax, athlete_id, newest_first=True)
    groups = agg.group_by(rows, "session_id")

    session_averages = []
    for sid, group in groups.items():
        session_averages.append({
            "sessionId": sid,
            "sessionName": group[0].get("session_name"),
            "date": agg.day_key(group[0].get("date")),
            "avgExitVelo": agg.mean(agg.values(group, "velo")),
            "maxExitVelo": agg.overall_max(group, "velo"),
            "maxDistance": agg.overall_max(group, "dist"),
        })

    return {
        "maxExitVelo": agg.overall_max(rows, "velo"),
        "maxDistance": agg.overall_max(rows, "dist"),
        "hardHitAverage": agg.hard_hit_rate(agg.values(rows, "velo")),
        "sessionAverages": session_averages,
        "sessions": _sessions(groups, "date"),
        "coachesNotes": _notes(docs, athlete_id, "hittrax", isAthlete),
    }


@router.get("/{athlete_id}/reports/blast-motion")
def blast_report(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    rows = _rows_or_404(metrics, BlastMotion, athlete_id, newest_first=True)
    groups = agg.group_by(rows, "session_id")

    session_averages = []
    for sid, group in groups.items():
        session_averages.append({
            "sessionId": sid,
            "sessionName": group[0].get("session_name"),
            "date": agg.day_key(group[0].get("date")),
            "avgBatSpeed": agg.mean(agg.values(group, "bat_speed")),
            "avgHandSpeed": agg.mean(agg.values(group, "peak_hand_speed")),
            "avgRotationalAcceleration": agg.mean(agg.values(group, "rotational_acceleration")),
            "avgPower": agg.mean(agg.values(group, "power")),
            "avgEarlyConnection": agg.mean(agg.values(group, "early_connection")),
            "avgConnectionAtImpacts": agg.mean(agg.values(group, "connection_at_impact")),
            "fastSwingRates": agg.fast_swing_rates(agg.values(group, "bat_speed")),
        })

    return {
        "maxBatSpeed": agg.overall_max(rows, "bat_speed"),
        "maxHandSpeed": agg.overall_max(rows, "peak_hand_speed"),
        "maxRotationalAcceleration": agg.overall_max(rows, "rotational_acceleration"),
        "maxPower": agg.overall_max(rows, "power"),
        "sessionAverages": session_averages,
        "sessions": _sessions(groups, "date"),
        "coachesNotes": _notes(docs, athlete_id, "blast", isAthlete),
    }


@router.get("/{athlete_id}/reports/hittrax-blast")
def hittrax_blast_report(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    rows = fetch_rows(metrics, HittraxBlast, athlete_id)
    if not rows:
        raise NotFound("No swings found")

    by_day = agg.group_by(rows, lambda r: agg.day_key(r.get("date")))
    return {
        "avgSquaredUpRate": agg.mean(agg.values(rows, "squared_up_rate")),
        "sessions": [
            {"date": day, "avgSquaredUpRate": agg.mean(agg.values(group, "squared_up_rate"))}
            for day, group in by_day.items()
            if day is not None
        ],
        "coachesNotes": _notes(docs, athlete_id, "hittrax", isAthlete),
    }


@router.get("/{athlete_id}/reports/arm-care")
def arm_care_report(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    rows = _rows_or_404(metrics, ArmCare, athlete_id, newest_first=True)
    latest = rows[0]
    groups = agg.group_by(rows, "session_id")

    session_averages = [
        {
            "sessionId": sid,
            "date": agg.day_key(group[0].get("exam_date")),
            "armScore": agg.mean(agg.values(group, "arm_score")),
        }
        for sid, group in groups.items()
    ]

    return {
        "bodyWeight": latest.get("weight_lbs") or 0,
        "maxInternal": agg.overall_max(rows, "irtarm_strength"),
        "maxExternal": agg.overall_max(rows, "ertarm_strength"),
        "maxScaption": agg.overall_max(rows, "starm_strength"),
        "internalRom": agg.overall_max(rows, "irtarm_rom"),
        "externalRom": agg.overall_max(rows, "ertarm_rom"),
        "maxShoulderFlexion": agg.overall_max(rows, "ftarm_rom"),
        "latestInternal": latest.get("irtarm_strength") or 0,
        "latestExternal": latest.get("ertarm_strength") or 0,
        "latestScaption": latest.get("starm_strength") or 0,
        "latestInternalRom": latest.get("irtarm_rom") or 0,
        "latestExternalRom": latest.get("ertarm_rom") or 0,
        "latestShoulderFlexion": latest.get("ftarm_rom") or 0,
        "sessionAverages": session_averages,
        "sessions": [{"sessionId": s["sessionId"], "date": s["date"]} for s in session_averages],
        "coachesNotes": _notes(docs, athlete_id, "armcare", isAthlete),
    }


def _miss_averages(pitches: list[dict]) -> list[dict]:
    """Average miss per pitch type, in inches (coordinates are in feet)."""
    out = []
    for ptype, group in agg.group_by(pitches, "pitch_type").items():
        dx = [(p.get("actual_x") or 0) - (p.get("intended_x") or 0) for p in group]
        dy = [(p.get("actual_y") or 0) - (p.get("intended_y") or 0) for p in group]
        miss = [math.hypot(x, y) for x, y in zip(dx, dy)]
        out.append({
            "pitchType": ptype,
            "avgMiss": round(agg.mean(miss) * 12, 2),
            "avgHorz": round(agg.mean(dx) * 12, 2),
            "avgVert": round(agg.mean(dy) * 12, 2),
        })
    return out


@router.get("/{athlete_id}/reports/intended-zone")
def intended_report(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    rows = _rows_or_404(metrics, Intended, athlete_id)
    groups = agg.group_by(rows, "session_id")

    intended_data = [
        {
            "sessionId": sid,
            "sessionName": group[0].get("session_name"),
            "date": agg.day_key(group[0].get("created_at")),
            "pitches": _miss_averages(group),
        }
        for sid, group in groups.items()
    ]
    return {
        "intendedData": intended_data,
        "sessions": _sessions(groups, "created_at"),
        "globalAverages": _miss_averages(rows),
        "coachesNotes": _notes(docs, athlete_id, "intended", isAthlete),
    }
