# perftrack/routes/sessions.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import update

from perftrack import aggregation as agg
from perftrack.auth import get_current_user
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import BlastMotion, HitTrax, Intended, Trackman
from perftrack.deps import get_metrics
from perftrack.errors import BadRequest, NotFound
from perftrack.schemas.sessions import SessionRename
from perftrack.services.rows import fetch_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sessions"], dependencies=[Depends(get_current_user)])

RENAMEABLE = {
    "blast": BlastMotion,
    "trackman": Trackman,
    "hittrax": HitTrax,
    "intended": Intended,
}


@router.get("/trackman/session/{session_id}")
def trackman_session(session_id: str, metrics: MetricsStore = Depends(get_metrics)):
    pitches = fetch_session(metrics, Trackman, session_id)
    if not pitches:
        raise NotFound("No pitches found for this session.")

    by_type = {}
    for p in pitches:
        d = by_type.setdefault(p.get("pitch_type") or "Unknown", {
            "speeds": [],
            "spin_rates": [],
            "horizontal_breaks": [],
            "vertical_breaks": [],
            "timestamps": [],
        })
        if p.get("pitch_release_speed"):
            d["speeds"].append(p["pitch_release_speed"])
        if p.get("spin_rate"):
            d["spin_rates"].append(p["spin_rate"])
        if p.get("horizontal_break"):
            d["horizontal_breaks"].append(p["horizontal_break"])
        if p.get("induced_vertical_break"):
            d["vertical_breaks"].append(p["induced_vertical_break"])
        if p.get("created_at"):
            d["timestamps"].append(p["created_at"])
    return {"sessionName": pitches[0].get("session_name"), "dataByPitchType": by_type}


@router.get("/blast-motion/session/{session_id}")
def blast_session(session_id: str, metrics: MetricsStore = Depends(get_metrics)):
    rows = fetch_session(metrics, BlastMotion, session_id)
    if not rows:
        raise NotFound("No swings found for the given sessionId")
    swings = [{"batSpeed": r.get("bat_speed"), "handSpeed": r.get("peak_hand_speed")} for r in rows]
    return {
        "sessionName": rows[0].get("session_name"),
        "swings": swings,
        "maxBatSpeed": agg.overall_max(rows, "bat_speed"),
        "maxHandSpeed": agg.overall_max(rows, "peak_hand_speed"),
    }


@router.get("/hittrax/session/{session_id}")
def hittrax_session(session_id: str, metrics: MetricsStore = Depends(get_metrics)):
    rows = fetch_session(metrics, HitTrax, session_id)
    if not rows:
        raise NotFound("No hits found for the given sessionId")
    hits = [r for r in rows if r.get("velo") and r.get("dist")]
    if not hits:
        raise NotFound("No valid hits found for the given sessionId")
    return {
        "sessionName": rows[0].get("session_name"),
        "hits": [{"velo": h["velo"], "dist": h["dist"], "la": h.get("la")} for h in hits],
        "maxExitVelo": agg.overall_max(hits, "velo"),
        "maxDistance": agg.overall_max(hits, "dist"),
        "avgLaunchAngle": agg.mean(agg.values(hits, "la")),
    }


@router.put("/sessions/{session_id}")
def rename_session(session_id: str, body: SessionRename, metrics: MetricsStore = Depends(get_metrics)):
    model = RENAMEABLE.get(body.techName.strip().lower())
    if model is None:
        raise BadRequest("Invalid Technology Name")

    with metrics.session_scope() as s:
        res = s.execute(
            update(model).where(model.session_id == session_id).values(session_name=body.sessionName.strip())
        )
        if res.rowcount == 0:
            raise NotFound("Session not found")

    logger.info("renamed %s session %s (%d rows)", body.techName, session_id, res.rowcount)
    return {"message": "session name updated"}
